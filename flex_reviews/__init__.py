"""Flex Living reviews: Hostaway sourcing, normalization, filtering and approvals."""

__version__ = "1.0.0"
