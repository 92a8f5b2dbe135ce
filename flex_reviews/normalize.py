"""
Review normalization.
Maps raw Hostaway review records onto NormalizedReview, computing the
average rating, category map, rating label and sortable date fields.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import pandas as pd

from flex_reviews.listings import ListingLookup
from flex_reviews.models import NormalizedReview

logger = logging.getLogger(__name__)

# (inclusive lower bound, label), checked top-down
RATING_LABELS = [
    (9.5, "Excellent"),
    (8.5, "Very Good"),
    (7.5, "Good"),
    (6.5, "Fair"),
]
HIGH_RATING_THRESHOLD = 9


def format_date(dt: datetime) -> str:
    """'D Mon YYYY' in en-GB style, where September is abbreviated 'Sept'."""
    month = "Sept" if dt.month == 9 else f"{dt:%b}"
    return f"{dt.day} {month} {dt.year}"


def get_rating_label(rating: Optional[float]) -> str:
    if rating is None:
        return "No Rating"
    for lower_bound, label in RATING_LABELS:
        if rating >= lower_bound:
            return label
    return "Poor"


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a Hostaway date string; naive values are taken as UTC. None if unparseable."""
    if isinstance(value, datetime):
        dt = value
    elif not value or not isinstance(value, str):
        return None
    else:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            parsed = pd.to_datetime(value, errors="coerce", utc=True)
            if pd.isna(parsed):
                return None
            dt = parsed.to_pydatetime()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def average_rating(review: dict) -> Optional[float]:
    category_ratings = review.get("reviewCategory") or []
    if category_ratings:
        total = sum(float(cat.get("rating") or 0) for cat in category_ratings)
        mean = Decimal(str(total / len(category_ratings)))
        return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    if review.get("rating") is not None:
        return float(review["rating"])
    return None


def _safe_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ReviewNormalizer:
    """Turns raw review lists into NormalizedReview lists without ever raising."""

    def __init__(self, listing_lookup: Optional[ListingLookup] = None):
        self.listing_lookup = listing_lookup or ListingLookup()

    def normalize(self, raw_reviews) -> List[NormalizedReview]:
        if not isinstance(raw_reviews, (list, tuple)):
            logger.warning(f"Invalid reviews data, expected a list: {raw_reviews!r}")
            return []

        normalized = []
        for review in raw_reviews:
            try:
                normalized.append(self._normalize_one(review))
            except Exception as e:
                logger.error(f"Error normalizing review {review!r}: {e}")
                normalized.append(self._degraded(review))
        return normalized

    def _normalize_one(self, review: dict) -> NormalizedReview:
        avg = average_rating(review)

        categories = {}
        for cat in review.get("reviewCategory") or []:
            if cat.get("category") and "rating" in cat:
                categories[cat["category"]] = cat["rating"]

        submitted_at = review.get("submittedAt")
        dt = parse_timestamp(submitted_at)

        listing_name = review.get("listingName")
        listing_id = review.get("listingId") or self.listing_lookup.resolve(listing_name)

        comment = review.get("publicReview")
        review_type = review.get("type")

        return NormalizedReview(
            id=int(review["id"]),
            type=review_type,
            status=review.get("status"),
            guest_name=review.get("guestName"),
            listing_name=listing_name,
            listing_id=listing_id,
            average_rating=avg,
            comment=str(comment) if comment else "",
            categories=categories,
            submitted_at=submitted_at,
            is_host_review=review_type == "host-to-guest",
            is_guest_review=review_type == "guest-to-host",
            has_high_rating=avg is not None and avg >= HIGH_RATING_THRESHOLD,
            rating_label=get_rating_label(avg),
            formatted_date=format_date(dt) if dt else submitted_at,
            timestamp=int(dt.timestamp() * 1000) if dt else 0,
            year=dt.year if dt else None,
            month=dt.month if dt else None,
        )

    @staticmethod
    def _degraded(review) -> NormalizedReview:
        raw = review if isinstance(review, dict) else {}
        return NormalizedReview(
            id=_safe_int(raw.get("id")),
            type=raw.get("type") or "unknown",
            status=raw.get("status") or "unknown",
            guest_name=raw.get("guestName") or "Unknown",
            listing_name=raw.get("listingName") or "Unknown",
            average_rating=None,
            comment=str(raw.get("publicReview") or ""),
            categories={},
            submitted_at=raw.get("submittedAt") or datetime.now(timezone.utc).isoformat(),
        )


def normalize_reviews(raw_reviews, listing_lookup: Optional[ListingLookup] = None) -> List[NormalizedReview]:
    return ReviewNormalizer(listing_lookup).normalize(raw_reviews)
