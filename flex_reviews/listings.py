"""Listing-name to listing-ID lookup used when Hostaway omits listingId."""

from typing import Dict, Optional

# Known Flex Living listings (kept in sync with the property pages)
DEFAULT_LISTING_IDS = {
    "2B N1 A - 29 Shoreditch Heights": 101,
    "1B E1 A - 39 Shoreditch Heights": 102,
    "Beachfront Studio": 102,
    "Downtown Loft - 2BR": 101,
    "City Center Penthouse": 103,
    "Garden View Apartment": 104,
}


class ListingLookup:
    """Resolves a listing name to its ID; unknown names resolve to None."""

    def __init__(self, listing_ids: Optional[Dict[str, int]] = None):
        self.listing_ids = dict(DEFAULT_LISTING_IDS if listing_ids is None else listing_ids)

    def resolve(self, listing_name) -> Optional[int]:
        if not isinstance(listing_name, str):
            return None
        return self.listing_ids.get(listing_name)
