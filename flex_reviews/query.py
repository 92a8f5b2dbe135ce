"""
Filtering, sorting and statistics over normalized reviews.
"""

import locale
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Union

import pandas as pd

from flex_reviews.models import NormalizedReview
from flex_reviews.normalize import parse_timestamp

DateLike = Union[str, datetime, None]


@dataclass
class FilterCriteria:
    """Optional filters, combined with AND. Unset or empty fields are ignored."""
    listing: Optional[str] = None        # case-insensitive substring of listing name
    min_rating: Optional[float] = None   # inclusive; unrated reviews never pass
    type: Optional[str] = None
    status: Optional[str] = None
    start_date: DateLike = None          # submitted on or after
    end_date: DateLike = None            # submitted on or before
    search: Optional[str] = None         # guest name, listing name or comment

    def __post_init__(self):
        self.start_date = _parse_bound(self.start_date, "start date")
        self.end_date = _parse_bound(self.end_date, "end date")
        if self.min_rating == "":
            self.min_rating = None
        if self.min_rating is not None:
            self.min_rating = float(self.min_rating)

    def matches(self, review: NormalizedReview) -> bool:
        if self.listing and self.listing.lower() not in (review.listing_name or "").lower():
            return False

        if self.min_rating is not None:
            if review.average_rating is None or review.average_rating < self.min_rating:
                return False

        if self.type and review.type != self.type:
            return False

        if self.status and review.status != self.status:
            return False

        if self.start_date or self.end_date:
            submitted = parse_timestamp(review.submitted_at)
            if submitted is None:
                return False
            if self.start_date and submitted < self.start_date:
                return False
            if self.end_date and submitted > self.end_date:
                return False

        if self.search:
            needle = self.search.lower()
            haystacks = (review.guest_name, review.listing_name, review.comment)
            if not any(needle in (h or "").lower() for h in haystacks):
                return False

        return True


def _parse_bound(value: DateLike, name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid {name}: {value!r}")
    return parsed


def filter_reviews(reviews: Iterable[NormalizedReview], criteria: FilterCriteria) -> List[NormalizedReview]:
    return [r for r in reviews if criteria.matches(r)]


# ----------------- Sorting -----------------
def _collate(value):
    # case-folded first so the C locale does not put every capital before lowercase
    value = value or ""
    return locale.strxfrm(value.casefold()), locale.strxfrm(value)


SORT_KEYS = {
    "date": lambda r: r.timestamp or 0,
    "rating": lambda r: r.average_rating or 0,
    "name": lambda r: _collate(r.guest_name),
    "listing": lambda r: _collate(r.listing_name),
}
SORT_ORDERS = ("asc", "desc")


def sort_reviews(reviews: Iterable[NormalizedReview], sort_by: str = "date", order: str = "desc") -> List[NormalizedReview]:
    """Stable sort; ties keep their incoming order in both directions."""
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort field: {sort_by!r}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {order!r}")
    return sorted(reviews, key=SORT_KEYS[sort_by], reverse=order == "desc")


# ----------------- Statistics -----------------
def compute_stats(reviews: List[NormalizedReview]) -> dict:
    stats = {
        "total": len(reviews),
        "by_type": {},
        "by_status": {},
        "by_listing": {},
        "average_rating": 0,
        "rating_distribution": {
            "excellent": 0,  # 9-10
            "good": 0,       # 7-8.99
            "average": 0,    # 5-6.99
            "poor": 0,       # <5
        },
    }
    if not reviews:
        return stats

    df = pd.DataFrame([
        {
            "type": r.type,
            "status": r.status,
            "listing_name": r.listing_name,
            "average_rating": r.average_rating,
        }
        for r in reviews
    ])

    for column, key in (("type", "by_type"), ("status", "by_status"), ("listing_name", "by_listing")):
        counts = df[column].fillna("unknown").value_counts(sort=False)
        stats[key] = {str(k): int(v) for k, v in counts.items()}

    ratings = pd.to_numeric(df["average_rating"], errors="coerce").dropna()
    if not ratings.empty:
        stats["average_rating"] = round(float(ratings.mean()), 2)
        stats["rating_distribution"] = {
            "excellent": int((ratings >= 9).sum()),
            "good": int(((ratings >= 7) & (ratings < 9)).sum()),
            "average": int(((ratings >= 5) & (ratings < 7)).sum()),
            "poor": int((ratings < 5).sum()),
        }
    return stats
