"""
Review data models.
Every review, whatever source it comes from, is converted into these shapes.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Dict, Optional


@dataclass(frozen=True)
class NormalizedReview:
    """A Hostaway review in the canonical shape served to the dashboard."""
    id: int
    type: str                   # "host-to-guest" or "guest-to-host"
    status: str
    guest_name: str
    listing_name: str
    listing_id: Optional[int] = None
    average_rating: Optional[float] = None   # None when the review has no rating data
    comment: str = ""
    categories: Dict[str, float] = field(default_factory=dict)
    submitted_at: Optional[str] = None

    # Presentation / sorting fields
    is_host_review: bool = False
    is_guest_review: bool = False
    has_high_rating: bool = False
    rating_label: str = "No Rating"
    formatted_date: Optional[str] = None
    timestamp: int = 0          # epoch millis, 0 when the date is unparseable
    year: Optional[int] = None
    month: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        # Legacy camelCase aliases kept for older dashboard clients
        data["overallRating"] = self.average_rating
        data["reviewText"] = self.comment
        data["guestName"] = self.guest_name
        data["listingName"] = self.listing_name
        return data

    @classmethod
    def from_dict(cls, data: dict):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class ApprovedReview(NormalizedReview):
    """A normalized review stamped by an operator for public display."""
    approved_at: str = ""
    is_approved: bool = True

    @classmethod
    def approve(cls, review: NormalizedReview, approved_at: Optional[datetime] = None):
        stamp = approved_at or datetime.now(timezone.utc)
        base = {f.name: getattr(review, f.name) for f in fields(NormalizedReview)}
        return cls(**base, approved_at=stamp.isoformat(), is_approved=True)

