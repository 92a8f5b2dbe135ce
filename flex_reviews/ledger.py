"""
Approval ledger.

The approved-reviews JSON file is the single source of truth for which
reviews appear on the public property pages. Every mutation re-reads and
rewrites the whole file. A process-wide lock serialises mutations within one
process; separate processes sharing the file can still lose updates
(last write wins).
"""

import json
import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from flex_reviews.errors import (
    AlreadyApprovedError,
    LedgerNotFoundError,
    LedgerWriteError,
    ReviewNotFoundError,
)
from flex_reviews.models import ApprovedReview, NormalizedReview

logger = logging.getLogger(__name__)

# One lock per ledger file, shared by every ApprovalLedger in this process
_file_locks = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _file_locks_guard:
        return _file_locks.setdefault(path.resolve(), threading.Lock())


class ApprovalLedger:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def _read(self) -> List[dict]:
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, entries: List[dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save approved reviews to {self.path}: {e}")
            raise LedgerWriteError(f"Failed to save approved reviews: {e}") from e

    def list_approved(self, listing_id=None) -> List[ApprovedReview]:
        """All approved reviews, optionally only those for one listing. Empty if nothing approved yet."""
        if not self.path.exists():
            return []
        approved = [ApprovedReview.from_dict(entry) for entry in self._read()]
        if listing_id is not None:
            approved = [
                r for r in approved
                if r.listing_id is not None and str(r.listing_id) == str(listing_id)
            ]
        return approved

    def is_approved(self, review_id: int) -> bool:
        return any(r.id == review_id for r in self.list_approved())

    def approve(self, review_id: int, reviews: Iterable[NormalizedReview]) -> ApprovedReview:
        """
        Stamp and store the review with this ID.

        Raises:
            ReviewNotFoundError: no review with this ID in `reviews`
            AlreadyApprovedError: the ledger already holds this ID
        """
        review: Optional[NormalizedReview] = next((r for r in reviews if r.id == review_id), None)
        if review is None:
            raise ReviewNotFoundError(f"Review {review_id} not found")

        with self._lock:
            entries = self._read() if self.path.exists() else []
            if any(entry.get("id") == review_id for entry in entries):
                raise AlreadyApprovedError(f"Review {review_id} already approved")

            approved = ApprovedReview.approve(review)
            entries.append(approved.to_dict())
            self._write(entries)

        logger.info(f"Review {review_id} approved")
        return approved

    def unapprove(self, review_id: int) -> None:
        """
        Remove the review with this ID from the ledger.

        Raises:
            LedgerNotFoundError: nothing has been approved yet
            ReviewNotFoundError: the ID is not in the ledger
        """
        with self._lock:
            if not self.path.exists():
                raise LedgerNotFoundError("No approved reviews found")

            entries = self._read()
            index = next((i for i, entry in enumerate(entries) if entry.get("id") == review_id), None)
            if index is None:
                raise ReviewNotFoundError(f"Review {review_id} not found in approved list")

            del entries[index]
            self._write(entries)

        logger.info(f"Review {review_id} removed from approved list")
