"""
Review service: Hostaway source -> normalizer -> filters / approval ledger.

Nothing is cached; every call re-fetches the source and re-reads the ledger.
"""

from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from flex_reviews import config
from flex_reviews.errors import ReviewNotFoundError
from flex_reviews.hostaway import HostawayClient, extract_results
from flex_reviews.ledger import ApprovalLedger
from flex_reviews.listings import ListingLookup
from flex_reviews.models import ApprovedReview, NormalizedReview
from flex_reviews.normalize import ReviewNormalizer
from flex_reviews.query import FilterCriteria, compute_stats, filter_reviews, sort_reviews


class ReviewService:
    def __init__(
        self,
        client: HostawayClient,
        ledger: ApprovalLedger,
        listing_lookup: Optional[ListingLookup] = None,
    ):
        self.client = client
        self.ledger = ledger
        self.normalizer = ReviewNormalizer(listing_lookup)

    @classmethod
    def from_config(cls):
        return cls(
            client=HostawayClient.from_config(),
            ledger=ApprovalLedger(config.APPROVED_REVIEWS_PATH),
        )

    # ----------------- Read path -----------------
    async def get_normalized_reviews(self) -> List[NormalizedReview]:
        data = await self.client.fetch_reviews()
        return self.normalizer.normalize(extract_results(data))

    def get_normalized_reviews_sync(self) -> List[NormalizedReview]:
        """Mock fixture only; returns [] instead of raising."""
        return self.normalizer.normalize(self.client.fetch_reviews_sync())

    async def get_review(self, review_id: int) -> NormalizedReview:
        reviews = await self.get_normalized_reviews()
        for review in reviews:
            if review.id == review_id:
                return review
        raise ReviewNotFoundError(f"Review {review_id} not found")

    async def search(
        self,
        criteria: FilterCriteria,
        sort_by: Optional[str] = None,
        sort_order: str = "desc",
    ) -> List[NormalizedReview]:
        reviews = filter_reviews(await self.get_normalized_reviews(), criteria)
        if sort_by:
            reviews = sort_reviews(reviews, sort_by, sort_order)
        return reviews

    async def get_reviews_by_listing(self, listing_name: str) -> List[NormalizedReview]:
        return await self.search(FilterCriteria(listing=listing_name))

    async def get_reviews_by_type(self, review_type: str) -> List[NormalizedReview]:
        return await self.search(FilterCriteria(type=review_type))

    async def get_stats(self) -> dict:
        return compute_stats(await self.get_normalized_reviews())

    # ----------------- Approvals -----------------
    async def approve(self, review_id: int) -> ApprovedReview:
        reviews = await self.get_normalized_reviews()
        return await run_in_threadpool(self.ledger.approve, review_id, reviews)

    async def unapprove(self, review_id: int) -> None:
        await run_in_threadpool(self.ledger.unapprove, review_id)

    async def get_approved(self, listing_id=None) -> List[ApprovedReview]:
        return await run_in_threadpool(self.ledger.list_approved, listing_id)
