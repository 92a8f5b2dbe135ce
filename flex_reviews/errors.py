"""Exceptions raised by the review core and mapped to HTTP errors by the API."""


class ReviewsError(Exception):
    """Base exception for review-related errors"""
    pass


class SourceFetchError(ReviewsError):
    """Raised when the review source (fixture or Hostaway API) cannot be read"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status


class FixtureNotFoundError(SourceFetchError):
    """Raised when none of the candidate fixture files exist"""
    pass


class ReviewNotFoundError(ReviewsError):
    """Raised when a review ID is unknown"""
    pass


class LedgerNotFoundError(ReviewNotFoundError):
    """Raised when the approved-reviews file has not been created yet"""
    pass


class AlreadyApprovedError(ReviewsError):
    """Raised when approving a review that is already in the ledger"""
    pass


class LedgerWriteError(ReviewsError):
    """Raised when the approved-reviews file cannot be written"""
    pass
