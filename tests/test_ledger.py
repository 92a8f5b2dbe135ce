"""
Tests for the approval ledger (approved-reviews JSON file).
"""

import json

import pytest

from flex_reviews.errors import (
    AlreadyApprovedError,
    LedgerNotFoundError,
    LedgerWriteError,
    ReviewNotFoundError,
)
from flex_reviews.ledger import ApprovalLedger
from flex_reviews.normalize import normalize_reviews


@pytest.fixture
def reviews(raw_reviews):
    return normalize_reviews(raw_reviews)


def test_empty_ledger_lists_nothing(ledger):
    assert ledger.list_approved() == []
    assert ledger.list_approved(listing_id=101) == []


def test_approve_then_list(ledger, reviews):
    approved = ledger.approve(7, reviews)

    assert approved.id == 7
    assert approved.is_approved is True
    assert approved.approved_at
    assert approved.average_rating == 9.0

    listed = ledger.list_approved()
    assert [r.id for r in listed] == [7]
    assert listed[0].approved_at == approved.approved_at
    assert ledger.is_approved(7)


def test_approve_creates_directory_and_json_array(ledger, reviews):
    assert not ledger.path.parent.exists()

    ledger.approve(8, reviews)

    with ledger.path.open() as f:
        data = json.load(f)
    assert isinstance(data, list)
    assert data[0]["id"] == 8
    assert data[0]["is_approved"] is True


def test_approve_unknown_review(ledger, reviews):
    with pytest.raises(ReviewNotFoundError):
        ledger.approve(999, reviews)
    assert not ledger.path.exists()


def test_approve_twice_is_rejected(ledger, reviews):
    ledger.approve(7, reviews)

    with pytest.raises(AlreadyApprovedError):
        ledger.approve(7, reviews)

    assert [r.id for r in ledger.list_approved()] == [7]


def test_unapprove_removes_only_that_review(ledger, reviews):
    ledger.approve(7, reviews)
    ledger.approve(8, reviews)

    ledger.unapprove(7)

    assert [r.id for r in ledger.list_approved()] == [8]
    assert not ledger.is_approved(7)


def test_approve_unapprove_round_trip(ledger, reviews):
    ledger.approve(7, reviews)
    ledger.unapprove(7)
    assert ledger.list_approved() == []

    ledger.approve(7, reviews)
    assert [r.id for r in ledger.list_approved()] == [7]


def test_unapprove_without_ledger_file(ledger):
    with pytest.raises(LedgerNotFoundError, match="No approved reviews found"):
        ledger.unapprove(7)


def test_unapprove_unknown_id(ledger, reviews):
    ledger.approve(7, reviews)

    with pytest.raises(ReviewNotFoundError, match="not found in approved list"):
        ledger.unapprove(8)


def test_list_filtered_by_listing_id(ledger, reviews):
    for review_id in (7, 8, 9, 10):
        ledger.approve(review_id, reviews)

    assert [r.id for r in ledger.list_approved(listing_id=101)] == [7, 9]
    assert [r.id for r in ledger.list_approved(listing_id="102")] == [8]
    assert ledger.list_approved(listing_id=104) == []


def test_instances_share_the_file(tmp_path, reviews):
    path = tmp_path / "approvedReviews.json"
    ApprovalLedger(path).approve(7, reviews)

    with pytest.raises(AlreadyApprovedError):
        ApprovalLedger(path).approve(7, reviews)


def test_write_failure_is_reported(tmp_path, reviews):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    ledger = ApprovalLedger(blocker / "approvedReviews.json")

    with pytest.raises(LedgerWriteError):
        ledger.approve(7, reviews)
