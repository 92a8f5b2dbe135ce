import json

import pytest

from flex_reviews.hostaway import HostawayClient
from flex_reviews.ledger import ApprovalLedger
from flex_reviews.service import ReviewService


RAW_REVIEWS = [
    {
        "id": 7,
        "type": "guest-to-host",
        "status": "published",
        "rating": None,
        "publicReview": "Spotless flat, great host",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 8},
            {"category": "communication", "rating": 10},
        ],
        "submittedAt": "2024-03-10 14:30:00",
        "guestName": "Amelia Clarke",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    },
    {
        "id": 8,
        "type": "host-to-guest",
        "status": "published",
        "rating": 10,
        "publicReview": "Lovely guests",
        "reviewCategory": [],
        "submittedAt": "2024-01-05 09:00:00",
        "guestName": "Shane Finkelstein",
        "listingName": "Beachfront Studio",
    },
    {
        "id": 9,
        "type": "guest-to-host",
        "status": "pending",
        "rating": None,
        "publicReview": "Heating was broken",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 5},
            {"category": "communication", "rating": 4},
        ],
        "submittedAt": "2024-06-20 20:15:00",
        "guestName": "Tom Becker",
        "listingName": "Downtown Loft - 2BR",
    },
    {
        "id": 10,
        "type": "guest-to-host",
        "status": "published",
        "publicReview": "No score given",
        "submittedAt": "2024-02-14 12:00:00",
        "guestName": "Lucas Martin",
        "listingName": "Unlisted Cottage",
    },
]


@pytest.fixture
def raw_reviews():
    return [dict(r) for r in RAW_REVIEWS]


@pytest.fixture
def fixture_file(tmp_path):
    path = tmp_path / "mock_reviews.json"
    path.write_text(json.dumps({"status": "success", "result": RAW_REVIEWS}), encoding="utf-8")
    return path


@pytest.fixture
def ledger(tmp_path):
    return ApprovalLedger(tmp_path / "data" / "approvedReviews.json")


@pytest.fixture
def service(fixture_file, ledger):
    client = HostawayClient(use_mock_data=True, fixture_paths=[fixture_file])
    return ReviewService(client=client, ledger=ledger)
