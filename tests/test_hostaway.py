"""
Tests for the Hostaway review source (mock fixture and live API).
The live API is never called; requests.get is patched.
"""

import asyncio
import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from flex_reviews.errors import FixtureNotFoundError, SourceFetchError
from flex_reviews.hostaway import HostawayClient, extract_results


def _write(path, reviews):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"result": reviews}), encoding="utf-8")
    return path


def _api_client():
    return HostawayClient(
        use_mock_data=False,
        api_base="https://api.example.test/v1/",
        account_id="61148",
        api_key="secret-key",
    )


def test_first_existing_fixture_wins(tmp_path):
    missing = tmp_path / "mock" / "reviews.json"
    first = _write(tmp_path / "data" / "mockReviews.json", [{"id": 1}])
    second = _write(tmp_path / "data" / "reviews.json", [{"id": 2}])
    client = HostawayClient(use_mock_data=True, fixture_paths=[missing, first, second])

    data = asyncio.run(client.fetch_reviews())

    assert client.find_fixture() == first
    assert extract_results(data) == [{"id": 1}]


def test_missing_fixture_raises(tmp_path):
    client = HostawayClient(use_mock_data=True, fixture_paths=[tmp_path / "nope.json"])

    with pytest.raises(FixtureNotFoundError, match="Mock data file not found"):
        asyncio.run(client.fetch_reviews())


def test_invalid_fixture_json_raises(tmp_path):
    path = tmp_path / "reviews.json"
    path.write_text("{not json", encoding="utf-8")
    client = HostawayClient(use_mock_data=True, fixture_paths=[path])

    with pytest.raises(SourceFetchError, match="Failed to load mock data"):
        asyncio.run(client.fetch_reviews())


def test_undecodable_fixture_raises(tmp_path):
    path = tmp_path / "reviews.json"
    path.write_bytes(b"\xff\xfe not utf-8")
    client = HostawayClient(use_mock_data=True, fixture_paths=[path])

    with pytest.raises(SourceFetchError, match="Failed to load mock data"):
        asyncio.run(client.fetch_reviews())
    assert client.fetch_reviews_sync() == []


def test_sync_fetch_returns_results(fixture_file):
    client = HostawayClient(use_mock_data=True, fixture_paths=[fixture_file])

    results = client.fetch_reviews_sync()
    assert [r["id"] for r in results] == [7, 8, 9, 10]


def test_sync_fetch_swallows_errors(tmp_path):
    client = HostawayClient(use_mock_data=True, fixture_paths=[tmp_path / "nope.json"])
    assert client.fetch_reviews_sync() == []


def test_sync_fetch_always_reads_fixture(fixture_file):
    client = HostawayClient(use_mock_data=False, fixture_paths=[fixture_file])

    with patch("flex_reviews.hostaway.requests.get") as mock_get:
        results = client.fetch_reviews_sync()

    mock_get.assert_not_called()
    assert len(results) == 4


def test_extract_results_accepts_bare_list():
    assert extract_results([{"id": 1}]) == [{"id": 1}]
    assert extract_results({"status": "success"}) == []


def test_api_fetch_sends_credentials():
    mock_response = MagicMock(status_code=200)
    mock_response.json.return_value = {"status": "success", "result": [{"id": 1}]}

    with patch("flex_reviews.hostaway.requests.get", return_value=mock_response) as mock_get:
        data = asyncio.run(_api_client().fetch_reviews())

    assert data["result"] == [{"id": 1}]
    args, kwargs = mock_get.call_args
    assert args[0] == "https://api.example.test/v1/reviews"
    assert kwargs["headers"]["Authorization"] == "Bearer secret-key"
    assert kwargs["params"] == {"accountId": "61148"}
    assert kwargs["timeout"] == 10


def test_api_error_status_is_translated():
    mock_response = MagicMock(status_code=403)
    mock_response.json.return_value = {"status": "fail", "message": "Invalid token"}
    mock_response.raise_for_status.side_effect = requests.HTTPError(response=mock_response)

    with patch("flex_reviews.hostaway.requests.get", return_value=mock_response):
        with pytest.raises(SourceFetchError) as exc_info:
            asyncio.run(_api_client().fetch_reviews())

    assert exc_info.value.status == 403
    assert "403 - Invalid token" in str(exc_info.value)


def test_api_timeout_is_translated():
    with patch("flex_reviews.hostaway.requests.get", side_effect=requests.Timeout("timed out")):
        with pytest.raises(SourceFetchError, match="No response received") as exc_info:
            asyncio.run(_api_client().fetch_reviews())

    assert exc_info.value.status is None


def test_api_invalid_json_is_translated():
    mock_response = MagicMock(status_code=200)
    mock_response.json.side_effect = ValueError("Expecting value")

    with patch("flex_reviews.hostaway.requests.get", return_value=mock_response):
        with pytest.raises(SourceFetchError, match="invalid JSON"):
            asyncio.run(_api_client().fetch_reviews())
