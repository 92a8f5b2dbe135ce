"""
Hostaway review source.
Loads raw reviews either from a local mock fixture or from the Hostaway API,
always returning the API's {"result": [...]} envelope.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import requests
from fastapi.concurrency import run_in_threadpool

from flex_reviews import config
from flex_reviews.errors import FixtureNotFoundError, SourceFetchError

logger = logging.getLogger(__name__)


def extract_results(envelope) -> list:
    """Return the review list from an API envelope (or the data itself if already a list)."""
    if isinstance(envelope, dict):
        return envelope.get("result", [])
    return envelope


class HostawayClient:
    def __init__(
        self,
        use_mock_data: bool = True,
        fixture_paths: Sequence[Path] = (),
        api_base: str = config.HOSTAWAY_API_BASE,
        account_id: str = "",
        api_key: str = "",
        timeout: float = config.HOSTAWAY_TIMEOUT_SECONDS,
    ):
        self.use_mock_data = use_mock_data
        self.fixture_paths = [Path(p) for p in fixture_paths]
        self.api_base = api_base.rstrip("/")
        self.account_id = account_id
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls):
        return cls(
            use_mock_data=config.USE_MOCK_DATA,
            fixture_paths=config.FIXTURE_PATHS,
            api_base=config.HOSTAWAY_API_BASE,
            account_id=config.HOSTAWAY_ACCOUNT_ID,
            api_key=config.HOSTAWAY_API_KEY,
            timeout=config.HOSTAWAY_TIMEOUT_SECONDS,
        )

    # ----------------- Async -----------------
    async def fetch_reviews(self) -> dict:
        """Fetch the raw review envelope from the configured source."""
        logger.info(f"Fetching Hostaway reviews (mode={'mock' if self.use_mock_data else 'api'})")
        if self.use_mock_data:
            return await run_in_threadpool(self._load_fixture)
        return await run_in_threadpool(self._fetch_from_api)

    # ----------------- Sync -----------------
    def fetch_reviews_sync(self) -> List[dict]:
        """
        Fixture-only variant for callers that cannot await.
        Never raises: any failure is logged and an empty list returned.
        """
        try:
            return extract_results(self._load_fixture())
        except SourceFetchError as e:
            logger.error(f"Error reading mock reviews: {e}")
            return []

    # ----------------- Fixture -----------------
    def find_fixture(self) -> Optional[Path]:
        for path in self.fixture_paths:
            if path.exists():
                return path
        return None

    def _load_fixture(self) -> dict:
        path = self.find_fixture()
        if path is None:
            raise FixtureNotFoundError(
                "Mock data file not found. Looked in: "
                + ", ".join(str(p) for p in self.fixture_paths)
            )
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            # ValueError covers both malformed JSON and undecodable bytes
            raise SourceFetchError(f"Failed to load mock data: {e}") from e

        logger.info(f"Loaded {_count(data)} reviews from mock data ({path})")
        return data

    # ----------------- API Fetch -----------------
    def _fetch_from_api(self) -> dict:
        url = f"{self.api_base}/reviews"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Account-Id": str(self.account_id),
            "Content-Type": "application/json",
        }
        try:
            resp = requests.get(
                url,
                headers=headers,
                params={"accountId": self.account_id},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            message = _error_message(e.response)
            logger.error(f"Hostaway API responded with {status}: {message}")
            raise SourceFetchError(f"Hostaway API Error: {status} - {message}", status=status) from e
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"Hostaway API unreachable: {e}")
            raise SourceFetchError(
                "Hostaway API: No response received. Please check your connection."
            ) from e
        except requests.RequestException as e:
            logger.error(f"Hostaway API request failed: {e}")
            raise SourceFetchError(f"Hostaway API Request Error: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise SourceFetchError(f"Hostaway API returned invalid JSON: {e}", status=resp.status_code) from e

        logger.info(f"Fetched {_count(data)} reviews from Hostaway API")
        return data


def _error_message(response) -> str:
    if response is None:
        return "Unknown error"
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return "Unknown error"


def _count(envelope) -> int:
    results = extract_results(envelope)
    return len(results) if isinstance(results, list) else 0
