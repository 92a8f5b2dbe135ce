"""
Configuration loader.
Reads settings from the environment (and a local .env file) once at import time.
"""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ----------------- Review source -----------------
# Mock data is the default; only an explicit "false" switches to the live API
USE_MOCK_DATA = os.getenv("USE_MOCK_DATA", "true").lower() != "false"

HOSTAWAY_API_BASE = os.getenv("HOSTAWAY_API_BASE", "https://api.hostaway.com/v1")
HOSTAWAY_ACCOUNT_ID = os.getenv("HOSTAWAY_ACCOUNT_ID", "")
HOSTAWAY_API_KEY = os.getenv("HOSTAWAY_API_KEY", "")
HOSTAWAY_TIMEOUT_SECONDS = 10

# First existing file wins
DEFAULT_FIXTURE_PATHS = [
    PROJECT_ROOT / "mock_reviews.json",
    PROJECT_ROOT / "mock" / "reviews.json",
    PROJECT_ROOT / "data" / "mockReviews.json",
    PROJECT_ROOT / "data" / "reviews.json",
]
_fixture_env = os.getenv("FIXTURE_PATHS")
FIXTURE_PATHS = (
    [Path(p) for p in _fixture_env.split(os.pathsep) if p]
    if _fixture_env
    else DEFAULT_FIXTURE_PATHS
)

# ----------------- Storage -----------------
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
APPROVED_REVIEWS_PATH = Path(
    os.getenv("APPROVED_REVIEWS_PATH", str(DATA_DIR / "approvedReviews.json"))
)

# ----------------- HTTP -----------------
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# ----------------- Logging -----------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = LOG_LEVEL):
    """Configure logging for the whole application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
