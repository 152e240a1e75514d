"""
Catch Game Server — Configuration
Values come from the environment (a local .env is loaded if present).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


def _float(name, default):
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


def _int(name, default):
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else default


# ═══════════════════════════════════════
# PLAYERS SHEET (Google Sheets API, service account)
# ═══════════════════════════════════════

PLAYERS_SHEET_ID = os.environ.get("PLAYERS_SHEET_ID", "")
PLAYERS_TAB_NAME = os.environ.get("PLAYERS_TAB_NAME", "Players")
PLAYERS_COLUMN = os.environ.get("PLAYERS_COLUMN", "A")

# Base64 JSON is preferred (survives hosting env var editors intact)
GOOGLE_SERVICE_ACCOUNT_JSON_B64 = os.environ.get("GOOGLE_SERVICE_ACCOUNT_JSON_B64", "")
GOOGLE_SERVICE_ACCOUNT_JSON = os.environ.get("GOOGLE_SERVICE_ACCOUNT_JSON", "")

GOOGLE_REQUEST_TIMEOUT_SECONDS = _float("GOOGLE_REQUEST_TIMEOUT_SECONDS", 15.0)
SHEETS_CLIENT_TTL_SECONDS = _int("SHEETS_CLIENT_TTL_SECONDS", 300)   # Authorized worksheet handle lifetime
WRITE_LOCK_TIMEOUT_SECONDS = _float("WRITE_LOCK_TIMEOUT_SECONDS", 60.0)


# ═══════════════════════════════════════
# CATCH FEED (published CSV)
# ═══════════════════════════════════════

RECEIVERS_SHEET_URL = os.environ.get("RECEIVERS_SHEET_URL", "")
CATCH_COLUMN = os.environ.get("CATCH_COLUMN", "catch")
CATCH_TOUCHDOWN_RATE = _float("CATCH_TOUCHDOWN_RATE", 0.22)   # Odds of a touchdown in "sb" mode
CATCH_FEED_TIMEOUT_SECONDS = _float("CATCH_FEED_TIMEOUT_SECONDS", 15.0)
CATCH_CACHE_TTL_SECONDS = _int("CATCH_CACHE_TTL_SECONDS", 0)  # 0 = always refetch


# ═══════════════════════════════════════
# IMAGES
# ═══════════════════════════════════════

IMAGES_DIR = Path(os.environ.get("IMAGES_DIR", PROJECT_ROOT / "public" / "images"))
IMAGE_BATCH_DEFAULT = 60
IMAGE_BATCH_MAX = 200


# ═══════════════════════════════════════
# SERVER
# ═══════════════════════════════════════

SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
SERVER_PORT = _int("PORT", 3000)
DEBUG = os.environ.get("DEBUG", "").lower() in ("1", "true", "yes")
