"""
Catch feed — a published Google Sheet CSV with one catch outcome per row.
Read-only; the configured column is returned as a list of strings.
"""

import csv
import io
import logging

import requests
from cachetools import TTLCache

from catch_server import config
from catch_server.errors import FeedUnavailableError

log = logging.getLogger("catch-server.catch-feed")

_HTTP_HEADERS = {"User-Agent": "CatchServer/1.0"}

# Tried in order when the requested column isn't in the header
_FALLBACK_COLUMNS = ("result", "play")

catch_cache = TTLCache(maxsize=1, ttl=max(config.CATCH_CACHE_TTL_SECONDS, 1))


def _column_index(header, column_name):
    names = [h.strip().lower() for h in header]
    for candidate in (column_name.lower(), *_FALLBACK_COLUMNS):
        if candidate in names:
            return names.index(candidate)
    log.warning(f"Column '{column_name}' not in feed header {header}, using first column")
    return 0


def fetch_column(url, column_name, timeout=15):
    """Fetch a CSV and return the trimmed, non-empty values of one column in row order."""
    try:
        resp = requests.get(url, headers=_HTTP_HEADERS, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        log.warning(f"Catch feed fetch failed: {e}")
        raise FeedUnavailableError("Failed to read receivers sheet", details=str(e)) from e
    resp.encoding = "utf-8"

    reader = csv.reader(io.StringIO(resp.text.lstrip("\ufeff")))
    header = next(reader, None)
    if not header:
        return []
    col_index = _column_index(header, column_name)

    values = []
    for row in reader:
        if len(row) <= col_index:
            continue
        text = row[col_index].strip()
        if text:
            values.append(text)
    return values


def fetch_catches():
    """Catch outcomes from the configured feed (cached only if CATCH_CACHE_TTL_SECONDS > 0)."""
    if not config.RECEIVERS_SHEET_URL:
        raise FeedUnavailableError("Missing env var: RECEIVERS_SHEET_URL")

    use_cache = config.CATCH_CACHE_TTL_SECONDS > 0
    if use_cache:
        cached = catch_cache.get("catches")
        if cached is not None:
            return cached

    catches = fetch_column(
        config.RECEIVERS_SHEET_URL,
        config.CATCH_COLUMN,
        timeout=config.CATCH_FEED_TIMEOUT_SECONDS,
    )
    log.info(f"Fetched {len(catches)} catches from feed")
    if use_cache and catches:
        catch_cache["catches"] = catches
    return catches
