"""
Google Sheets gateway for the players tab (service account auth via gspread).

All gspread / transport / auth failures leave this module as BackingStoreError.
"""

import base64
import binascii
import json
import logging
import threading
from contextlib import contextmanager

import gspread
import requests
from cachetools import TTLCache
from google.auth.exceptions import GoogleAuthError

from catch_server import config
from catch_server.errors import BackingStoreError

log = logging.getLogger("catch-server.sheets")

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Authorized worksheet handles only, never row data
_worksheet_cache = TTLCache(maxsize=8, ttl=config.SHEETS_CLIENT_TTL_SECONDS)
_worksheet_cache_lock = threading.Lock()


@contextmanager
def _sheet_call(action):
    try:
        yield
    except gspread.exceptions.WorksheetNotFound as e:
        log.warning(f"Players tab not found while trying to {action}: {e}")
        raise BackingStoreError(f"Tab not found: {e}") from e
    except (gspread.exceptions.GSpreadException, requests.RequestException, GoogleAuthError) as e:
        log.warning(f"Sheets call failed ({action}): {e}")
        raise BackingStoreError(f"Failed to {action} players sheet", details=str(e)) from e


def load_service_account_info():
    """Service account JSON from env: base64 preferred, raw JSON as fallback."""
    b64 = config.GOOGLE_SERVICE_ACCOUNT_JSON_B64.strip()
    raw = config.GOOGLE_SERVICE_ACCOUNT_JSON.strip()
    try:
        if b64:
            return json.loads(base64.b64decode(b64).decode("utf-8"))
        if raw:
            info = json.loads(raw)
            # Keys pasted into env editors often carry literal "\n"
            if "\\n" in info.get("private_key", ""):
                info["private_key"] = info["private_key"].replace("\\n", "\n")
            return info
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise BackingStoreError("Invalid service account credentials", details=str(e)) from e
    raise BackingStoreError(
        "Missing env var: GOOGLE_SERVICE_ACCOUNT_JSON_B64 (recommended) or GOOGLE_SERVICE_ACCOUNT_JSON"
    )


def open_worksheet(sheet_id, tab_name, timeout=None):
    info = load_service_account_info()
    try:
        client = gspread.service_account_from_dict(info, scopes=SCOPES)
    except (ValueError, KeyError) as e:
        raise BackingStoreError("Invalid service account credentials", details=str(e)) from e
    client.set_timeout(timeout)
    with _sheet_call("open"):
        return client.open_by_key(sheet_id).worksheet(tab_name)


class SheetGateway:
    """One column of one worksheet, addressed by 1-indexed row numbers."""

    def __init__(self, worksheet, column="A"):
        self.worksheet = worksheet
        self.column = column.upper()

    @property
    def store_id(self):
        return f"{self.worksheet.spreadsheet.id}/{self.worksheet.title}"

    @property
    def _col_index(self):
        return gspread.utils.a1_to_rowcol(f"{self.column}1")[1]

    def read_column(self):
        """Every cell from row 1 down to the last non-empty one ('' for blanks)."""
        with _sheet_call("read"):
            return self.worksheet.col_values(self._col_index)

    def append_value(self, value):
        with _sheet_call("append to"):
            self.worksheet.append_row(
                [value],
                value_input_option="RAW",
                insert_data_option="INSERT_ROWS",
                table_range=f"{self.column}:{self.column}",
            )

    def delete_rows(self, row_numbers):
        """Delete whole rows in one batch, bottom to top so earlier deletes don't shift later ones."""
        ordered = sorted(set(row_numbers), reverse=True)
        if not ordered:
            return
        requests_body = [{
            "deleteDimension": {
                "range": {
                    "sheetId": self.worksheet.id,
                    "dimension": "ROWS",
                    "startIndex": row - 1,   # 0-based inclusive
                    "endIndex": row,         # 0-based exclusive
                }
            }
        } for row in ordered]
        with _sheet_call("delete from"):
            self.worksheet.spreadsheet.batch_update({"requests": requests_body})


def players_gateway():
    """Gateway for the configured players tab, reusing a cached authorized handle."""
    if not config.PLAYERS_SHEET_ID:
        raise BackingStoreError("Missing env var: PLAYERS_SHEET_ID")

    key = (config.PLAYERS_SHEET_ID, config.PLAYERS_TAB_NAME)
    with _worksheet_cache_lock:
        worksheet = _worksheet_cache.get(key)
        if worksheet is None:
            log.info(f"Opening players sheet {config.PLAYERS_SHEET_ID} (tab {config.PLAYERS_TAB_NAME})")
            worksheet = open_worksheet(
                config.PLAYERS_SHEET_ID,
                config.PLAYERS_TAB_NAME,
                timeout=config.GOOGLE_REQUEST_TIMEOUT_SECONDS,
            )
            _worksheet_cache[key] = worksheet
    return SheetGateway(worksheet, column=config.PLAYERS_COLUMN)
