"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets is used as the persistent backend because:
1. The owner can view (and fix) their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

Records live in one worksheet:

    key | value_json | expires_at

A value whose JSON exceeds CHUNK_SIZE characters is split across
continuation rows named key#1, key#2, ... and joined again on read.
expires_at is epoch seconds (empty = never) and is repeated on every
chunk row. Expired records are treated as absent and deleted the next
time they are read. An unreadable expires_at counts as "never".

TRADEOFFS:
- Every call reads the whole sheet (fine for one person's data)
- No transactions or conditional writes (last writer wins)
- A large value costs several rows, rewritten together on every put
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from moneybook.config import GoogleSheetsSettings, get_settings
from moneybook.services.storage.interface import (
    RecordStoreInterface,
    StorageError,
    StoreUnavailableError,
)


RECORD_COLUMNS = [
    "key",
    "value_json",
    "expires_at",
]

# Sheets rejects cells longer than 50,000 characters
CHUNK_SIZE = 40000

logger = structlog.get_logger(__name__)


def chunk_key(key: str, n: int) -> str:
    """Row name of chunk n of a record."""
    return key if n == 0 else f"{key}#{n}"


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailableError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_records_sheet(self) -> gspread.Worksheet:
        """Get or create the Records worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.records_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.records_sheet_name,
                rows=1000,
                cols=len(RECORD_COLUMNS),
            )
            sheet.append_row(RECORD_COLUMNS)
        return sheet


class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    gspread is a blocking client, so every call runs in a worker thread.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._client = client or GoogleSheetsClient()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _find_rows(self, rows: list[list[str]], key: str) -> dict[int, tuple[int, list[str]]]:
        """
        Map chunk number -> (sheet row number, row) for a key.

        Chunk 0 is the row named `key`, chunk n the row named `key#n`.
        Row 1 is the header.
        """
        prefix = f"{key}#"
        found = {}
        for idx, row in enumerate(rows[1:], start=2):
            if not row:
                continue
            name = row[0]
            if name == key:
                found[0] = (idx, row)
            elif name.startswith(prefix) and name[len(prefix):].isdigit():
                found[int(name[len(prefix):])] = (idx, row)
        return found

    def _is_expired(self, key: str, row: list[str]) -> bool:
        try:
            expires_at = row[2]
        except IndexError:
            return False
        if not expires_at:
            return False
        try:
            return self._clock().timestamp() >= float(expires_at)
        except ValueError:
            logger.warning("record_expiry_unreadable", key=key, expires_at=expires_at)
            return False

    def _delete_rows(self, sheet: gspread.Worksheet, chunks: dict[int, tuple[int, list[str]]]) -> None:
        # Bottom-up so earlier row numbers stay valid
        for idx in sorted((idx for idx, _ in chunks.values()), reverse=True):
            sheet.delete_rows(idx)

    def _get_sync(self, key: str) -> Optional[Any]:
        sheet = self._client.get_records_sheet()
        chunks = self._find_rows(sheet.get_all_values(), key)
        if 0 not in chunks:
            return None

        if self._is_expired(key, chunks[0][1]):
            self._delete_rows(sheet, chunks)
            logger.debug("record_expired", key=key)
            return None

        raw = "".join(
            row[1] if len(row) > 1 else ""
            for _, (_, row) in sorted(chunks.items())
        )
        return json.loads(raw) if raw else None

    def _put_sync(self, key: str, value: Any, ttl_seconds: Optional[int]) -> None:
        expires_at = ""
        if ttl_seconds is not None:
            expires_at = str(self._clock().timestamp() + ttl_seconds)

        raw = json.dumps(value, ensure_ascii=False)
        pieces = [raw[i:i + CHUNK_SIZE] for i in range(0, len(raw), CHUNK_SIZE)] or [""]
        new_rows = [
            [chunk_key(key, n), piece, expires_at]
            for n, piece in enumerate(pieces)
        ]

        sheet = self._client.get_records_sheet()
        existing = self._find_rows(sheet.get_all_values(), key)

        appended = []
        for n, new_row in enumerate(new_rows):
            if n in existing:
                idx = existing[n][0]
                sheet.update(
                    range_name=f"A{idx}:C{idx}",
                    values=[new_row],
                    value_input_option="RAW",
                )
            else:
                appended.append(new_row)
        if appended:
            sheet.append_rows(appended, value_input_option="RAW")

        # A shorter value leaves surplus chunk rows behind
        stale = {n: entry for n, entry in existing.items() if n >= len(new_rows)}
        self._delete_rows(sheet, stale)

    def _delete_sync(self, key: str) -> None:
        sheet = self._client.get_records_sheet()
        self._delete_rows(sheet, self._find_rows(sheet.get_all_values(), key))

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get(self, key: str) -> Optional[Any]:
        """Read a record from Google Sheets."""
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def put(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Create or replace a record in Google Sheets."""
        try:
            await asyncio.to_thread(self._put_sync, key, value, ttl_seconds)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {key}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def delete(self, key: str) -> None:
        """Delete a record from Google Sheets."""
        try:
            await asyncio.to_thread(self._delete_sync, key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {key}: {e}")
