"""
Google Sheets Remote Store

DESIGN DECISION: Google Sheets is offered as a remote backend because:
1. Non-technical users can see (and back up) their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Sheets has no auth session; the user id comes from settings
- A cell holds at most 50,000 characters, which bounds the document size
- No transactions; an upsert is a find-then-write and the last write wins

One row per user: user_id | updated_at | data_json
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from lifeos.config import get_settings
from lifeos.services.storage.interface import (
    ConnectionError,
    RemoteStoreInterface,
    StorageError,
)


RECORD_COLUMNS = [
    "user_id",
    "updated_at",
    "data_json",
]

MAX_CELL_CHARACTERS = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @property
    def user_id(self) -> Optional[str]:
        return self._settings.user_id

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
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_records_sheet(self) -> gspread.Worksheet:
        """Get or create the per-user records worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.records_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.records_sheet_name,
                rows=100,
                cols=len(RECORD_COLUMNS),
            )
            sheet.append_row(RECORD_COLUMNS)
        return sheet


class GoogleSheetsRemoteStore(RemoteStoreInterface):
    """
    Google Sheets implementation of the per-user record store.

    The document is JSON-serialized into a single cell.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        user_id: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._client = client or GoogleSheetsClient()
        self._user_id = user_id
        self._clock = clock

    async def current_user_id(self) -> Optional[str]:
        return self._user_id or self._client.user_id or None

    @staticmethod
    def _find_row(all_rows: list[list[str]], user_id: str) -> Optional[int]:
        """1-based sheet row index of the user's record (row 1 is the header)."""
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == user_id:
                return idx
        return None

    def _read(self, user_id: str) -> Optional[dict[str, Any]]:
        sheet = self._client.get_records_sheet()
        all_rows = sheet.get_all_values()

        idx = self._find_row(all_rows, user_id)
        if idx is None:
            return None

        row = all_rows[idx - 1]
        data_json = row[2] if len(row) > 2 else ""
        if not data_json:
            return None

        data = json.loads(data_json)
        if not isinstance(data, dict):
            raise StorageError(
                f"Record for {user_id} holds {type(data).__name__}, expected an object"
            )
        return data

    async def fetch_record(self, user_id: str) -> Optional[dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._read, user_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch record for {user_id}: {e}") from e

    def _write(self, user_id: str, document: dict[str, Any]) -> None:
        data_json = json.dumps(document, separators=(",", ":"))
        if len(data_json) > MAX_CELL_CHARACTERS:
            raise StorageError(
                f"Document is {len(data_json)} characters; "
                f"a sheet cell holds at most {MAX_CELL_CHARACTERS}"
            )

        row = [user_id, self._clock().isoformat(), data_json]
        sheet = self._client.get_records_sheet()
        idx = self._find_row(sheet.get_all_values(), user_id)

        if idx is None:
            sheet.append_row(row, value_input_option="RAW")
        else:
            sheet.update(
                range_name=f"A{idx}:C{idx}",
                values=[row],
                value_input_option="RAW",
            )

    async def upsert_record(self, user_id: str, document: dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._write, user_id, document)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to upsert record for {user_id}: {e}") from e
