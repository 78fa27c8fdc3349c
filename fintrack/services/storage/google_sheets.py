"""
Google Sheets Transaction Store

DESIGN DECISION: Google Sheets is used as the remote store because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (fine for personal use)
- No server-side filtering (we filter by owner in Python)
- gspread is blocking, so every call runs in a worker thread to keep
  the event loop free

Each store call is attempted exactly once. Only establishing the
connection is retried.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from fintrack.config import get_settings
from fintrack.models.transaction import TransactionRecord, TransactionType, as_utc
from fintrack.services.storage.interface import (
    DuplicateError,
    StoreConnectionError,
    StoreError,
    TransactionStoreInterface,
)


logger = structlog.get_logger(__name__)


# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "owner",
    "type",
    "amount",
    "category",
    "description",
    "date",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

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
                raise StoreConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreConnectionError(f"Failed to connect to Google Sheets: {e}")

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
                raise StoreConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet


class GoogleSheetsTransactionStore(TransactionStoreInterface):
    """
    Google Sheets implementation of the transaction store.

    Transactions are stored as rows, one transaction per row, with the
    owner in its own column so every read and delete can be scoped.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _record_to_row(self, record: TransactionRecord) -> list:
        """Convert a TransactionRecord to a spreadsheet row."""
        return [
            record.id,
            record.owner,
            record.type.value,
            str(record.amount),
            record.category,
            record.description or "",
            record.date,
        ]

    def _row_to_record(self, row: list) -> TransactionRecord:
        """Convert a spreadsheet row to a TransactionRecord."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return TransactionRecord(
            id=safe_get(0),
            owner=safe_get(1),
            type=TransactionType(safe_get(2)),
            amount=Decimal(safe_get(3)),
            category=safe_get(4),
            description=safe_get(5) or None,
            date=safe_get(6),
        )

    def _list_rows(self, owner_id: str) -> list[TransactionRecord]:
        sheet = self._client.get_transactions_sheet()
        all_rows = sheet.get_all_values()[1:]  # Skip header

        records = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 2 or row[1] != owner_id:
                continue

            try:
                record = self._row_to_record(row)
                sort_key = as_utc(datetime.fromisoformat(record.date))
            except Exception as e:
                logger.warning("malformed_row_skipped", row_id=row[0], error=str(e))
                continue

            records.append((sort_key, record))

        # Sort by date descending (newest first)
        records.sort(key=lambda item: item[0], reverse=True)
        return [record for _, record in records]

    def _append_row(self, record: TransactionRecord) -> None:
        sheet = self._client.get_transactions_sheet()
        existing_ids = {row[0] for row in sheet.get_all_values()[1:] if row}
        if record.id in existing_ids:
            raise DuplicateError(f"Transaction already exists: {record.id}")
        sheet.append_row(self._record_to_row(record), value_input_option="RAW")

    def _delete_row(self, transaction_id: str, owner_id: str) -> None:
        sheet = self._client.get_transactions_sheet()
        all_rows = sheet.get_all_values()

        # Row 1 is the header
        for idx, row in enumerate(all_rows[1:], start=2):
            if len(row) > 1 and row[0] == transaction_id and row[1] == owner_id:
                sheet.delete_rows(idx)
                return

    async def list_transactions(self, owner_id: str) -> list[TransactionRecord]:
        """List an owner's transactions, newest first."""
        try:
            return await asyncio.to_thread(self._list_rows, owner_id)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to list transactions: {e}")

    async def insert_transaction(self, record: TransactionRecord) -> None:
        """Append a transaction row."""
        try:
            await asyncio.to_thread(self._append_row, record)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to save transaction: {e}")

    async def delete_transaction(self, transaction_id: str, owner_id: str) -> None:
        """Delete the row matching both id and owner, if present."""
        try:
            await asyncio.to_thread(self._delete_row, transaction_id, owner_id)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to delete transaction: {e}")
