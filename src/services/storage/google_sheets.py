"""
Google Sheets Audit Storage

DESIGN DECISION: The audit trail lives in a spreadsheet rather than in
the transactions backend because:
1. The user can read their own history directly in Sheets
2. It stays available when the backend is down or being migrated
3. Writing it never competes with ledger writes

The sheet is append-only, so row order is chronological: the newest
events are always at the bottom.
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.models.audit import AuditEvent, AuditEventType, AuditSeverity
from src.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# Same order as AuditEvent.to_sheets_row()
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

# gspread columns are 1-based
CORRELATION_COLUMN = AUDIT_COLUMNS.index("correlation_id") + 1


def row_to_event(row: list) -> AuditEvent:
    """
    Convert a spreadsheet row back to an AuditEvent.

    Raises:
        ValueError: If the row is not a well-formed audit row
    """
    cells = dict(zip(AUDIT_COLUMNS, row))
    if not cells.get("event_id"):
        raise ValueError("Row has no event id")

    return AuditEvent(
        event_id=UUID(cells["event_id"]),
        timestamp=datetime.fromisoformat(cells.get("timestamp", "")),
        event_type=AuditEventType(cells.get("event_type", "")),
        severity=AuditSeverity(cells.get("severity", "")),
        entity_type=cells.get("entity_type") or None,
        entity_id=cells.get("entity_id") or None,
        correlation_id=UUID(cells["correlation_id"]) if cells.get("correlation_id") else None,
        description=cells.get("description", ""),
        details=json.loads(cells["details_json"]) if cells.get("details_json") else {},
        error_message=cells.get("error_message") or None,
        is_user_action=cells.get("is_user_action", "").lower() == "true",
    )


class GoogleSheetsClient:
    """
    Opens the audit worksheet on first use and keeps it.

    Creates the worksheet (with a header row) if the spreadsheet
    doesn't have one yet.
    """

    def __init__(self):
        self._settings = get_settings().google_sheets
        self._worksheet: Optional[gspread.Worksheet] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _open_spreadsheet(self) -> gspread.Spreadsheet:
        try:
            credentials = Credentials.from_service_account_file(
                self._settings.credentials_path,
                scopes=SCOPES,
            )
            return gspread.authorize(credentials).open_by_key(self._settings.spreadsheet_id)
        except FileNotFoundError:
            raise ConnectionError(
                f"Google credentials file not found: {self._settings.credentials_path}"
            )
        except gspread.SpreadsheetNotFound:
            raise ConnectionError(f"Spreadsheet not found: {self._settings.spreadsheet_id}")
        except Exception as e:
            raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

    def get_audit_sheet(self) -> gspread.Worksheet:
        if self._worksheet is None:
            spreadsheet = self._open_spreadsheet()
            title = self._settings.audit_sheet_name
            try:
                self._worksheet = spreadsheet.worksheet(title)
            except gspread.WorksheetNotFound:
                logger.info("audit_sheet_created", title=title)
                self._worksheet = spreadsheet.add_worksheet(
                    title=title,
                    rows=5000,
                    cols=len(AUDIT_COLUMNS),
                )
                self._worksheet.append_row(AUDIT_COLUMNS)
        return self._worksheet


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Writes never raise; reads raise StorageError.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _parse_rows(self, rows: list[list]) -> list[AuditEvent]:
        events = []
        for row in rows:
            try:
                events.append(row_to_event(row))
            except (ValueError, json.JSONDecodeError):
                continue  # Header or hand-edited row
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._client.get_audit_sheet().append_row(
                event.to_sheets_row(),
                value_input_option="RAW",
            )
            return True
        except Exception as e:
            logger.warning("audit_sheet_write_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Look up matching rows by the correlation column only."""
        try:
            sheet = self._client.get_audit_sheet()
            cells = sheet.findall(str(correlation_id), in_column=CORRELATION_COLUMN)
            rows = [sheet.row_values(cell.row) for cell in cells]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = self._parse_rows(rows)
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Newest first."""
        try:
            rows = self._client.get_audit_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = self._parse_rows(rows[-limit:])
        events.reverse()
        return events
