"""Tests for the audit logger and the spreadsheet audit store."""

import logging
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.audit import AuditLogger, configure_logging, create_correlation_id
from src.models.audit import AuditEventBuilder, AuditEventType
from src.services.storage import GoogleSheetsAuditStorage, InMemoryAuditStorage
from src.services.storage.google_sheets import AUDIT_COLUMNS


@pytest.mark.asyncio
class TestAuditLogger:
    """The logger records locally and never raises."""

    async def test_persists_to_storage(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        await logger.log_transaction_added(
            transaction_id=uuid4(),
            name="Salary",
            amount="50000",
            balance="50000",
            correlation_id=correlation_id,
        )

        assert len(storage.events) == 1
        assert storage.events[0].correlation_id == correlation_id

    async def test_local_only(self):
        logger = AuditLogger()
        assert await logger.log(AuditEventBuilder.session_ended("u1", uuid4())) is True

    async def test_storage_failure_is_swallowed(self):
        storage = MagicMock()
        storage.append_event = AsyncMock(side_effect=RuntimeError("sheet offline"))
        logger = AuditLogger(storage)

        ok = await logger.log(AuditEventBuilder.session_ended("u1", uuid4()))

        assert ok is False

    async def test_auth_events(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)

        await logger.log_auth("sign_up", "a@b.com", success=True, user_id="u1")
        await logger.log_auth("sign_in", "a@b.com", success=False, error_message="nope")

        assert [e.event_type for e in storage.events] == [
            AuditEventType.USER_SIGNED_UP,
            AuditEventType.AUTH_FAILED,
        ]

    async def test_error_events(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)

        await logger.log_error(
            error_type="DuplicateTransactionError",
            error_message="Duplicate transaction id",
            details={"loaded": 3},
        )

        event = storage.events[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.error_message == "Duplicate transaction id"


class TestConfigureLogging:
    """Debug output from the application follows the debug flag."""

    def teardown_method(self):
        configure_logging(debug=False)

    def test_debug_off_silences_ledger_events(self):
        configure_logging(debug=False)
        assert not logging.getLogger("src.ledger.store").isEnabledFor(logging.DEBUG)
        assert logging.getLogger("src.ledger.store").isEnabledFor(logging.INFO)

    def test_debug_on_emits_ledger_events(self):
        configure_logging(debug=True)
        assert logging.getLogger("src.ledger.store").isEnabledFor(logging.DEBUG)

    def test_defaults_to_debug_mode_setting(self, monkeypatch):
        monkeypatch.setenv("DEBUG_MODE", "true")
        configure_logging()
        assert logging.getLogger("src.orchestrator").isEnabledFor(logging.DEBUG)


@pytest.mark.asyncio
class TestGoogleSheetsAuditStorage:
    """Spreadsheet round trip with a mocked worksheet."""

    def _storage(self, rows):
        sheet = MagicMock()
        sheet.get_all_values.return_value = rows
        sheet.row_values.side_effect = lambda index: rows[index - 1]
        client = MagicMock()
        client.get_audit_sheet.return_value = sheet
        return GoogleSheetsAuditStorage(client=client), sheet

    async def test_append_writes_row(self):
        storage, sheet = self._storage([])
        event = AuditEventBuilder.session_ended("u1", uuid4())

        assert await storage.append_event(event) is True
        sheet.append_row.assert_called_once_with(event.to_sheets_row(), value_input_option="RAW")

    async def test_append_failure_returns_false(self):
        storage, sheet = self._storage([])
        sheet.append_row.side_effect = Exception("quota exceeded")

        assert await storage.append_event(AuditEventBuilder.session_ended("u1", uuid4())) is False

    async def test_reads_back_by_correlation_id(self):
        correlation_id = uuid4()
        wanted = AuditEventBuilder.session_started("u1", 2, "70", correlation_id)
        other = AuditEventBuilder.session_ended("u2", uuid4())
        storage, sheet = self._storage([
            AUDIT_COLUMNS,
            wanted.to_sheets_row(),
            other.to_sheets_row(),
        ])
        sheet.findall.return_value = [MagicMock(row=2)]

        events = await storage.get_events_by_correlation_id(correlation_id)

        sheet.findall.assert_called_once_with(str(correlation_id), in_column=7)
        assert [e.event_id for e in events] == [wanted.event_id]
        assert events[0].details["transaction_count"] == 2

    async def test_recent_events_newest_first(self):
        first = AuditEventBuilder.session_started("u1", 0, "0", uuid4())
        second = AuditEventBuilder.session_ended("u1", uuid4())
        storage, _ = self._storage([
            AUDIT_COLUMNS,
            first.to_sheets_row(),
            ["garbage", "row"],
            second.to_sheets_row(),
        ])

        events = await storage.get_recent_events()

        assert [e.event_id for e in events] == [second.event_id, first.event_id]
        assert len(await storage.get_recent_events(limit=1)) == 1
