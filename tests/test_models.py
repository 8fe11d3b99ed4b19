"""
Tests for Personal Ledger

Test strategy:
1. Unit tests for individual components (models, validators, ledger)
2. Integration tests for flows (with mocked external services)
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from src.models.transaction import (
    AuthResult,
    AuthUser,
    OperationResult,
    Transaction,
    TransactionDraft,
    TransactionSummary,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


OCCURRED = datetime(2024, 6, 14, 9, 30, tzinfo=timezone.utc)


class TestTransactionModels:
    """Tests for transaction-related Pydantic models."""

    def test_draft_defaults_to_empty_text(self):
        """A blank form is still a valid draft; the validators judge it."""
        draft = TransactionDraft()
        assert draft.name == ""
        assert draft.amount == ""
        assert draft.occurred_at == ""
        assert draft.category is None

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        tx = Transaction(name="Salary", amount=Decimal("50000"), occurred_at=OCCURRED)
        assert tx.name == "Salary"
        assert tx.is_income is True
        assert tx.is_expense is False
        assert tx.id is not None

    def test_transaction_ids_are_unique(self):
        a = Transaction(name="A", amount=Decimal("1"), occurred_at=OCCURRED)
        b = Transaction(name="B", amount=Decimal("1"), occurred_at=OCCURRED)
        assert a.id != b.id

    def test_transaction_rejects_zero_amount(self):
        """Test that zero amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(name="Nothing", amount=Decimal("0"), occurred_at=OCCURRED)

    def test_transaction_rejects_empty_name(self):
        with pytest.raises(ValueError):
            Transaction(name="", amount=Decimal("5"), occurred_at=OCCURRED)

    def test_transaction_is_immutable(self):
        """Test that admitted transactions cannot be edited in place."""
        tx = Transaction(name="Rent", amount=Decimal("-15000"), occurred_at=OCCURRED)
        with pytest.raises(PydanticValidationError):
            tx.amount = Decimal("-1")

    def test_to_record_uses_backend_columns(self):
        """Test conversion to a backend row."""
        tx = Transaction(
            name="Rent",
            amount=Decimal("-15000.50"),
            occurred_at=OCCURRED,
            category="housing",
        )
        record = tx.to_record(owner_id="user-1")
        assert record["id"] == str(tx.id)
        assert record["amount"] == "-15000.50"
        assert record["datetime"] == OCCURRED.isoformat()
        assert record["user_id"] == "user-1"
        assert record["category"] == "housing"
        assert record["description"] == ""

    def test_to_record_without_owner(self):
        tx = Transaction(name="Rent", amount=Decimal("-1"), occurred_at=OCCURRED)
        assert "user_id" not in tx.to_record()

    def test_summary_defaults(self):
        summary = TransactionSummary()
        assert summary.total_income == Decimal("0")
        assert summary.transaction_count == 0


class TestResultModels:
    """Tests for the structured results returned to callers."""

    def test_operation_result_ok(self):
        tx = Transaction(name="Salary", amount=Decimal("1"), occurred_at=OCCURRED)
        result = OperationResult.ok(tx)
        assert result.success is True
        assert result.transaction == tx
        assert result.error is None

    def test_operation_result_failed(self):
        result = OperationResult.failed("bad input", issues=["Amount is required"])
        assert result.success is False
        assert result.error == "bad input"
        assert result.issues == ["Amount is required"]

    def test_auth_result_user_id(self):
        result = AuthResult(success=True, user=AuthUser(id="u1", email="a@b.com"))
        assert result.user_id == "u1"
        assert AuthResult(success=False).user_id is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Transaction added",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Transaction added",
            details={"name": "Salary", "amount": "50000"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["details"]["name"] == "Salary"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            description="Sign in succeeded",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "user_signed_in"  # event_type
        assert row[10] == "True"  # is_user_action

    def test_audit_event_builder_transaction_added(self):
        """Test AuditEventBuilder.transaction_added."""
        correlation_id = uuid4()
        transaction_id = uuid4()

        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            name="Salary",
            amount="50000",
            balance="50000",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == str(transaction_id)
        assert event.correlation_id == correlation_id
        assert event.details["balance_after"] == "50000"
        assert event.is_user_action is True

    def test_audit_event_builder_removed_missing(self):
        """A no-op removal is still recorded, flagged as not found."""
        event = AuditEventBuilder.transaction_removed(
            transaction_id=uuid4(),
            amount=None,
            balance="0",
        )
        assert event.details["found"] is False

    def test_audit_event_builder_validation_stage(self):
        entry = AuditEventBuilder.validation_failed("entry", ["Amount is required"])
        persistence = AuditEventBuilder.validation_failed("persistence", ["x"])
        assert entry.event_type == AuditEventType.ENTRY_VALIDATION_FAILED
        assert persistence.event_type == AuditEventType.PERSISTENCE_VALIDATION_FAILED
        assert entry.severity == AuditSeverity.WARNING

    def test_audit_event_builder_auth(self):
        ok = AuditEventBuilder.auth_succeeded("sign_in", "a@b.com", "u1")
        failed = AuditEventBuilder.auth_failed("sign_in", "a@b.com", "Invalid login credentials")
        assert ok.event_type == AuditEventType.USER_SIGNED_IN
        assert ok.entity_id == "u1"
        assert failed.event_type == AuditEventType.AUTH_FAILED
        assert failed.error_message == "Invalid login credentials"
