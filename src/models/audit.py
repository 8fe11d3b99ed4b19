"""
Audit Models for Personal Ledger

Every significant action in the system is logged for audit purposes.
This provides:
1. Complete traceability of every balance change
2. Debugging information when things go wrong
3. A record of sign-ins and sign-outs
4. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger mutation and every identity call has its own event type.
    """
    # Ledger mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_REMOVED = "transaction_removed"

    # Validation
    ENTRY_VALIDATION_FAILED = "entry_validation_failed"
    PERSISTENCE_VALIDATION_FAILED = "persistence_validation_failed"

    # Persistence
    SAVE_FAILED = "save_failed"

    # Session lifecycle
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"

    # Identity
    USER_SIGNED_UP = "user_signed_up"
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    AUTH_FAILED = "auth_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'user', 'session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one session)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, name, amount, correlation_id)
        event = AuditEventBuilder.user_signed_in(user_id, correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        name: str,
        amount: str,
        balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            correlation_id=correlation_id,
            description=f"Transaction added: {name} ({amount})",
            details={
                "name": name,
                "amount": amount,
                "balance_after": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        transaction_id: UUID,
        old_amount: str,
        new_amount: str,
        balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            correlation_id=correlation_id,
            description=f"Transaction amended: {old_amount} -> {new_amount}",
            details={
                "old_amount": old_amount,
                "new_amount": new_amount,
                "balance_after": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_removed(
        transaction_id: UUID,
        amount: Optional[str],
        balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        found = amount is not None
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            correlation_id=correlation_id,
            description=(
                f"Transaction removed ({amount})"
                if found
                else "Remove requested for a transaction not in the ledger"
            ),
            details={
                "found": found,
                "amount": amount,
                "balance_after": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        stage: str,
        issues: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.ENTRY_VALIDATION_FAILED
            if stage == "entry"
            else AuditEventType.PERSISTENCE_VALIDATION_FAILED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"{stage.capitalize()} validation failed with {len(issues)} issues",
            details={
                "stage": stage,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        transaction_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="transaction",
            entity_id=str(transaction_id) if transaction_id else None,
            correlation_id=correlation_id,
            description=f"Could not {operation} transaction in storage",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def session_started(
        user_id: str,
        transaction_count: int,
        balance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_STARTED,
            entity_type="session",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Ledger session started with {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
                "balance": balance,
            },
        )

    @staticmethod
    def session_ended(
        user_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_ENDED,
            entity_type="session",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Ledger session ended",
        )

    @staticmethod
    def auth_succeeded(
        action: str,
        email: Optional[str],
        user_id: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = {
            "sign_up": AuditEventType.USER_SIGNED_UP,
            "sign_in": AuditEventType.USER_SIGNED_IN,
            "sign_out": AuditEventType.USER_SIGNED_OUT,
            "reset_password": AuditEventType.PASSWORD_RESET_REQUESTED,
        }[action]
        return AuditEvent(
            event_type=event_type,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"{action.replace('_', ' ').capitalize()} succeeded",
            details={
                "email": email,
            },
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(
        action: str,
        email: Optional[str],
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            correlation_id=correlation_id,
            description=f"{action.replace('_', ' ').capitalize()} failed",
            error_message=error_message,
            details={
                "action": action,
                "email": email,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
