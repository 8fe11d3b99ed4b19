"""
Audit Logger

DESIGN DECISION: Every balance change and every identity call is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. User can see history of their interactions

The audit logger:
- Is async so it can share the session's event loop with storage calls
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.config import get_settings
from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


def configure_logging(debug: Optional[bool] = None) -> None:
    """
    Configure structlog for local logging.

    Debug events from the application packages are only emitted when
    debug is on; it defaults to the DEBUG_MODE setting.
    """
    if debug is None:
        debug = get_settings().app.debug_mode

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.getLogger("src").setLevel(logging.DEBUG if debug else logging.INFO)


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if configured (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_added(
        self,
        transaction_id: UUID,
        name: str,
        amount: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            name=name,
            amount=amount,
            balance=balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_updated(
        self,
        transaction_id: UUID,
        old_amount: str,
        new_amount: str,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            old_amount=old_amount,
            new_amount=new_amount,
            balance=balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_removed(
        self,
        transaction_id: UUID,
        amount: Optional[str],
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a removal; amount is None when nothing matched."""
        event = AuditEventBuilder.transaction_removed(
            transaction_id=transaction_id,
            amount=amount,
            balance=balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        stage: str,
        issues: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.validation_failed(
            stage=stage,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        operation: str,
        error_message: str,
        transaction_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_session_started(
        self,
        user_id: str,
        transaction_count: int,
        balance: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.session_started(
            user_id=user_id,
            transaction_count=transaction_count,
            balance=balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_session_ended(
        self,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.session_ended(
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_auth(
        self,
        action: str,
        email: Optional[str],
        success: bool,
        user_id: Optional[str] = None,
        error_message: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an identity call (sign_up, sign_in, sign_out, reset_password)."""
        if success:
            event = AuditEventBuilder.auth_succeeded(
                action=action,
                email=email,
                user_id=user_id,
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.auth_failed(
                action=action,
                email=email,
                error_message=error_message or "unknown error",
                correlation_id=correlation_id,
            )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a session or user action.
    Pass it through all subsequent operations.
    """
    return uuid4()
