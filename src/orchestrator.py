"""
Main Orchestrator for Personal Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Identity (validate credentials → provider → audit)
2. Ledger session (load → add / amend / remove → audit → discard)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage without passing both validation gates
- The local ledger only changes after storage accepted the change
- Failures come back as result objects, not exceptions
- Every step is audited
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings
from src.ledger import Ledger, LedgerError, TransactionNotFoundError
from src.models.transaction import (
    AuthResult,
    CategoryExpense,
    OperationResult,
    Transaction,
    TransactionDraft,
    TransactionSummary,
)
from src.services.auth import AuthServiceInterface, SupabaseAuthService
from src.services.storage import (
    GoogleSheetsAuditStorage,
    InMemoryTransactionStorage,
    StorageError,
    SupabaseTransactionStorage,
    TransactionStorageInterface,
)
from src.validation import CredentialValidator, ValidationError


logger = structlog.get_logger(__name__)


class AuthFlow:
    """
    Orchestrates the identity flows.

    Flow:
    1. Validate form input locally (CredentialValidator)
    2. Call the identity provider
    3. Audit the outcome

    Every method returns an AuthResult; nothing is raised to the UI.
    """

    def __init__(
        self,
        auth_service: AuthServiceInterface,
        audit_logger: Optional[AuditLogger] = None,
        credential_validator: Optional[CredentialValidator] = None,
    ):
        self._auth = auth_service
        self._audit_logger = audit_logger
        self._validator = credential_validator or CredentialValidator()

    async def _audit(self, action: str, email: Optional[str], result: AuthResult) -> None:
        if self._audit_logger:
            await self._audit_logger.log_auth(
                action=action,
                email=email,
                success=result.success,
                user_id=result.user_id,
                error_message=result.error,
            )

    async def sign_up(
        self,
        email: str,
        password: str,
        confirm: str,
        username: Optional[str] = None,
    ) -> AuthResult:
        """Register a new account after local checks pass."""
        issues = self._validator.validate_signup(email, password, confirm)
        if not issues and username is not None:
            issues = self._validator.validate_user(username, email, password)
        if issues:
            result = AuthResult(success=False, error=" ".join(issues))
        else:
            result = await self._auth.sign_up(email, password, username)

        await self._audit("sign_up", email, result)
        return result

    async def sign_in(self, email: str, password: str) -> AuthResult:
        issues = self._validator.validate_login(email, password)
        if issues:
            result = AuthResult(success=False, error=" ".join(issues))
        else:
            result = await self._auth.sign_in(email, password)

        await self._audit("sign_in", email, result)
        return result

    async def sign_out(self) -> AuthResult:
        result = await self._auth.sign_out()
        await self._audit("sign_out", None, result)
        return result

    async def reset_password(self, email: str) -> AuthResult:
        if not email:
            result = AuthResult(success=False, error="Please enter your email address.")
        else:
            result = await self._auth.reset_password(email)

        await self._audit("reset_password", email, result)
        return result


class LedgerSession:
    """
    One signed-in user's ledger for the lifetime of their session.

    The session is the single owner of its Ledger. Create it on sign-in,
    call start(), and call end() on sign-out.

    Mutations go validate → storage → ledger, so a storage failure
    leaves the ledger exactly as it was.
    """

    def __init__(
        self,
        owner_id: str,
        storage: Optional[TransactionStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        ledger: Optional[Ledger] = None,
    ):
        self.owner_id = owner_id
        self.correlation_id = create_correlation_id()
        self._storage = storage
        self._audit_logger = audit_logger
        self._ledger = ledger or Ledger()
        self._page_size = get_settings().app.page_size
        self._active = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    async def start(self) -> OperationResult:
        """
        Load the user's transactions from storage into the ledger.

        Without storage the session starts empty.
        """
        if self._storage:
            try:
                loaded = await self._load_all()
            except StorageError as e:
                await self._service_error(str(e))
                return OperationResult.failed(f"Could not load transactions: {e}")
            try:
                self._ledger.load(loaded)
            except LedgerError as e:
                # Storage handed back an inconsistent history
                logger.warning("ledger_load_failed", error=str(e), loaded=len(loaded))
                if self._audit_logger:
                    await self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        details={"loaded": len(loaded)},
                        correlation_id=self.correlation_id,
                    )
                return OperationResult.failed(f"Could not load transactions: {e}")

        self._active = True
        if self._audit_logger:
            await self._audit_logger.log_session_started(
                user_id=self.owner_id,
                transaction_count=len(self._ledger),
                balance=str(self._ledger.current_balance()),
                correlation_id=self.correlation_id,
            )
        return OperationResult.ok()

    async def _load_all(self) -> list[Transaction]:
        """Page through storage until a short page comes back."""
        loaded: list[Transaction] = []
        offset = 0
        while True:
            page = await self._storage.list_transactions(
                self.owner_id,
                limit=self._page_size,
                offset=offset,
            )
            loaded.extend(page)
            if len(page) < self._page_size:
                return loaded
            offset += self._page_size

    async def end(self) -> None:
        """Discard the ledger contents."""
        self._ledger.clear()
        self._active = False
        if self._audit_logger:
            await self._audit_logger.log_session_ended(
                user_id=self.owner_id,
                correlation_id=self.correlation_id,
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def balance(self) -> Decimal:
        return self._ledger.current_balance()

    @property
    def transactions(self) -> list[Transaction]:
        return self._ledger.list()

    def get(self, transaction_id: UUID) -> Optional[Transaction]:
        return self._ledger.get(transaction_id)

    async def summary(self, start: datetime, end: datetime) -> Optional[TransactionSummary]:
        """Server-side totals for a date range; None if storage is unavailable."""
        if not self._storage:
            return None
        try:
            return await self._storage.get_summary(self.owner_id, start, end)
        except StorageError as e:
            await self._service_error(str(e))
            return None

    async def category_expenses(self, start: datetime, end: datetime) -> list[CategoryExpense]:
        if not self._storage:
            return []
        try:
            return await self._storage.get_category_expenses(self.owner_id, start, end)
        except StorageError as e:
            await self._service_error(str(e))
            return []

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_transaction(self, draft: TransactionDraft) -> OperationResult:
        """
        Validate, persist, then admit a new transaction.

        Returns:
            OperationResult with the created transaction, or the reasons it was refused
        """
        try:
            transaction = self._ledger.build(draft)
        except ValidationError as e:
            return await self._rejected(e)

        if self._storage:
            try:
                await self._storage.insert_transaction(transaction, self.owner_id)
            except StorageError as e:
                return await self._save_failed("insert", e, transaction.id)

        self._ledger.admit(transaction)

        if self._audit_logger:
            await self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                name=transaction.name,
                amount=str(transaction.amount),
                balance=str(self._ledger.current_balance()),
                correlation_id=self.correlation_id,
            )
        return OperationResult.ok(transaction)

    async def update_transaction(
        self,
        transaction_id: UUID,
        draft: TransactionDraft,
    ) -> OperationResult:
        """Replace an existing transaction as a whole."""
        existing = self._ledger.get(transaction_id)
        if existing is None:
            return OperationResult.failed(str(TransactionNotFoundError(transaction_id)))

        try:
            replacement = self._ledger.build(draft, transaction_id=transaction_id)
        except ValidationError as e:
            return await self._rejected(e)

        if self._storage:
            try:
                await self._storage.update_transaction(replacement)
            except StorageError as e:
                return await self._save_failed("update", e, transaction_id)

        self._ledger.replace(replacement)

        if self._audit_logger:
            await self._audit_logger.log_transaction_updated(
                transaction_id=transaction_id,
                old_amount=str(existing.amount),
                new_amount=str(replacement.amount),
                balance=str(self._ledger.current_balance()),
                correlation_id=self.correlation_id,
            )
        return OperationResult.ok(replacement)

    async def remove_transaction(self, transaction_id: UUID) -> OperationResult:
        """
        Delete a transaction.

        Removing an id the ledger doesn't hold succeeds without changing anything.
        """
        if self._storage and transaction_id in self._ledger:
            try:
                await self._storage.delete_transaction(transaction_id)
            except StorageError as e:
                return await self._save_failed("delete", e, transaction_id)

        removed = self._ledger.remove(transaction_id)

        if self._audit_logger:
            await self._audit_logger.log_transaction_removed(
                transaction_id=transaction_id,
                amount=str(removed.amount) if removed else None,
                balance=str(self._ledger.current_balance()),
                correlation_id=self.correlation_id,
            )
        return OperationResult.ok(removed)

    # -------------------------------------------------------------------------
    # Failure reporting
    # -------------------------------------------------------------------------

    async def _rejected(self, error: ValidationError) -> OperationResult:
        if self._audit_logger:
            await self._audit_logger.log_validation_failed(
                stage=error.stage,
                issues=error.issues,
                correlation_id=self.correlation_id,
            )
        return OperationResult.failed(str(error), issues=error.issues)

    async def _save_failed(
        self,
        operation: str,
        error: StorageError,
        transaction_id: UUID,
    ) -> OperationResult:
        logger.warning(
            "transaction_save_failed",
            operation=operation,
            transaction_id=str(transaction_id),
            error=str(error),
        )
        if self._audit_logger:
            await self._audit_logger.log_save_failed(
                operation=operation,
                error_message=str(error),
                transaction_id=transaction_id,
                correlation_id=self.correlation_id,
            )
        return OperationResult.failed(f"Could not save changes: {error}")

    async def _service_error(self, message: str) -> None:
        if self._audit_logger:
            await self._audit_logger.log_external_service_error(
                service="supabase",
                error_message=message,
                correlation_id=self.correlation_id,
            )


def create_app_components(
    use_storage: bool = True,
) -> tuple[Optional[AuthFlow], TransactionStorageInterface, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to Supabase and Google Sheets.
                    Set to False to run entirely in memory.

    Returns:
        (auth_flow, transaction_storage, audit_logger)
        auth_flow is None when the identity provider isn't configured.
    """
    auth_flow = None
    storage: TransactionStorageInterface = InMemoryTransactionStorage()
    audit_logger = AuditLogger()  # Local-only logging

    if not use_storage:
        return auth_flow, storage, audit_logger

    try:
        audit_logger = AuditLogger(GoogleSheetsAuditStorage())
    except Exception as e:
        # Audit sheet not configured - continue with local logging
        logger.warning("audit_storage_not_configured", error=str(e))

    try:
        storage = SupabaseTransactionStorage()
        auth_flow = AuthFlow(SupabaseAuthService(), audit_logger=audit_logger)
    except Exception as e:
        # Backend not configured - continue in memory
        logger.warning("supabase_not_configured", error=str(e))

    return auth_flow, storage, audit_logger
