"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run against the hosted backend in production
2. Use in-memory storage for testing and offline use
3. Keep the ledger and session logic decoupled from the backend

The interface mirrors what the backend offers: table writes, a
paged listing, and server-side aggregation.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.transaction import (
    CategoryExpense,
    Transaction,
    TransactionSummary,
)


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction persistence and aggregation.

    Any storage implementation (Supabase, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def insert_transaction(
        self,
        transaction: Transaction,
        owner_id: str,
    ) -> Transaction:
        """
        Persist a new transaction for a user.

        Args:
            transaction: The validated transaction to save
            owner_id: ID of the signed-in user

        Returns:
            The transaction as stored

        Raises:
            StorageError: If save fails
            DuplicateError: If the id already exists
        """
        pass

    @abstractmethod
    async def list_transactions(
        self,
        owner_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        """
        List a user's transactions, newest occurred_at first.

        Args:
            owner_id: ID of the signed-in user
            limit: Maximum number of results
            offset: Number of results to skip
        """
        pass

    @abstractmethod
    async def update_transaction(self, transaction: Transaction) -> Transaction:
        """
        Replace a stored transaction (matched by id).

        Raises:
            StorageError: If update fails
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if a row was deleted
        """
        pass

    @abstractmethod
    async def get_balance(self, owner_id: str) -> Decimal:
        """Sum of all of a user's transaction amounts."""
        pass

    @abstractmethod
    async def get_summary(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> TransactionSummary:
        """Income/expense totals for transactions in [start, end]."""
        pass

    @abstractmethod
    async def get_category_expenses(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> list[CategoryExpense]:
        """Expense totals per category for transactions in [start, end]."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """All events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
