"""
In-Memory Storage Implementation

Keeps everything in process memory. Used when the hosted backend is not
configured and throughout the test suite.

Aggregations are computed in Python the same way the backend RPCs
compute them in SQL.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.transaction import (
    CategoryExpense,
    Transaction,
    TransactionSummary,
)
from src.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    TransactionStorageInterface,
)

UNCATEGORIZED = "Uncategorized"


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Dictionary-backed transaction storage keyed by transaction id."""

    def __init__(self):
        self._rows: dict[UUID, tuple[str, Transaction]] = {}

    def _owned_by(self, owner_id: str) -> list[Transaction]:
        return [t for owner, t in self._rows.values() if owner == owner_id]

    def _in_range(
        self,
        owner_id: str,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> list[Transaction]:
        transactions = self._owned_by(owner_id)
        if start is not None:
            transactions = [t for t in transactions if t.occurred_at >= start]
        if end is not None:
            transactions = [t for t in transactions if t.occurred_at <= end]
        return transactions

    async def insert_transaction(
        self,
        transaction: Transaction,
        owner_id: str,
    ) -> Transaction:
        if transaction.id in self._rows:
            raise DuplicateError(f"Transaction already stored: {transaction.id}")
        self._rows[transaction.id] = (owner_id, transaction)
        return transaction

    async def list_transactions(
        self,
        owner_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        transactions = self._owned_by(owner_id)
        transactions.sort(key=lambda t: t.occurred_at, reverse=True)
        return transactions[offset:offset + limit]

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        if transaction.id not in self._rows:
            raise NotFoundError(f"Transaction not found: {transaction.id}")
        owner_id, _ = self._rows[transaction.id]
        self._rows[transaction.id] = (owner_id, transaction)
        return transaction

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        return self._rows.pop(transaction_id, None) is not None

    async def get_balance(self, owner_id: str) -> Decimal:
        return sum((t.amount for t in self._owned_by(owner_id)), Decimal("0"))

    async def get_summary(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> TransactionSummary:
        transactions = self._in_range(owner_id, start, end)
        income = sum((t.amount for t in transactions if t.amount > 0), Decimal("0"))
        expenses = sum((-t.amount for t in transactions if t.amount < 0), Decimal("0"))
        return TransactionSummary(
            total_income=income,
            total_expenses=expenses,
            net_balance=income - expenses,
            transaction_count=len(transactions),
        )

    async def get_category_expenses(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> list[CategoryExpense]:
        totals: dict[str, Decimal] = {}
        for t in self._in_range(owner_id, start, end):
            if t.amount >= 0:
                continue
            key = t.category or UNCATEGORIZED
            totals[key] = totals.get(key, Decimal("0")) - t.amount

        # Largest spend first
        return [
            CategoryExpense(category=category, total_amount=total)
            for category, total in sorted(
                totals.items(), key=lambda item: item[1], reverse=True
            )
        ]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self.events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
