"""
Ledger Store

Holds the transactions of one signed-in user for the current session
and the running balance derived from them.

INVARIANT: current_balance() always equals the sum of the amounts of
the transactions currently held. The balance is cached and adjusted by
exactly the amount added, replaced or removed on every mutation.

DESIGN DECISION: The ledger performs no I/O. Persistence is the
session layer's job (see src.orchestrator); the ledger is the local
mirror of what the backend holds.

Ordering is newest-first by insertion, not by occurred_at.
"""

from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID, uuid4

import structlog

from src.ledger.formatters import format_display_time
from src.models.transaction import Transaction, TransactionDraft
from src.validation import (
    EntryValidator,
    PersistenceValidator,
    ValidationError,
    parse_signed_amount,
    parse_timestamp,
)


logger = structlog.get_logger(__name__)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class TransactionNotFoundError(LedgerError):
    """No transaction with the given id is held by the ledger."""

    def __init__(self, transaction_id: UUID):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class DuplicateTransactionError(LedgerError):
    """A transaction with the same id is already held by the ledger."""

    def __init__(self, transaction_id: UUID):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction already in ledger: {transaction_id}")


class Ledger:
    """
    In-memory transaction ledger with a derived running balance.

    One instance per session; create it when the user signs in and
    discard it (or clear() it) when they sign out.
    """

    def __init__(
        self,
        entry_validator: Optional[EntryValidator] = None,
        persistence_validator: Optional[PersistenceValidator] = None,
    ):
        """
        Initialize an empty ledger.

        Args:
            entry_validator: Gate 1 (raw form input).
            persistence_validator: Gate 2 (parsed values).
                Both default to validators using the system clock.
        """
        self._entry_validator = entry_validator or EntryValidator()
        self._persistence_validator = persistence_validator or PersistenceValidator()
        self._transactions: list[Transaction] = []
        self._balance = Decimal("0")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def current_balance(self) -> Decimal:
        return self._balance

    def list(self) -> list[Transaction]:
        """All transactions, newest-first by insertion. Returns a copy."""
        return list(self._transactions)

    def get(self, transaction_id: UUID) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def is_reconciled(self) -> bool:
        """Recompute the balance from scratch and compare with the cached one."""
        return self._balance == sum(
            (t.amount for t in self._transactions), Decimal("0")
        )

    @property
    def is_empty(self) -> bool:
        return not self._transactions

    def __len__(self) -> int:
        return len(self._transactions)

    def __contains__(self, transaction_id: object) -> bool:
        return any(t.id == transaction_id for t in self._transactions)

    # -------------------------------------------------------------------------
    # Validation + construction
    # -------------------------------------------------------------------------

    def build(
        self,
        draft: TransactionDraft,
        transaction_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate a draft through both gates and construct the Transaction.

        Does NOT touch the ledger. add() is build() followed by admit().

        Raises:
            ValidationError: If either gate reports violations
        """
        issues = self._entry_validator.validate(
            name=draft.name,
            amount=draft.amount,
            occurred_at=draft.occurred_at,
            description=draft.description,
        )
        if issues:
            raise ValidationError(issues, stage="entry")

        name = draft.name.strip()
        description = draft.description.strip() if draft.description else ""
        amount = parse_signed_amount(draft.amount)
        occurred_at = parse_timestamp(draft.occurred_at)

        issues = self._persistence_validator.validate(
            name=name,
            amount=amount,
            occurred_at=occurred_at,
            description=description,
        )
        if issues:
            raise ValidationError(issues, stage="persistence")

        category = draft.category.strip() if draft.category else None

        return Transaction(
            id=transaction_id or uuid4(),
            name=name,
            description=description or None,
            amount=amount,
            occurred_at=occurred_at,
            display_time=format_display_time(occurred_at),
            category=category or None,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def admit(self, transaction: Transaction) -> Transaction:
        """
        Prepend an already-built transaction and add its amount to the balance.

        Raises:
            DuplicateTransactionError: If the id is already held
        """
        if transaction.id in self:
            raise DuplicateTransactionError(transaction.id)

        self._transactions.insert(0, transaction)
        self._balance += transaction.amount

        logger.debug(
            "ledger_admit",
            transaction_id=str(transaction.id),
            amount=str(transaction.amount),
            balance=str(self._balance),
        )
        return transaction

    def add(self, draft: TransactionDraft) -> Transaction:
        """
        Validate a draft and admit it as the newest transaction.

        Validation fully precedes mutation: on failure the ledger is untouched.

        Raises:
            ValidationError: With every violated rule
        """
        return self.admit(self.build(draft))

    def update(self, transaction_id: UUID, draft: TransactionDraft) -> Transaction:
        """
        Replace a transaction as a whole, keeping its id and position.

        Raises:
            TransactionNotFoundError: If the id is not held
            ValidationError: If the replacement fails either gate
        """
        if transaction_id not in self:
            raise TransactionNotFoundError(transaction_id)
        replacement = self.build(draft, transaction_id=transaction_id)
        return self.replace(replacement)

    def replace(self, transaction: Transaction) -> Transaction:
        """
        Swap in an already-built transaction with the same id.

        Raises:
            TransactionNotFoundError: If the id is not held
        """
        for index, existing in enumerate(self._transactions):
            if existing.id == transaction.id:
                self._transactions[index] = transaction
                self._balance += transaction.amount - existing.amount
                logger.debug(
                    "ledger_replace",
                    transaction_id=str(transaction.id),
                    old_amount=str(existing.amount),
                    new_amount=str(transaction.amount),
                    balance=str(self._balance),
                )
                return transaction

        raise TransactionNotFoundError(transaction.id)

    def remove(self, transaction_id: UUID) -> Optional[Transaction]:
        """
        Remove a transaction and subtract exactly its amount.

        Removing an id that is not held is a no-op.

        Returns:
            The removed transaction, or None if nothing matched
        """
        for index, existing in enumerate(self._transactions):
            if existing.id == transaction_id:
                del self._transactions[index]
                self._balance -= existing.amount
                logger.debug(
                    "ledger_remove",
                    transaction_id=str(transaction_id),
                    amount=str(existing.amount),
                    balance=str(self._balance),
                )
                return existing

        logger.debug("ledger_remove_missing", transaction_id=str(transaction_id))
        return None

    def load(self, transactions: Iterable[Transaction]) -> None:
        """
        Replace the contents with already-persisted transactions.

        Order is kept as given; the balance is re-derived.

        Raises:
            DuplicateTransactionError: If the same id appears twice
        """
        loaded: list[Transaction] = []
        seen: set[UUID] = set()
        for transaction in transactions:
            if transaction.id in seen:
                raise DuplicateTransactionError(transaction.id)
            seen.add(transaction.id)
            loaded.append(transaction)

        self._transactions = loaded
        self._balance = sum((t.amount for t in loaded), Decimal("0"))

    def clear(self) -> None:
        self._transactions = []
        self._balance = Decimal("0")
