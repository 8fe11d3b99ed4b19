"""
Core Data Models for Personal Ledger

These models define the schemas for all data flowing through the system.
They are designed to:
1. Keep raw user input separate from admitted transactions
2. Make admitted transactions immutable
3. Be serializable for storage and logging
4. Give every operation a structured result instead of an exception

DESIGN DECISION: Raw form input is carried as text (TransactionDraft).
Only the ledger turns a draft into a Transaction, after both validation
gates have passed.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A candidate transaction exactly as the user typed it.

    CRITICAL: This is UNVERIFIED input. Every field is free-form text.
    The amount must carry its own sign ("+100" income, "-50" expense).
    """

    name: str = Field(
        default="",
        description="Transaction name (required)"
    )
    description: str = Field(
        default="",
        description="Optional free-text description"
    )
    amount: str = Field(
        default="",
        description="Signed amount, e.g. '+500' or '-120.50'"
    )
    occurred_at: str = Field(
        default="",
        description="ISO-8601 timestamp of when the transaction happened"
    )
    category: Optional[str] = Field(
        default=None,
        description="Optional category label"
    )


class Transaction(BaseModel):
    """
    A transaction that has been admitted to the ledger.

    Immutable once created. It can only be replaced as a whole
    (update) or removed (delete).
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Transaction name"
    )
    description: Optional[str] = Field(
        default=None,
        description="Optional description"
    )
    amount: Decimal = Field(
        ...,
        description="Signed amount: positive is income, negative is expense"
    )
    occurred_at: datetime = Field(
        ...,
        description="When the transaction happened"
    )
    display_time: str = Field(
        default="",
        description="occurred_at formatted for display"
    )
    category: Optional[str] = None
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the ledger admitted this transaction"
    )

    @field_validator('amount')
    @classmethod
    def amount_not_zero(cls, v: Decimal) -> Decimal:
        """A transaction with no money in it is not a transaction."""
        if v == 0:
            raise ValueError("Amount cannot be zero")
        return v

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    def to_record(self, owner_id: Optional[str] = None) -> dict:
        """
        Convert to a row for the remote transactions table.

        Column names follow the backend schema (`datetime`, `user_id`).
        """
        record = {
            "id": str(self.id),
            "name": self.name,
            "description": self.description or "",
            "amount": str(self.amount),
            "datetime": self.occurred_at.isoformat(),
            "category": self.category,
        }
        if owner_id is not None:
            record["user_id"] = owner_id
        return record


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class TransactionSummary(BaseModel):
    """Income/expense totals over a date range."""

    total_income: Decimal = Field(default=Decimal("0"))
    total_expenses: Decimal = Field(
        default=Decimal("0"),
        description="Sum of expenses as a positive number"
    )
    net_balance: Decimal = Field(default=Decimal("0"))
    transaction_count: int = Field(default=0, ge=0)


class CategoryExpense(BaseModel):
    """Total spent in one category over a date range."""

    category: str
    total_amount: Decimal = Field(
        ...,
        description="Sum of expenses as a positive number"
    )


# =============================================================================
# RESULT MODELS
# =============================================================================

class OperationResult(BaseModel):
    """
    Outcome of a ledger operation as seen by the caller.

    Failures are reported here rather than raised across the
    session boundary.
    """

    success: bool
    transaction: Optional[Transaction] = None
    error: Optional[str] = None
    issues: list[str] = Field(
        default_factory=list,
        description="Individual rule violations, if validation failed"
    )

    @classmethod
    def ok(cls, transaction: Optional[Transaction] = None) -> "OperationResult":
        return cls(success=True, transaction=transaction)

    @classmethod
    def failed(cls, error: str, issues: Optional[list[str]] = None) -> "OperationResult":
        return cls(success=False, error=error, issues=issues or [])


class AuthUser(BaseModel):
    """The signed-in user as reported by the identity provider."""

    id: str
    email: Optional[str] = None


class AuthResult(BaseModel):
    """Outcome of an identity provider call."""

    success: bool
    needs_confirmation: bool = Field(
        default=False,
        description="Sign-up succeeded but the email must be confirmed first"
    )
    user: Optional[AuthUser] = None
    error: Optional[str] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None
