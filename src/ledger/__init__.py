"""Ledger package: the session's transactions and running balance."""

from src.ledger.smoothing import BalanceAnimator, next_display_value
from src.ledger.store import (
    DuplicateTransactionError,
    Ledger,
    LedgerError,
    TransactionNotFoundError,
)

__all__ = [
    "BalanceAnimator",
    "DuplicateTransactionError",
    "Ledger",
    "LedgerError",
    "TransactionNotFoundError",
    "next_display_value",
]
