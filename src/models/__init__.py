"""
Data Models Package

This package contains all Pydantic models used in the Personal Ledger system.
All data flowing through the system must conform to these schemas.
"""

from src.models.transaction import (
    AuthResult,
    AuthUser,
    CategoryExpense,
    OperationResult,
    Transaction,
    TransactionDraft,
    TransactionSummary,
    utc_now,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "AuthResult",
    "AuthUser",
    "CategoryExpense",
    "OperationResult",
    "Transaction",
    "TransactionDraft",
    "TransactionSummary",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
