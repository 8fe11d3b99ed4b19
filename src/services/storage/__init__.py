"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Transactions live in Supabase (or in memory when it isn't configured);
the audit trail can be mirrored to Google Sheets.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTransactionStorage,
)
from src.services.storage.supabase_store import SupabaseTransactionStorage
from src.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "InMemoryAuditStorage",
    "InMemoryTransactionStorage",
    "SupabaseTransactionStorage",
]
