"""Services package."""

from src.services.auth import AuthServiceInterface, SupabaseAuthService
from src.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    InMemoryAuditStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
    SupabaseTransactionStorage,
    TransactionStorageInterface,
)

__all__ = [
    # Auth services
    "AuthServiceInterface",
    "SupabaseAuthService",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "InMemoryAuditStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "StorageError",
    "SupabaseTransactionStorage",
    "TransactionStorageInterface",
]
