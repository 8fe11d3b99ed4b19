"""Validation package."""

from src.validation.validator import (
    CredentialValidator,
    EntryValidator,
    PersistenceValidator,
    ValidationError,
    parse_signed_amount,
    parse_timestamp,
    system_clock,
)

__all__ = [
    "CredentialValidator",
    "EntryValidator",
    "PersistenceValidator",
    "ValidationError",
    "parse_signed_amount",
    "parse_timestamp",
    "system_clock",
]
