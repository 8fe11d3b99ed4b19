"""
Shared fixtures.

All ledger tests run against a fixed clock so "future" and "past" are
deterministic. No test talks to a real backend.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from src.ledger import Ledger
from src.models.transaction import TransactionDraft
from src.validation import EntryValidator, PersistenceValidator


FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
YESTERDAY = (FIXED_NOW - timedelta(days=1)).isoformat()


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_draft(
    name: str = "Salary",
    amount: str = "+50000",
    occurred_at: str = YESTERDAY,
    description: str = "",
    category=None,
) -> TransactionDraft:
    return TransactionDraft(
        name=name,
        amount=amount,
        occurred_at=occurred_at,
        description=description,
        category=category,
    )


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def ledger():
    """An empty ledger whose validators share the fixed clock."""
    return Ledger(
        entry_validator=EntryValidator(clock=fixed_clock),
        persistence_validator=PersistenceValidator(clock=fixed_clock),
    )


@pytest.fixture
def supabase_env(monkeypatch):
    """Minimal Supabase configuration so adapters can read settings."""
    monkeypatch.setenv("SUPABASE_URL", "https://test-project.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "test-anon-key")


@pytest.fixture
def mock_supabase_client():
    """A MagicMock standing in for supabase.Client."""
    return MagicMock()
