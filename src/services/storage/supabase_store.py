"""
Supabase Storage Implementation

DESIGN DECISION: The hosted backend owns persistence and aggregation.
- Writes go to the `transactions` table
- Reads come from the `transaction_details` view
- Balance, summary and per-category totals are computed server-side
  by RPCs (get_user_balance, get_transactions_summary,
  get_category_wise_expenses)

Transport failures are retried; errors the backend answered with are not.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog
from postgrest.exceptions import APIError
from supabase import Client
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_settings
from src.ledger.formatters import format_display_time
from src.models.transaction import (
    CategoryExpense,
    Transaction,
    TransactionSummary,
)
from src.services.storage.interface import (
    ConnectionError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from src.services.supabase_client import get_supabase_client
from src.validation import parse_timestamp


logger = structlog.get_logger(__name__)

_read_retry = retry(
    retry=retry_if_exception_type(ConnectionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


class SupabaseTransactionStorage(TransactionStorageInterface):
    """
    Supabase implementation of transaction storage.

    One transaction per row; ids are generated client-side by the ledger.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client or get_supabase_client()
        self._settings = get_settings().supabase

    def _execute(self, query, action: str):
        """Run a query builder, mapping failures onto storage errors."""
        try:
            return query.execute()
        except APIError as e:
            raise StorageError(f"Failed to {action}: {e.message}")
        except Exception as e:
            raise ConnectionError(f"Failed to {action}: {e}")

    def _row_to_transaction(self, row: dict) -> Transaction:
        """Convert a table/view row to a Transaction."""
        occurred_at = parse_timestamp(str(row["datetime"]))
        created_at = row.get("created_at")
        fields = {
            "id": UUID(str(row["id"])),
            "name": row["name"],
            "description": row.get("description") or None,
            "amount": _to_decimal(row["amount"]),
            "occurred_at": occurred_at,
            "display_time": format_display_time(occurred_at),
            "category": row.get("category_name") or row.get("category") or None,
        }
        if created_at:
            fields["created_at"] = parse_timestamp(str(created_at))
        return Transaction(**fields)

    async def insert_transaction(
        self,
        transaction: Transaction,
        owner_id: str,
    ) -> Transaction:
        """Insert a transaction row owned by the user."""
        response = self._execute(
            self._client.table(self._settings.transactions_table)
            .insert([transaction.to_record(owner_id)]),
            "insert transaction",
        )
        if not response.data:
            raise StorageError("Insert returned no row")
        return self._row_to_transaction(response.data[0])

    @_read_retry
    async def list_transactions(
        self,
        owner_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        """List a page of the user's transactions, newest first."""
        response = self._execute(
            self._client.table(self._settings.transactions_view)
            .select("*")
            .eq("user_id", owner_id)
            .order("datetime", desc=True)
            .order("id")
            .range(offset, offset + limit - 1),
            "list transactions",
        )

        transactions = []
        for row in response.data or []:
            try:
                transactions.append(self._row_to_transaction(row))
            except (KeyError, ValueError) as e:
                # Skip malformed rows
                logger.warning("malformed_transaction_row", row_id=row.get("id"), error=str(e))
        return transactions

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        """Replace the row with the transaction's id."""
        record = transaction.to_record()
        record.pop("id")
        response = self._execute(
            self._client.table(self._settings.transactions_table)
            .update(record)
            .eq("id", str(transaction.id)),
            "update transaction",
        )
        if not response.data:
            raise NotFoundError(f"Transaction not found: {transaction.id}")
        return self._row_to_transaction(response.data[0])

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """Delete the row with this id."""
        response = self._execute(
            self._client.table(self._settings.transactions_table)
            .delete()
            .eq("id", str(transaction_id)),
            "delete transaction",
        )
        return bool(response.data)

    @_read_retry
    async def get_balance(self, owner_id: str) -> Decimal:
        response = self._execute(
            self._client.rpc("get_user_balance", {"user_uuid": owner_id}),
            "get balance",
        )
        return _to_decimal(response.data)

    @_read_retry
    async def get_summary(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> TransactionSummary:
        response = self._execute(
            self._client.rpc(
                "get_transactions_summary",
                {
                    "user_uuid": owner_id,
                    "start_date": start.isoformat(),
                    "end_date": end.isoformat(),
                },
            ),
            "get summary",
        )
        if not response.data:
            return TransactionSummary()

        row = response.data[0]
        income = _to_decimal(row.get("total_income"))
        expenses = abs(_to_decimal(row.get("total_expenses")))
        net = row.get("net_balance")
        return TransactionSummary(
            total_income=income,
            total_expenses=expenses,
            net_balance=_to_decimal(net) if net is not None else income - expenses,
            transaction_count=int(row.get("transaction_count") or 0),
        )

    @_read_retry
    async def get_category_expenses(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> list[CategoryExpense]:
        response = self._execute(
            self._client.rpc(
                "get_category_wise_expenses",
                {
                    "user_uuid": owner_id,
                    "start_date": start.isoformat(),
                    "end_date": end.isoformat(),
                },
            ),
            "get category expenses",
        )
        return [
            CategoryExpense(
                category=row.get("category_name") or row.get("category") or "Uncategorized",
                total_amount=abs(_to_decimal(row.get("total_amount"))),
            )
            for row in response.data or []
        ]
