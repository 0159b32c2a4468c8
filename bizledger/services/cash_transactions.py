"""
Cash Transactions Service
"""

from __future__ import annotations

import logging
from datetime import date

from .base import BaseService, require_choice, require_positive, to_number

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ("income", "expense")

TRANSACTION_COLUMNS = (
    "transaction_date",
    "description",
    "amount",
    "transaction_type",
    "category",
    "payment_method",
    "notes",
)


class CashTransactionsService(BaseService):
    """Cash income and expense entries."""

    table = "cash_transactions"
    entity_name = "Transaction"

    def list(self, filters: dict | None = None) -> list[dict]:
        """List transactions, newest first.

        Args:
            filters: Optional start_date, end_date, transaction_type, category
        """
        filters = filters or {}
        where = {}
        if filters.get("transaction_type"):
            where["transaction_type"] = filters["transaction_type"]
        if filters.get("category"):
            where["category"] = filters["category"]

        ranges = {}
        if filters.get("start_date") or filters.get("end_date"):
            ranges["transaction_date"] = (filters.get("start_date"), filters.get("end_date"))

        return self.store.select(
            self.table,
            where,
            ranges=ranges,
            order_by=["-transaction_date", "-created_at"],
        )

    def create(self, data: dict, actor_id: str | None) -> dict:
        row = {
            "transaction_date": data.get("transaction_date") or date.today(),
            "description": data.get("description") or "Cash transaction",
            "amount": require_positive(data, "amount"),
            "transaction_type": require_choice(
                data.get("transaction_type") or "expense", TRANSACTION_TYPES, "transaction_type"
            ),
            "category": data.get("category") or None,
            "payment_method": data.get("payment_method") or None,
            "notes": data.get("notes") or None,
            "created_by": actor_id,
        }
        transaction = self.store.insert(self.table, row)[0]

        self._changed("cash transaction created")
        return transaction

    def update(self, transaction_id: str, patch: dict, actor_id: str | None = None) -> dict:
        self._require(transaction_id)

        changes = {k: v for k, v in patch.items() if k in TRANSACTION_COLUMNS}
        if "amount" in changes:
            changes["amount"] = require_positive(changes, "amount")
        if "transaction_type" in changes:
            require_choice(changes["transaction_type"], TRANSACTION_TYPES, "transaction_type")

        transaction = self.store.update(self.table, self._stamp(changes), {"id": transaction_id})[0]
        self._changed("cash transaction updated")
        return transaction

    def delete(self, transaction_id: str) -> dict:
        self._require(transaction_id)
        self.store.delete(self.table, {"id": transaction_id})
        self._changed("cash transaction deleted")
        return {"success": True, "message": "Transaction deleted successfully"}

    def get_stats(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        ranges = {}
        if start_date or end_date:
            ranges["transaction_date"] = (start_date, end_date)

        rows = self.store.select(self.table, ranges=ranges, columns=["amount", "transaction_type"])

        total_income = sum(to_number(r["amount"]) for r in rows if r["transaction_type"] == "income")
        total_expense = sum(to_number(r["amount"]) for r in rows if r["transaction_type"] == "expense")

        return {
            "total_income": total_income,
            "total_expense": total_expense,
            "net_balance": total_income - total_expense,
            "transaction_count": len(rows),
        }
