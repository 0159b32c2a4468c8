"""
Petty Expenses Service
"""

from __future__ import annotations

import calendar
import logging
from datetime import date

from ..api.errors import PermissionDenied, ValidationError
from .base import BaseService, require_positive, require_text, to_number

logger = logging.getLogger(__name__)

PETTY_EXPENSE_COLUMNS = (
    "description",
    "amount",
    "category",
    "expense_date",
    "vendor",
    "receipt_number",
    "notes",
)


class PettyExpensesService(BaseService):
    """Small cash expenses recorded by staff."""

    table = "petty_expenses"
    entity_name = "Petty expense"

    def list(self, filters: dict | None = None) -> list[dict]:
        filters = filters or {}
        where = {}
        if filters.get("category"):
            where["category"] = filters["category"]
        if filters.get("created_by"):
            where["created_by"] = filters["created_by"]

        ranges = {}
        if filters.get("start_date") or filters.get("end_date"):
            ranges["expense_date"] = (filters.get("start_date"), filters.get("end_date"))

        return self.store.select(self.table, where, ranges=ranges, order_by=["-expense_date"])

    def create(self, data: dict, actor_id: str | None) -> dict:
        row = {
            "description": require_text(data, "description", "Description"),
            "amount": require_positive(data, "amount"),
            "expense_date": data.get("expense_date") or date.today(),
            "category": data.get("category") or None,
            "vendor": data.get("vendor") or None,
            "receipt_number": data.get("receipt_number") or None,
            "notes": data.get("notes") or None,
            "created_by": actor_id,
        }
        expense = self.store.insert(self.table, row)[0]

        self._changed("petty expense created")
        return expense

    def _require_owned(self, expense_id: str, actor_id: str | None, restrict_to_owner: bool) -> dict:
        expense = self._require(expense_id)
        if restrict_to_owner and str(expense.get("created_by")) != str(actor_id):
            raise PermissionDenied("You can only modify your own petty expenses")
        return expense

    def update(
        self,
        expense_id: str,
        patch: dict,
        actor_id: str | None = None,
        restrict_to_owner: bool = False,
    ) -> dict:
        self._require_owned(expense_id, actor_id, restrict_to_owner)

        changes = {k: v for k, v in patch.items() if k in PETTY_EXPENSE_COLUMNS}
        if "description" in changes:
            changes["description"] = require_text(changes, "description", "Description")
        if "amount" in changes:
            changes["amount"] = require_positive(changes, "amount")

        expense = self.store.update(self.table, self._stamp(changes), {"id": expense_id})[0]
        self._changed("petty expense updated")
        return expense

    def delete(
        self,
        expense_id: str,
        actor_id: str | None = None,
        restrict_to_owner: bool = False,
    ) -> dict:
        self._require_owned(expense_id, actor_id, restrict_to_owner)
        self.store.delete(self.table, {"id": expense_id})
        self._changed("petty expense deleted")
        return {"success": True, "message": "Petty expense deleted successfully"}

    def get_monthly_summary(self, month: int, year: int) -> dict:
        """Total, count and per-category breakdown for one calendar month."""
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12", {"field": "month"})

        start_date = date(year, month, 1)
        end_date = date(year, month, calendar.monthrange(year, month)[1])
        expenses = self.store.select(
            self.table,
            ranges={"expense_date": (start_date, end_date)},
            columns=["amount", "category"],
        )

        by_category: dict[str, dict] = {}
        for expense in expenses:
            category = expense.get("category") or "uncategorized"
            entry = by_category.setdefault(category, {"category": category, "total": 0.0, "count": 0})
            entry["total"] += to_number(expense["amount"])
            entry["count"] += 1

        return {
            "month": f"{year:04d}-{month:02d}",
            "total": sum(to_number(e["amount"]) for e in expenses),
            "count": len(expenses),
            "by_category": list(by_category.values()),
        }
