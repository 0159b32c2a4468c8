"""
Budgets Service

Budget limits per category with accumulated spend and threshold alerts.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import date

from ..api.errors import ValidationError
from .base import BaseService, require_choice, require_non_negative, require_positive, to_number

logger = logging.getLogger(__name__)

BUDGET_PERIODS = ("monthly", "quarterly", "yearly")
PERIOD_MONTHS = {"monthly": 1, "quarterly": 3, "yearly": 12}

BUDGET_COLUMNS = (
    "category_id",
    "category_name",
    "budget_limit",
    "spent",
    "period",
    "month",
    "is_active",
)

_MONTH = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def utilization(budget: dict) -> float | None:
    """spent / limit, or None when the limit is not positive."""
    limit = to_number(budget.get("budget_limit"))
    if limit <= 0:
        return None
    return to_number(budget.get("spent")) / limit


def period_end(budget: dict) -> date | None:
    """Last day covered by a budget, from its month anchor and period."""
    anchor = budget.get("month")
    if not anchor:
        return None

    year, month = (int(part) for part in str(anchor)[:7].split("-"))
    month += PERIOD_MONTHS.get(budget.get("period") or "monthly", 1) - 1
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, calendar.monthrange(year, month)[1])


def _check_month(value) -> str:
    value = str(value)[:7]
    if not _MONTH.match(value):
        raise ValidationError("month must use YYYY-MM format", {"field": "month"})
    return value


class BudgetsService(BaseService):
    """Category budgets."""

    table = "budgets"
    entity_name = "Budget"

    def list(self, filters: dict | None = None) -> list[dict]:
        filters = filters or {}
        where = {}
        if filters.get("period"):
            where["period"] = filters["period"]
        if filters.get("month"):
            where["month"] = filters["month"]
        if filters.get("is_active") is not None:
            where["is_active"] = filters["is_active"]
        return self.store.select(self.table, where, order_by=["-created_at"])

    def create(self, data: dict, actor_id: str | None = None) -> dict:
        """Create an active budget with nothing spent.

        Raises:
            ValidationError: No category, limit <= 0, bad period or month
        """
        if not data.get("category_name") and not data.get("category_id"):
            raise ValidationError("category_name or category_id is required", {"field": "category_name"})

        row = {
            "category_id": data.get("category_id") or None,
            "category_name": data.get("category_name") or None,
            "budget_limit": require_positive(data, "budget_limit"),
            "spent": require_non_negative(data, "spent"),
            "period": require_choice(data.get("period") or "monthly", BUDGET_PERIODS, "period"),
            "month": _check_month(data.get("month") or date.today().strftime("%Y-%m")),
            "is_active": True,
        }
        budget = self.store.insert(self.table, row)[0]

        self._changed("budget created")
        return budget

    def update(self, budget_id: str, patch: dict, actor_id: str | None = None) -> dict:
        self._require(budget_id)

        changes = {k: v for k, v in patch.items() if k in BUDGET_COLUMNS}
        if "budget_limit" in changes:
            changes["budget_limit"] = require_positive(changes, "budget_limit")
        if "spent" in changes and changes["spent"] is None:
            del changes["spent"]
        elif "spent" in changes:
            changes["spent"] = require_non_negative(changes, "spent")
        if "period" in changes:
            require_choice(changes["period"], BUDGET_PERIODS, "period")
        if "month" in changes and changes["month"] is not None:
            changes["month"] = _check_month(changes["month"])

        budget = self.store.update(self.table, self._stamp(changes), {"id": budget_id})[0]
        self._changed("budget updated")
        return budget

    def delete(self, budget_id: str) -> dict:
        self._require(budget_id)
        self.store.delete(self.table, {"id": budget_id})
        self._changed("budget deleted")
        return {"success": True, "message": "Budget deleted successfully"}

    def get_alerts(self, threshold: float = 0.8) -> list[dict]:
        """Active budgets whose spent/limit ratio is at or above threshold."""
        alerts = []
        for budget in self.store.select(self.table, {"is_active": True}, order_by=["-created_at"]):
            ratio = utilization(budget)
            if ratio is not None and ratio >= threshold:
                alerts.append({**budget, "utilization_percent": round(ratio * 100, 2)})
        return alerts

    def add_spent(self, budget_id: str, amount: float) -> dict:
        """Add to a budget's spent total in one statement."""
        self._require(budget_id)
        self.store.increment(self.table, budget_id, "spent", to_number(amount))
        self._changed("budget spend recorded")
        return self._require(budget_id)

    def get_stats(self) -> dict:
        budgets = self.store.select(self.table)
        active = [b for b in budgets if b.get("is_active")]
        total_limit = sum(to_number(b["budget_limit"]) for b in active)
        total_spent = sum(to_number(b["spent"]) for b in active)

        return {
            "total_budgets": len(budgets),
            "active_budgets": len(active),
            "total_limit": total_limit,
            "total_spent": total_spent,
            "utilization_percent": round(total_spent / total_limit * 100, 2) if total_limit > 0 else 0,
        }
