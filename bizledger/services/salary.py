"""
Salary Service

Monthly salary records. Net salary is always derived server-side as
base + allowances - deductions.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from ..api.errors import ValidationError
from .base import BaseService, require_choice, require_non_negative, require_text, to_number

logger = logging.getLogger(__name__)

SALARY_STATUSES = ("pending", "paid")

SALARY_COLUMNS = (
    "employee_id",
    "month",
    "base_salary",
    "allowances",
    "deductions",
    "status",
    "paid_date",
)

_MONTH = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def calculate_net_salary(base_salary: float, allowances: float = 0, deductions: float = 0) -> float:
    return to_number(base_salary) + to_number(allowances) - to_number(deductions)


def _check_month(value: str) -> str:
    if not _MONTH.match(str(value)):
        raise ValidationError("month must use YYYY-MM format", {"field": "month"})
    return str(value)


class SalaryService(BaseService):
    """Salary records per employee and month."""

    table = "salaries"
    entity_name = "Salary record"

    def list(self, filters: dict | None = None) -> list[dict]:
        filters = filters or {}
        where = {k: filters[k] for k in ("employee_id", "month", "status") if filters.get(k)}
        return self.store.select(self.table, where, order_by=["-month"])

    def get_employee_history(self, employee_id: str) -> list[dict]:
        return self.store.select(self.table, {"employee_id": employee_id}, order_by=["-month"])

    def create(self, data: dict, actor_id: str | None = None) -> dict:
        """Create a pending salary record with a computed net salary.

        Raises:
            ValidationError: Missing employee/month, negative amounts, unknown employee
        """
        employee_id = require_text(data, "employee_id", "Employee")
        month = _check_month(require_text(data, "month", "Month"))
        if data.get("base_salary") is None:
            raise ValidationError("base_salary is required", {"field": "base_salary"})

        base_salary = require_non_negative(data, "base_salary")
        allowances = require_non_negative(data, "allowances")
        deductions = require_non_negative(data, "deductions")

        if not self.store.get("employees", employee_id):
            raise ValidationError("Employee not found", {"field": "employee_id"})

        row = {
            "employee_id": employee_id,
            "month": month,
            "base_salary": base_salary,
            "allowances": allowances,
            "deductions": deductions,
            "net_salary": calculate_net_salary(base_salary, allowances, deductions),
            "status": "pending",
        }
        salary = self.store.insert(self.table, row)[0]

        logger.info("Salary %s for employee %s (%s) created", salary["id"], employee_id, month)
        self._changed("salary created")
        return salary

    def update(self, salary_id: str, patch: dict, actor_id: str | None = None) -> dict:
        """Update a salary record; net salary follows base/allowances/deductions."""
        current = self._require(salary_id)

        changes = {k: v for k, v in patch.items() if k in SALARY_COLUMNS}
        if "month" in changes:
            changes["month"] = _check_month(changes["month"])
        if "status" in changes:
            require_choice(changes["status"], SALARY_STATUSES, "status")

        amount_fields = ("base_salary", "allowances", "deductions")
        for name in amount_fields:
            if name in changes and changes[name] is None:
                del changes[name]
            elif name in changes:
                changes[name] = require_non_negative(changes, name)

        if any(name in changes for name in amount_fields):
            merged = {name: changes.get(name, current.get(name)) for name in amount_fields}
            changes["net_salary"] = calculate_net_salary(**merged)

        salary = self.store.update(self.table, self._stamp(changes), {"id": salary_id})[0]
        self._changed("salary updated")
        return salary

    def mark_paid(self, salary_id: str) -> dict:
        self._require(salary_id)
        now = datetime.now()
        salary = self.store.update(
            self.table,
            {"status": "paid", "paid_date": now, "updated_at": now},
            {"id": salary_id},
        )[0]

        logger.info("Salary %s marked as paid", salary_id)
        self._changed("salary paid")
        return salary

    def delete(self, salary_id: str) -> dict:
        self._require(salary_id)
        self.store.delete(self.table, {"id": salary_id})
        self._changed("salary deleted")
        return {"success": True, "message": "Salary record deleted successfully"}

    def get_stats(self, filters: dict | None = None) -> dict:
        rows = self.list(filters)
        total_net = sum(to_number(r["net_salary"]) for r in rows)

        return {
            "total_records": len(rows),
            "pending_count": sum(1 for r in rows if r["status"] == "pending"),
            "paid_count": sum(1 for r in rows if r["status"] == "paid"),
            "total_net_salary": total_net,
            "average_net_salary": total_net / len(rows) if rows else 0,
        }
