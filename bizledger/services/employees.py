"""
Employees Service
"""

from __future__ import annotations

import logging

from ..api.errors import ConflictError
from .base import BaseService, require_non_negative, require_text

logger = logging.getLogger(__name__)

EMPLOYEE_COLUMNS = (
    "first_name",
    "last_name",
    "email",
    "designation",
    "department_id",
    "base_salary",
    "join_date",
    "is_active",
)


class EmployeesService(BaseService):
    """Employees on the payroll."""

    table = "employees"
    entity_name = "Employee"

    def list(self, filters: dict | None = None) -> list[dict]:
        filters = filters or {}
        where = {}
        if filters.get("is_active") is not None:
            where["is_active"] = filters["is_active"]
        return self.store.select(self.table, where, order_by=["first_name"])

    def list_active(self) -> list[dict]:
        return self.list({"is_active": True})

    def _ensure_unique_email(self, email: str, exclude_id: str | None = None) -> None:
        for employee in self.store.select(self.table, {"email": email}, columns=["id"]):
            if exclude_id is None or str(employee["id"]) != str(exclude_id):
                raise ConflictError("Employee with this email already exists")

    def create(self, data: dict, actor_id: str | None = None) -> dict:
        """Add an employee.

        Raises:
            ValidationError: Missing name or negative base salary
            ConflictError: Email already in use
        """
        email = (data.get("email") or "").strip().lower() or None
        if email:
            self._ensure_unique_email(email)

        row = {
            "first_name": require_text(data, "first_name", "First name"),
            "last_name": require_text(data, "last_name", "Last name"),
            "email": email,
            "designation": data.get("designation"),
            "department_id": data.get("department_id"),
            "base_salary": require_non_negative(data, "base_salary"),
            "join_date": data.get("join_date"),
            "is_active": data.get("is_active") if data.get("is_active") is not None else True,
        }
        employee = self.store.insert(self.table, row)[0]

        logger.info("Employee %s created by %s", employee["id"], actor_id)
        self._changed("employee created")
        return employee

    def update(self, employee_id: str, patch: dict, actor_id: str | None = None) -> dict:
        self._require(employee_id)

        changes = {k: v for k, v in patch.items() if k in EMPLOYEE_COLUMNS}
        if changes.get("email"):
            changes["email"] = changes["email"].strip().lower()
            self._ensure_unique_email(changes["email"], exclude_id=employee_id)
        for name in ("first_name", "last_name"):
            if name in changes:
                changes[name] = require_text(changes, name)
        if "base_salary" in changes and changes["base_salary"] is None:
            del changes["base_salary"]
        elif "base_salary" in changes:
            changes["base_salary"] = require_non_negative(changes, "base_salary")

        employee = self.store.update(self.table, self._stamp(changes), {"id": employee_id})[0]
        self._changed("employee updated")
        return employee

    def delete(self, employee_id: str) -> dict:
        """Deactivate an employee with salary history, otherwise delete outright."""
        self._require(employee_id)

        if self.store.count("salaries", {"employee_id": employee_id}) > 0:
            self.store.update(self.table, self._stamp({"is_active": False}), {"id": employee_id})
            self._changed("employee deactivated")
            return {"success": True, "message": "Employee deactivated successfully"}

        self.store.delete(self.table, {"id": employee_id})
        self._changed("employee deleted")
        return {"success": True, "message": "Employee deleted successfully"}
