"""
Field Permission Policy

Maps resource x role to the ordered list of fields that role may write,
loaded from field_permissions.yaml.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from .errors import PermissionDenied

logger = logging.getLogger(__name__)

BILL_FIELDS = [
    "vendor",
    "amount",
    "bill_date",
    "description",
    "status",
    "card_id",
    "category_id",
    "attachment_url",
    "attachment_type",
]
CARD_FIELDS = [
    "card_number",
    "card_holder",
    "card_type",
    "bank",
    "expiry_date",
    "card_limit",
    "balance",
    "is_active",
]
CASH_TRANSACTION_FIELDS = [
    "transaction_date",
    "description",
    "amount",
    "transaction_type",
    "category",
    "payment_method",
    "notes",
]
EMPLOYEE_FIELDS = [
    "first_name",
    "last_name",
    "email",
    "designation",
    "department_id",
    "base_salary",
    "join_date",
    "is_active",
]
SALARY_FIELDS = [
    "employee_id",
    "month",
    "base_salary",
    "allowances",
    "deductions",
    "net_salary",
    "status",
    "paid_date",
]
PETTY_EXPENSE_FIELDS = [
    "description",
    "amount",
    "category",
    "expense_date",
    "vendor",
    "receipt_number",
    "notes",
]
BUDGET_FIELDS = [
    "category_id",
    "category_name",
    "budget_limit",
    "spent",
    "period",
    "month",
    "is_active",
]
REMINDER_FIELDS = [
    "title",
    "description",
    "reminder_date",
    "reminder_time",
    "type",
    "related_id",
    "notification_methods",
    "recipients",
    "is_active",
]

DEFAULT_FIELD_PERMISSIONS = {
    "bills": {"admin": BILL_FIELDS, "user": []},
    "cards": {"admin": CARD_FIELDS, "user": []},
    "cash_transactions": {"admin": CASH_TRANSACTION_FIELDS, "user": []},
    "employees": {"admin": EMPLOYEE_FIELDS, "user": []},
    "salary": {"admin": SALARY_FIELDS, "user": []},
    "petty_expenses": {"admin": PETTY_EXPENSE_FIELDS, "user": list(PETTY_EXPENSE_FIELDS)},
    "budgets": {"admin": BUDGET_FIELDS, "user": []},
    "reminders": {"admin": REMINDER_FIELDS, "user": []},
}


@dataclass
class PermissionCheck:
    """Outcome of validating a set of requested fields."""

    allowed: bool
    denied_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"allowed": self.allowed, "deniedFields": self.denied_fields}


class FieldPolicy:
    """Role/field write permissions per resource."""

    def __init__(self, table: dict[str, dict[str, list[str]]] | None = None):
        self.table = table if table is not None else DEFAULT_FIELD_PERMISSIONS

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> "FieldPolicy":
        """Load the policy from field_permissions.yaml.

        Args:
            config_dir: Directory holding field_permissions.yaml

        Returns:
            FieldPolicy (built-in defaults when the file is absent)
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        config_file = Path(config_dir) / "field_permissions.yaml"
        if not config_file.exists():
            logger.info("No %s, using built-in field permissions", config_file)
            return cls()

        with open(config_file) as f:
            config = yaml.safe_load(f) or {}

        resources = config.get("resources", {})
        table = {
            resource: {role: list(fields or []) for role, fields in (roles or {}).items()}
            for resource, roles in resources.items()
        }
        return cls(table)

    def editable_fields(self, role: str, resource: str) -> list[str]:
        return list(self.table.get(resource, {}).get(role, []))

    def is_resource_editable(self, role: str, resource: str) -> bool:
        return len(self.editable_fields(role, resource)) > 0

    def filter_to_editable(self, role: str, resource: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Drop keys the role may not write."""
        editable = self.editable_fields(role, resource)
        if not editable:
            return {}
        return {name: patch[name] for name in editable if name in patch}

    def validate(self, role: str, resource: str, requested_fields: Iterable[str]) -> PermissionCheck:
        editable = set(self.editable_fields(role, resource))
        denied = [name for name in requested_fields if name not in editable]
        return PermissionCheck(allowed=not denied, denied_fields=denied)

    def describe(self, role: str, resource: str) -> dict:
        """Metadata attached to read responses."""
        editable = self.editable_fields(role, resource)
        return {
            "editable": editable,
            "editingEnabled": len(editable) > 0,
            "userRole": role,
        }


def enforce_write(policy: FieldPolicy, role: str, resource: str, patch: dict[str, Any]) -> dict[str, Any]:
    """Reject a write naming fields the role may not edit, else return the editable subset.

    Raises:
        PermissionDenied: Role cannot edit the resource or some requested fields
    """
    editable = policy.editable_fields(role, resource)
    if not editable:
        raise PermissionDenied(f"{role} users cannot edit {resource}")

    check = policy.validate(role, resource, patch.keys())
    if not check.allowed:
        raise PermissionDenied(
            f"You cannot edit the following fields: {', '.join(check.denied_fields)}",
            denied_fields=check.denied_fields,
            allowed_fields=editable,
        )

    return policy.filter_to_editable(role, resource, patch)
