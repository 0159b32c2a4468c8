"""
Shared service helpers.
"""

import logging
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..api.database import RecordStore
from ..api.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def to_number(value: Any) -> float:
    """Convert a stored numeric (Decimal, str, None) to float."""
    if value is None or value == "":
        return 0.0
    try:
        return float(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        return 0.0


def as_date(value: Any) -> date | None:
    """Coerce a date, datetime or ISO string to a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def require_positive(data: dict, field_name: str) -> float:
    """Return data[field_name] as a number, raising unless it is > 0."""
    raw = data.get(field_name)
    try:
        amount = float(Decimal(str(raw)))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", {"field": field_name})
    if not math.isfinite(amount):
        raise ValidationError(f"{field_name} must be a finite number", {"field": field_name})
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0", {"field": field_name})
    return amount


def require_non_negative(data: dict, field_name: str, default: float = 0.0) -> float:
    raw = data.get(field_name)
    if raw is None:
        return default
    try:
        value = float(Decimal(str(raw)))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", {"field": field_name})
    if not math.isfinite(value):
        raise ValidationError(f"{field_name} must be a finite number", {"field": field_name})
    if value < 0:
        raise ValidationError(f"{field_name} cannot be negative", {"field": field_name})
    return value


def require_text(data: dict, field_name: str, label: str | None = None) -> str:
    value = data.get(field_name)
    if value is None or not str(value).strip():
        raise ValidationError(f"{label or field_name} is required", {"field": field_name})
    return str(value).strip()


def require_choice(value: Any, choices: tuple[str, ...], field_name: str) -> str:
    if value not in choices:
        raise ValidationError(
            f"{field_name} must be one of: {', '.join(choices)}",
            {"field": field_name},
        )
    return value


class BaseService:
    """Common plumbing for table-backed services."""

    table: str = ""
    entity_name: str = "Record"

    def __init__(self, store: RecordStore, cache=None):
        """Initialize the service.

        Args:
            store: Record store
            cache: Dashboard cache notified after every write
        """
        self.store = store
        self.cache = cache

    def _require(self, record_id: str, store: RecordStore | None = None) -> dict:
        row = (store or self.store).get(self.table, record_id)
        if not row:
            raise NotFoundError(f"{self.entity_name} not found")
        return row

    def get_by_id(self, record_id: str) -> dict:
        return self._require(record_id)

    def _changed(self, reason: str) -> None:
        if self.cache is not None:
            self.cache.invalidate(reason)

    @staticmethod
    def _stamp(patch: dict) -> dict:
        return {**patch, "updated_at": datetime.now()}
