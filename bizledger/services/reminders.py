"""
Reminders Service
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from ..api.errors import ValidationError
from .base import BaseService, require_text

logger = logging.getLogger(__name__)

REMINDER_COLUMNS = (
    "title",
    "description",
    "reminder_date",
    "reminder_time",
    "type",
    "related_id",
    "notification_methods",
    "recipients",
    "is_active",
)


class RemindersService(BaseService):
    """Dated reminders for bills, salaries and other follow-ups."""

    table = "reminders"
    entity_name = "Reminder"

    def list(self, filters: dict | None = None) -> list[dict]:
        filters = filters or {}
        where = {}
        if filters.get("type"):
            where["type"] = filters["type"]
        if filters.get("is_active") is not None:
            where["is_active"] = filters["is_active"]

        ranges = {}
        if filters.get("start_date") or filters.get("end_date"):
            ranges["reminder_date"] = (filters.get("start_date"), filters.get("end_date"))

        return self.store.select(self.table, where, ranges=ranges, order_by=["reminder_date"])

    def create(self, data: dict, actor_id: str | None = None) -> dict:
        if not data.get("reminder_date"):
            raise ValidationError("reminder_date is required", {"field": "reminder_date"})

        row = {
            "title": require_text(data, "title", "Title"),
            "description": data.get("description"),
            "reminder_date": data["reminder_date"],
            "reminder_time": data.get("reminder_time"),
            "type": data.get("type") or "custom",
            "related_id": data.get("related_id"),
            "notification_methods": data.get("notification_methods") or ["in_app"],
            "recipients": data.get("recipients") or [],
            "is_active": True,
        }
        reminder = self.store.insert(self.table, row)[0]

        self._changed("reminder created")
        return reminder

    def update(self, reminder_id: str, patch: dict, actor_id: str | None = None) -> dict:
        self._require(reminder_id)

        changes = {k: v for k, v in patch.items() if k in REMINDER_COLUMNS}
        if "title" in changes:
            changes["title"] = require_text(changes, "title", "Title")
        if "reminder_date" in changes and not changes["reminder_date"]:
            raise ValidationError("reminder_date cannot be empty", {"field": "reminder_date"})

        reminder = self.store.update(self.table, self._stamp(changes), {"id": reminder_id})[0]
        self._changed("reminder updated")
        return reminder

    def delete(self, reminder_id: str) -> dict:
        self._require(reminder_id)
        self.store.delete(self.table, {"id": reminder_id})
        self._changed("reminder deleted")
        return {"success": True, "message": "Reminder deleted successfully"}

    def get_upcoming(self, days: int = 7, today: date | None = None) -> list[dict]:
        """Active reminders dated from today through today + days."""
        if days < 0:
            raise ValidationError("days cannot be negative", {"field": "days"})

        today = today or date.today()
        return self.store.select(
            self.table,
            {"is_active": True},
            ranges={"reminder_date": (today, today + timedelta(days=days))},
            order_by=["reminder_date"],
        )

    def get_today(self, today: date | None = None) -> list[dict]:
        return self.store.select(
            self.table,
            {"is_active": True, "reminder_date": today or date.today()},
            order_by=["reminder_time"],
        )
