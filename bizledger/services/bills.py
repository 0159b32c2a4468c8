"""
Bills Service

Bill CRUD, bill statistics, and the card balance adjustments that go with
bills linked to a card.
"""

from __future__ import annotations

import logging
from datetime import date

from ..api.errors import ValidationError
from .base import BaseService, require_choice, require_positive, require_text, to_number

logger = logging.getLogger(__name__)

BILL_STATUSES = ("pending", "approved", "paid", "rejected", "overdue")

BILL_COLUMNS = (
    "vendor",
    "amount",
    "bill_date",
    "description",
    "status",
    "card_id",
    "category_id",
    "attachment_url",
    "attachment_type",
)


class BillsService(BaseService):
    """Bills and their linked card balances."""

    table = "bills"
    entity_name = "Bill"

    def list(self, filters: dict | None = None) -> list[dict]:
        """List bills, newest first.

        Args:
            filters: Optional start_date, end_date, status

        Returns:
            Bills with their card and creator email attached
        """
        filters = filters or {}
        where = {}
        if filters.get("status"):
            where["status"] = filters["status"]

        ranges = {}
        if filters.get("start_date") or filters.get("end_date"):
            ranges["bill_date"] = (filters.get("start_date"), filters.get("end_date"))

        rows = self.store.select(
            self.table,
            where,
            ranges=ranges,
            order_by=["-bill_date", "-created_at"],
        )
        return self._attach_relations(rows)

    def get_by_id(self, bill_id: str) -> dict:
        return self._attach_relations([self._require(bill_id)])[0]

    def _attach_relations(self, rows: list[dict]) -> list[dict]:
        card_ids = sorted({str(r["card_id"]) for r in rows if r.get("card_id")})
        user_ids = sorted({str(r["created_by"]) for r in rows if r.get("created_by")})

        cards = {}
        if card_ids:
            for card in self.store.select(
                "cards", {"id": card_ids}, columns=["id", "card_number", "card_holder"]
            ):
                cards[str(card["id"])] = {
                    "card_number": card["card_number"],
                    "card_holder": card["card_holder"],
                }

        emails = {}
        if user_ids:
            for user in self.store.select("users", {"id": user_ids}, columns=["id", "email"]):
                emails[str(user["id"])] = user["email"]

        result = []
        for row in rows:
            bill = dict(row)
            bill["card"] = cards.get(str(row["card_id"])) if row.get("card_id") else None
            bill["created_by_email"] = emails.get(str(row["created_by"])) if row.get("created_by") else None
            result.append(bill)
        return result

    def _check_card(self, store, card_id: str) -> None:
        if not store.get("cards", card_id):
            raise ValidationError("Linked card does not exist", {"field": "card_id"})

    def create(self, data: dict, actor_id: str | None) -> dict:
        """Create a bill and charge its card, if any.

        Raises:
            ValidationError: Empty vendor, amount <= 0, bad status or card
        """
        vendor = require_text(data, "vendor", "Vendor")
        amount = require_positive(data, "amount")
        status = require_choice(data.get("status") or "pending", BILL_STATUSES, "status")
        card_id = data.get("card_id") or None

        row = {
            "bill_date": data.get("bill_date") or date.today(),
            "vendor": vendor,
            "amount": amount,
            "description": data.get("description") or "",
            "category_id": data.get("category_id") or None,
            "card_id": card_id,
            "status": status,
            "attachment_url": data.get("attachment_url"),
            "attachment_type": data.get("attachment_type"),
            "created_by": actor_id,
        }

        with self.store.transaction() as tx:
            if card_id:
                self._check_card(tx, card_id)
            bill = tx.insert(self.table, row)[0]
            if card_id:
                tx.adjust_card_balance(card_id, amount)

        logger.info("Bill %s created by %s", bill["id"], actor_id)
        self._changed("bill created")
        return self._attach_relations([bill])[0]

    def update(self, bill_id: str, patch: dict, actor_id: str | None = None) -> dict:
        """Update a bill, moving its amount between cards when needed."""
        current = self._require(bill_id)

        changes = {k: v for k, v in patch.items() if k in BILL_COLUMNS}
        if "vendor" in changes:
            changes["vendor"] = require_text(changes, "vendor", "Vendor")
        if "amount" in changes:
            changes["amount"] = require_positive(changes, "amount")
        if "status" in changes:
            require_choice(changes["status"], BILL_STATUSES, "status")
        if "card_id" in changes:
            changes["card_id"] = changes["card_id"] or None

        old_card = current.get("card_id")
        old_amount = to_number(current.get("amount"))
        new_card = changes.get("card_id", old_card)
        new_amount = changes.get("amount", old_amount)

        with self.store.transaction() as tx:
            if "card_id" in changes and new_card:
                self._check_card(tx, new_card)

            updated = tx.update(self.table, self._stamp(changes), {"id": bill_id})[0]

            if "amount" in changes or "card_id" in changes:
                if old_card and new_card and str(old_card) == str(new_card):
                    if new_amount != old_amount:
                        tx.adjust_card_balance(new_card, new_amount - old_amount)
                else:
                    if old_card:
                        tx.adjust_card_balance(old_card, -old_amount)
                    if new_card:
                        tx.adjust_card_balance(new_card, new_amount)

        logger.info("Bill %s updated by %s", bill_id, actor_id)
        self._changed("bill updated")
        return self._attach_relations([updated])[0]

    def delete(self, bill_id: str) -> dict:
        bill = self._require(bill_id)

        with self.store.transaction() as tx:
            tx.delete(self.table, {"id": bill_id})
            if bill.get("card_id"):
                tx.adjust_card_balance(bill["card_id"], -to_number(bill.get("amount")))

        self._changed("bill deleted")
        return {"success": True, "message": "Bill deleted successfully"}

    def get_stats(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        """Totals, average and status counts for bills in a date range."""
        ranges = {}
        if start_date or end_date:
            ranges["bill_date"] = (start_date, end_date)

        bills = self.store.select(self.table, ranges=ranges, columns=["amount", "status"])
        total = sum(to_number(b["amount"]) for b in bills)

        def count(status: str) -> int:
            return sum(1 for b in bills if b["status"] == status)

        return {
            "total_bills": len(bills),
            "total_amount": total,
            "average_amount": total / len(bills) if bills else 0,
            "pending_count": count("pending"),
            "approved_count": count("approved"),
            "paid_count": count("paid"),
            "rejected_count": count("rejected"),
        }
