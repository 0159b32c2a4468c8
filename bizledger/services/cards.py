"""
Cards Service
"""

from __future__ import annotations

import logging

from ..api.errors import ConflictError
from .base import (
    BaseService,
    require_choice,
    require_non_negative,
    require_text,
    to_number,
)

logger = logging.getLogger(__name__)

CARD_TYPES = ("credit", "debit")

CARD_COLUMNS = (
    "card_number",
    "card_holder",
    "card_type",
    "bank",
    "expiry_date",
    "card_limit",
    "balance",
    "is_active",
)


class CardsService(BaseService):
    """Payment cards and their running balances."""

    table = "cards"
    entity_name = "Card"

    def list(self, filters: dict | None = None) -> list[dict]:
        """List cards, active first then newest first."""
        filters = filters or {}
        where = {}
        if filters.get("is_active") is not None:
            where["is_active"] = filters["is_active"]
        return self.store.select(self.table, where, order_by=["-is_active", "-created_at"])

    def list_active(self) -> list[dict]:
        return self.store.select(self.table, {"is_active": True}, order_by=["-created_at"])

    def _ensure_unique_number(self, card_number: str, exclude_id: str | None = None) -> None:
        for card in self.store.select(self.table, {"card_number": card_number}, columns=["id"]):
            if exclude_id is None or str(card["id"]) != str(exclude_id):
                raise ConflictError("Card number already exists")

    def create(self, data: dict, actor_id: str | None = None) -> dict:
        """Register a card.

        Raises:
            ValidationError: Missing number/holder or bad type/limit
            ConflictError: Card number already exists
        """
        card_number = require_text(data, "card_number", "Card number")
        card_holder = require_text(data, "card_holder", "Card holder")
        card_type = require_choice(data.get("card_type") or "credit", CARD_TYPES, "card_type")

        self._ensure_unique_number(card_number)

        row = {
            "card_number": card_number,
            "card_holder": card_holder,
            "card_type": card_type,
            "bank": data.get("bank") or "",
            "expiry_date": data.get("expiry_date"),
            "card_limit": require_non_negative(data, "card_limit"),
            "balance": require_non_negative(data, "balance"),
            "is_active": data.get("is_active") if data.get("is_active") is not None else True,
        }
        card = self.store.insert(self.table, row)[0]

        logger.info("Card %s created by %s", card["id"], actor_id)
        self._changed("card created")
        return card

    def update(self, card_id: str, patch: dict, actor_id: str | None = None) -> dict:
        self._require(card_id)

        changes = {k: v for k, v in patch.items() if k in CARD_COLUMNS}
        if "card_number" in changes:
            changes["card_number"] = require_text(changes, "card_number", "Card number")
            self._ensure_unique_number(changes["card_number"], exclude_id=card_id)
        if "card_holder" in changes:
            changes["card_holder"] = require_text(changes, "card_holder", "Card holder")
        if "card_type" in changes:
            require_choice(changes["card_type"], CARD_TYPES, "card_type")
        if "card_limit" in changes and changes["card_limit"] is None:
            del changes["card_limit"]
        elif "card_limit" in changes:
            changes["card_limit"] = require_non_negative(changes, "card_limit")

        card = self.store.update(self.table, self._stamp(changes), {"id": card_id})[0]
        self._changed("card updated")
        return card

    def delete(self, card_id: str) -> dict:
        """Delete a card that no bill references.

        Raises:
            ConflictError: Card has associated bills
        """
        self._require(card_id)

        if self.store.count("bills", {"card_id": card_id}) > 0:
            raise ConflictError("Cannot delete card with associated bills. Deactivate instead.")

        self.store.delete(self.table, {"id": card_id})
        self._changed("card deleted")
        return {"success": True, "message": "Card deleted successfully"}

    def deactivate(self, card_id: str) -> dict:
        self._require(card_id)
        card = self.store.update(self.table, self._stamp({"is_active": False}), {"id": card_id})[0]
        self._changed("card deactivated")
        return card

    def get_balance(self, card_id: str) -> dict:
        """Card with available limit and totals of its linked bills."""
        card = self._require(card_id)
        bills = self.store.select("bills", {"card_id": card_id}, columns=["amount"])

        return {
            **card,
            "available_limit": to_number(card.get("card_limit")) - to_number(card.get("balance")),
            "total_transactions": len(bills),
            "total_spent": sum(to_number(b["amount"]) for b in bills),
        }

    def set_balance(self, card_id: str, balance: float) -> dict:
        """Overwrite the running balance (manual correction)."""
        self._require(card_id)
        value = require_non_negative({"balance": balance}, "balance")
        card = self.store.update(self.table, self._stamp({"balance": value}), {"id": card_id})[0]

        logger.info("Card %s balance set to %s", card_id, value)
        self._changed("card balance set")
        return card

    def get_stats(self) -> dict:
        cards = self.store.select(self.table, columns=["balance", "card_limit", "is_active"])
        total_balance = sum(to_number(c["balance"]) for c in cards)
        total_limit = sum(to_number(c["card_limit"]) for c in cards)

        return {
            "total_cards": len(cards),
            "active_cards": sum(1 for c in cards if c["is_active"]),
            "total_balance": total_balance,
            "total_limit": total_limit,
            "total_available": total_limit - total_balance,
        }
