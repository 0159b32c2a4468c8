"""
Bills Service Tests

Tests for bill validation, card balance tracking and bill statistics.
"""

from datetime import date

import pytest

from bizledger.api.errors import NotFoundError, StoreError, ValidationError


class TestBillValidation:
    """Tests for required fields and amounts."""

    @pytest.mark.parametrize("amount", [0, -10, "-0.01"])
    def test_non_positive_amount_rejected(self, bills, store, amount):
        with pytest.raises(ValidationError):
            bills.create({"vendor": "Meralco", "amount": amount}, actor_id="u1")

        assert store.tables.get("bills", []) == []

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), "NaN", "Infinity", "-inf"])
    def test_non_finite_amount_rejected(self, bills, store, amount):
        with pytest.raises(ValidationError, match="finite"):
            bills.create({"vendor": "Meralco", "amount": amount}, actor_id="u1")

        assert store.tables.get("bills", []) == []

    @pytest.mark.parametrize("vendor", [None, "", "   "])
    def test_empty_vendor_rejected(self, bills, store, vendor):
        with pytest.raises(ValidationError) as exc_info:
            bills.create({"vendor": vendor, "amount": 100}, actor_id="u1")

        assert exc_info.value.message == "Vendor is required"
        assert store.tables.get("bills", []) == []

    def test_unknown_status_rejected(self, bills):
        with pytest.raises(ValidationError):
            bills.create({"vendor": "PLDT", "amount": 100, "status": "lost"}, actor_id="u1")

    def test_unknown_card_rejected(self, bills, store):
        with pytest.raises(ValidationError):
            bills.create({"vendor": "PLDT", "amount": 100, "card_id": "missing"}, actor_id="u1")

        assert store.tables.get("bills", []) == []

    def test_create_defaults(self, bills):
        bill = bills.create({"vendor": "Globe", "amount": 1500}, actor_id="u1")

        assert bill["status"] == "pending"
        assert bill["bill_date"] == date.today()
        assert bill["created_by"] == "u1"
        assert bill["card_id"] is None


class TestCardBalance:
    """Tests for balance adjustments tied to bill writes."""

    def test_create_charges_card(self, bills, store, sample_card):
        bills.create({"vendor": "Shell", "amount": 2500, "card_id": sample_card["id"]}, actor_id="u1")

        assert store.get("cards", sample_card["id"])["balance"] == 2500

    def test_update_amount_on_same_card(self, bills, store, sample_card):
        bill = bills.create({"vendor": "Shell", "amount": 2500, "card_id": sample_card["id"]}, actor_id="u1")

        bills.update(bill["id"], {"amount": 4000})

        assert store.get("cards", sample_card["id"])["balance"] == 4000

    def test_move_bill_between_cards(self, bills, cards, store, sample_card):
        other = cards.create({"card_number": "9999", "card_holder": "Ben Reyes"})
        bill = bills.create({"vendor": "Shell", "amount": 2500, "card_id": sample_card["id"]}, actor_id="u1")

        bills.update(bill["id"], {"card_id": other["id"], "amount": 3000})

        assert store.get("cards", sample_card["id"])["balance"] == 0
        assert store.get("cards", other["id"])["balance"] == 3000

    def test_unlinking_card_refunds_balance(self, bills, store, sample_card):
        bill = bills.create({"vendor": "Shell", "amount": 2500, "card_id": sample_card["id"]}, actor_id="u1")

        bills.update(bill["id"], {"card_id": None})

        assert store.get("cards", sample_card["id"])["balance"] == 0

    def test_delete_refunds_balance(self, bills, store, sample_card):
        bill = bills.create({"vendor": "Shell", "amount": 2500, "card_id": sample_card["id"]}, actor_id="u1")

        result = bills.delete(bill["id"])

        assert result == {"success": True, "message": "Bill deleted successfully"}
        assert store.get("cards", sample_card["id"])["balance"] == 0
        with pytest.raises(NotFoundError):
            bills.get_by_id(bill["id"])

    def test_failed_balance_adjustment_rolls_back_bill(self, bills, store, sample_card, monkeypatch):
        def broken_adjust(card_id, delta):
            raise StoreError("function adjust_card_balance failed")

        monkeypatch.setattr(store, "adjust_card_balance", broken_adjust)

        with pytest.raises(StoreError):
            bills.create({"vendor": "Shell", "amount": 2500, "card_id": sample_card["id"]}, actor_id="u1")

        assert store.tables.get("bills", []) == []


class TestBillQueries:
    """Tests for listing and statistics."""

    def test_list_attaches_card_and_creator(self, bills, store, sample_card):
        user = store.seed("users", email="clerk@example.com", role="user")
        bills.create({"vendor": "Shell", "amount": 100, "card_id": sample_card["id"]}, actor_id=user["id"])

        listed = bills.list()

        assert listed[0]["card"] == {"card_number": "4321", "card_holder": "Ana Cruz"}
        assert listed[0]["created_by_email"] == "clerk@example.com"

    def test_update_returns_card_and_creator(self, bills, store, sample_card):
        user = store.seed("users", email="clerk@example.com", role="user")
        bill = bills.create({"vendor": "Shell", "amount": 100}, actor_id=user["id"])

        updated = bills.update(bill["id"], {"card_id": sample_card["id"], "amount": 250})

        assert updated["amount"] == 250
        assert updated["card"] == {"card_number": "4321", "card_holder": "Ana Cruz"}
        assert updated["created_by_email"] == "clerk@example.com"
        assert updated == bills.get_by_id(bill["id"])

    def test_list_filters_by_date_and_status(self, bills):
        bills.create({"vendor": "A", "amount": 100, "bill_date": date(2025, 1, 5)}, actor_id="u1")
        bills.create({"vendor": "B", "amount": 200, "bill_date": date(2025, 2, 5), "status": "paid"}, actor_id="u1")
        bills.create({"vendor": "C", "amount": 300, "bill_date": date(2025, 2, 10)}, actor_id="u1")

        february = bills.list({"start_date": date(2025, 2, 1), "end_date": date(2025, 2, 28)})
        paid = bills.list({"status": "paid"})

        assert [b["vendor"] for b in february] == ["C", "B"]
        assert [b["vendor"] for b in paid] == ["B"]

    def test_stats(self, bills):
        bills.create({"vendor": "A", "amount": 100}, actor_id="u1")
        bills.create({"vendor": "B", "amount": 300, "status": "paid"}, actor_id="u1")

        stats = bills.get_stats()

        assert stats["total_bills"] == 2
        assert stats["total_amount"] == 400
        assert stats["average_amount"] == 200
        assert stats["pending_count"] == 1
        assert stats["paid_count"] == 1

    def test_stats_empty(self, bills):
        assert bills.get_stats()["average_amount"] == 0

    def test_writes_invalidate_dashboard_cache(self, bills, cache):
        cache.set("summary", {"kpis": {}})

        bills.create({"vendor": "A", "amount": 100}, actor_id="u1")

        assert len(cache) == 0
