"""
Budgets Service Tests

Tests for budget creation, utilization alerts and period math.
"""

from datetime import date

import pytest

from bizledger.api.errors import ValidationError
from bizledger.services.budgets import period_end, utilization


class TestBudgetHelpers:
    """Tests for utilization and period end."""

    def test_utilization(self):
        assert utilization({"budget_limit": 1000, "spent": 800}) == 0.8

    def test_utilization_without_limit(self):
        assert utilization({"budget_limit": 0, "spent": 10}) is None

    @pytest.mark.parametrize(
        "period, month, expected",
        [
            ("monthly", "2025-02", date(2025, 2, 28)),
            ("quarterly", "2025-11", date(2026, 1, 31)),
            ("yearly", "2024-01", date(2024, 12, 31)),
        ],
    )
    def test_period_end(self, period, month, expected):
        assert period_end({"period": period, "month": month}) == expected

    def test_period_end_without_anchor(self):
        assert period_end({"period": "monthly", "month": None}) is None


class TestBudgets:
    """Tests for budget CRUD and alerts."""

    def test_create_defaults(self, budgets):
        budget = budgets.create({"category_name": "Travel", "budget_limit": 5000})

        assert budget["spent"] == 0
        assert budget["period"] == "monthly"
        assert budget["month"] == date.today().strftime("%Y-%m")
        assert budget["is_active"] is True

    def test_month_accepts_full_date(self, budgets):
        budget = budgets.create({"category_name": "Travel", "budget_limit": 5000, "month": "2025-03-01"})

        assert budget["month"] == "2025-03"

    def test_category_required(self, budgets):
        with pytest.raises(ValidationError):
            budgets.create({"budget_limit": 5000})

    def test_limit_must_be_positive(self, budgets):
        with pytest.raises(ValidationError):
            budgets.create({"category_name": "Travel", "budget_limit": 0})

    def test_alerts_respect_threshold(self, budgets):
        at_limit = budgets.create({"category_name": "Food", "budget_limit": 1000, "spent": 1000})
        warning = budgets.create({"category_name": "Fuel", "budget_limit": 1000, "spent": 850})
        budgets.create({"category_name": "Rent", "budget_limit": 1000, "spent": 100})
        inactive = budgets.create({"category_name": "Old", "budget_limit": 1000, "spent": 990})
        budgets.update(inactive["id"], {"is_active": False})

        default_alerts = {b["id"] for b in budgets.get_alerts()}
        strict_alerts = {b["id"] for b in budgets.get_alerts(threshold=1.01)}
        full_alerts = {b["id"] for b in budgets.get_alerts(threshold=1.0)}

        assert default_alerts == {at_limit["id"], warning["id"]}
        assert strict_alerts == set()
        assert full_alerts == {at_limit["id"]}

    def test_alert_carries_percent(self, budgets):
        budgets.create({"category_name": "Food", "budget_limit": 1000, "spent": 875})

        assert budgets.get_alerts()[0]["utilization_percent"] == 87.5

    def test_add_spent(self, budgets):
        budget = budgets.create({"category_name": "Food", "budget_limit": 1000})

        assert budgets.add_spent(budget["id"], 250)["spent"] == 250
        assert budgets.add_spent(budget["id"], 100)["spent"] == 350

    def test_update_with_null_spent_keeps_stored_value(self, budgets):
        budget = budgets.create({"category_name": "Food", "budget_limit": 1000, "spent": 400})

        updated = budgets.update(budget["id"], {"spent": None, "budget_limit": 2000})

        assert updated["spent"] == 400
        assert updated["budget_limit"] == 2000

    def test_stats(self, budgets):
        budgets.create({"category_name": "Food", "budget_limit": 1000, "spent": 500})
        budgets.create({"category_name": "Fuel", "budget_limit": 3000, "spent": 500})

        stats = budgets.get_stats()

        assert stats["active_budgets"] == 2
        assert stats["total_limit"] == 4000
        assert stats["utilization_percent"] == 25.0
