"""
Dashboard Service Tests

Tests for period resolution, KPIs, trend, category breakdown, recent
activity, alerts, summaries and caching.
"""

from datetime import date, datetime, timedelta

import pytest

from bizledger.api.errors import StoreError, ValidationError
from bizledger.services.dashboard import resolve_period, trend_months

TODAY = date(2025, 3, 15)


def add_transaction(store, amount, kind, when, category=None, description=""):
    return store.seed(
        "cash_transactions",
        amount=amount,
        transaction_type=kind,
        transaction_date=when,
        category=category,
        description=description,
    )


class TestResolvePeriod:
    """Tests for period resolution."""

    def test_default_is_last_30_days(self):
        result = resolve_period(today=TODAY)

        assert result.start_date == date(2025, 2, 13)
        assert result.end_date == TODAY
        assert result.label == "Last 30 Days"

    def test_current_month(self):
        result = resolve_period("current_month", today=TODAY)

        assert result.start_date == date(2025, 3, 1)
        assert result.label == "Current Month"

    def test_custom_range(self):
        result = resolve_period("custom_range", date(2025, 1, 1), date(2025, 1, 31), today=TODAY)

        assert result.to_dict() == {"startDate": "2025-01-01", "endDate": "2025-01-31", "label": "Custom Range"}

    @pytest.mark.parametrize(
        "start, end",
        [(None, date(2025, 1, 31)), (date(2025, 2, 1), date(2025, 1, 1))],
    )
    def test_custom_range_invalid(self, start, end):
        with pytest.raises(ValidationError):
            resolve_period("custom_range", start, end, today=TODAY)

    def test_unknown_period(self):
        with pytest.raises(ValidationError):
            resolve_period("fortnight", today=TODAY)

    def test_trend_months_cross_year(self):
        months = trend_months(date(2025, 2, 10))

        assert [label for label, _, _ in months] == [
            "2024-09", "2024-10", "2024-11", "2024-12", "2025-01", "2025-02",
        ]
        assert months[-1][2] == date(2025, 2, 28)


class TestKpis:
    """Tests for headline figures."""

    def test_kpis(self, dashboard, store):
        add_transaction(store, 1000, "expense", date(2025, 3, 1))
        add_transaction(store, 500, "expense", date(2025, 1, 1))
        add_transaction(store, 4000, "income", date(2025, 3, 2))
        store.seed("budgets", budget_limit=1000, spent=500, is_active=True)
        store.seed("budgets", budget_limit=0, spent=0, is_active=True)
        store.seed("budgets", budget_limit=100, spent=100, is_active=False)
        store.seed("cards", card_limit=20000, balance=0, is_active=True)
        store.seed("cards", card_limit=5000, balance=0, is_active=False)
        store.seed("bills", status="pending", amount=10, bill_date=TODAY)
        store.seed("cash_balance", amount=7000)
        store.seed("cash_balance", amount=12000)
        store.seed("employees", first_name="A", last_name="B", is_active=True)
        store.seed("salaries", status="paid", net_salary=30000, paid_date=datetime(2025, 3, 10, 9, 30))
        store.seed("salaries", status="paid", net_salary=99999, paid_date=datetime(2024, 12, 10))
        store.seed("salaries", status="pending", net_salary=5000, paid_date=None)

        kpis = dashboard.get_kpis(date(2025, 2, 13), TODAY)

        assert kpis == {
            "totalExpenses": 1000,
            "totalIncome": 4000,
            "availableBalance": 3000,
            "budgetUtilization": 25.0,
            "cardsInUse": 1,
            "pendingBills": 1,
            "cardBalances": 25000,
            "cashOnHand": 12000,
            "totalPayroll": 30000,
            "activeEmployees": 1,
        }

    def test_kpis_empty(self, dashboard):
        kpis = dashboard.get_kpis(date(2025, 2, 13), TODAY)

        assert kpis["budgetUtilization"] == 0
        assert kpis["cashOnHand"] == 0
        assert kpis["availableBalance"] == 0


class TestCharts:
    """Tests for trend and category breakdown."""

    def test_monthly_trend(self, dashboard, store):
        add_transaction(store, 100, "expense", date(2025, 3, 3))
        add_transaction(store, 50, "expense", date(2025, 3, 20))
        add_transaction(store, 700, "income", date(2025, 1, 31))
        add_transaction(store, 999, "expense", date(2024, 9, 30))
        store.seed("budgets", budget_limit=2000, month="2025-03", is_active=True)
        store.seed("budgets", budget_limit=800, month="2025-03", is_active=False)

        trend = dashboard.get_monthly_trend(TODAY)

        assert [p["month"] for p in trend] == [
            "2024-10", "2024-11", "2024-12", "2025-01", "2025-02", "2025-03",
        ]
        assert trend[-1] == {"month": "2025-03", "expenses": 150, "income": 0, "budget": 2000}
        assert trend[3]["income"] == 700
        assert trend[0]["expenses"] == 0

    def test_expenses_by_category(self, dashboard, store):
        add_transaction(store, 600, "expense", TODAY, category="Fuel")
        add_transaction(store, 300, "expense", TODAY)
        add_transaction(store, 100, "expense", TODAY, category="Fuel")
        add_transaction(store, 5000, "income", TODAY, category="Sales")

        breakdown = dashboard.get_expenses_by_category(date(2025, 3, 1), TODAY)

        assert [b["category"] for b in breakdown] == ["Fuel", "Uncategorized"]
        assert breakdown[0]["amount"] == 700
        assert breakdown[0]["percentage"] == 70.0
        assert breakdown[0]["trend"] == "stable"
        assert sum(b["percentage"] for b in breakdown) == pytest.approx(100, abs=0.2)

    def test_expenses_by_category_empty(self, dashboard):
        assert dashboard.get_expenses_by_category(date(2025, 3, 1), TODAY) == []


class TestRecentTransactions:
    """Tests for the merged bill and cash feed."""

    def test_merged_descending_and_truncated(self, dashboard, store):
        for day in (1, 5, 9, 12):
            store.seed("bills", vendor=f"Vendor {day}", description="", amount=day, bill_date=date(2025, 3, day),
                       status="pending")
        for day in (2, 6, 10, 14):
            add_transaction(store, day * 10, "income", date(2025, 3, day), description=f"Deposit {day}")

        items = dashboard.get_recent_transactions(limit=4)

        assert len(items) == 4
        dates = [item["date"] for item in items]
        assert dates == sorted(dates, reverse=True)
        assert dates[0] == "2025-03-14"
        assert {item["type"] for item in items} == {"bill", "income"}

        bill = next(item for item in items if item["type"] == "bill")
        assert bill["description"] == "Vendor 12"
        assert bill["status"] == "pending"
        cash = next(item for item in items if item["type"] == "income")
        assert cash["status"] == "approved"

    def test_limit_one(self, dashboard, store):
        store.seed("bills", vendor="A", amount=1, bill_date=date(2025, 3, 1), status="paid")
        add_transaction(store, 5, "expense", date(2025, 3, 2))

        assert len(dashboard.get_recent_transactions(limit=1)) == 1


class TestAlertsAndSummaries:
    """Tests for alerts, card and budget summaries."""

    def test_alerts(self, dashboard, store):
        store.seed("budgets", category_name="Food", budget_limit=1000, spent=1200, is_active=True)
        store.seed("budgets", category_name="Fuel", budget_limit=1000, spent=800, is_active=True)
        store.seed("budgets", category_name="Rent", budget_limit=1000, spent=100, is_active=True)
        store.seed("budgets", category_name="Zero", budget_limit=0, spent=100, is_active=True)
        store.seed("bills", status="pending", bill_date=TODAY - timedelta(days=3))
        store.seed("bills", status="paid", bill_date=TODAY - timedelta(days=3))
        store.seed("bills", status="approved", bill_date=TODAY)
        store.seed("cash_balance", amount=9999)

        alerts = dashboard.get_alerts(TODAY)

        severities = {a["category"]: a["severity"] for a in alerts["budgetAlerts"]}
        assert severities == {"Food": "high", "Fuel": "medium"}
        food = next(a for a in alerts["budgetAlerts"] if a["category"] == "Food")
        assert food["percentage"] == 120.0
        assert food["current"] == 1200
        assert alerts["pendingApprovals"] == 1
        assert alerts["overdueBills"] == 1
        assert alerts["lowCashBalance"] is True

    def test_card_summary(self, dashboard, store):
        store.seed("cards", card_limit=10000, balance=4000, is_active=True)
        store.seed("cards", card_limit=5000, balance=5000, is_active=False)

        summary = dashboard.get_card_summary()

        assert summary == {
            "totalCards": 2,
            "activeCards": 1,
            "totalLimit": 15000,
            "totalUsed": 6000,
            "available": 9000,
        }

    def test_budget_status(self, dashboard, store):
        store.seed("budgets", budget_limit=100, spent=10, period="monthly", month="2025-03", is_active=True)
        store.seed("budgets", budget_limit=100, spent=85, period="monthly", month="2025-03", is_active=True)
        store.seed("budgets", budget_limit=100, spent=100, period="yearly", month="2025-01", is_active=True)
        store.seed("budgets", budget_limit=100, spent=150, period="monthly", month="2025-01", is_active=True)
        store.seed("budgets", budget_limit=100, spent=10, period="monthly", month="2025-03", is_active=False)

        status = dashboard.get_budget_status(TODAY)

        assert status == {"onTrack": 1, "warning": 1, "exceeded": 1, "total": 3}


class TestSummary:
    """Tests for the composite summary and its cache."""

    def test_summary_shape(self, dashboard):
        summary = dashboard.get_summary("admin", "current_month", today=TODAY)

        assert set(summary) == {
            "timestamp", "period", "kpis", "monthlyTrend", "expensesByCategory",
            "recentTransactions", "alerts", "cards", "budgetStatus", "metadata",
        }
        assert summary["period"]["label"] == "Current Month"
        assert summary["metadata"]["dataFreshness"] == "real-time"
        assert summary["metadata"]["permissions"] == {"canEdit": True, "canExport": True, "canDelete": True}
        assert summary["metadata"]["cacheDuration"] == 300

    def test_summary_served_from_cache_until_write(self, dashboard, store, cash_transactions):
        first = dashboard.get_summary("user", today=TODAY)
        store.calls.clear()

        second = dashboard.get_summary("user", today=TODAY)
        assert second["metadata"]["dataFreshness"] == "cached"
        assert second["kpis"] == first["kpis"]
        assert store.calls == []

        cash_transactions.create({"amount": 250, "transaction_date": TODAY}, actor_id="u1")
        third = dashboard.get_summary("user", today=TODAY)

        assert third["metadata"]["dataFreshness"] == "real-time"
        assert third["kpis"]["totalExpenses"] == 250

    def test_cache_keyed_by_role(self, dashboard):
        dashboard.get_summary("admin", today=TODAY)

        summary = dashboard.get_summary("user", today=TODAY)

        assert summary["metadata"]["dataFreshness"] == "real-time"
        assert summary["metadata"]["permissions"]["canEdit"] is False

    def test_store_failure_aborts_summary(self, dashboard, store):
        store.fail_tables.add("cash_balance")

        with pytest.raises(StoreError):
            dashboard.get_summary("admin", today=TODAY)

    def test_invalidate_cache(self, dashboard, cache):
        dashboard.get_summary("admin", today=TODAY)

        assert dashboard.invalidate_cache() == 1
        assert len(cache) == 0
