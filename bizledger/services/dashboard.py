"""
Dashboard Service

Builds the dashboard snapshot: KPIs, six-month trend, expense breakdown,
recent activity, alerts, card and budget summaries.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..api.database import RecordStore
from ..api.errors import ValidationError
from .base import as_date, to_number
from .budgets import period_end, utilization
from .cache import DashboardCache

logger = logging.getLogger(__name__)

PERIODS = ("current_month", "last_30_days", "custom_range")
PERIOD_LABELS = {
    "current_month": "Current Month",
    "last_30_days": "Last 30 Days",
    "custom_range": "Custom Range",
}
TREND_MONTHS = 6
WARNING_RATIO = 0.8
EXCEEDED_RATIO = 1.0


@dataclass
class DateRange:
    """Resolved reporting period."""

    start_date: date
    end_date: date
    label: str
    period: str

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "label": self.label,
        }


def resolve_period(
    period: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    today: date | None = None,
) -> DateRange:
    """Turn a period name into concrete start/end dates.

    Raises:
        ValidationError: Unknown period or incomplete/inverted custom range
    """
    today = today or date.today()
    period = period or "last_30_days"

    if period == "current_month":
        start, end = today.replace(day=1), today
    elif period == "last_30_days":
        start, end = today - timedelta(days=30), today
    elif period == "custom_range":
        if not start_date or not end_date:
            raise ValidationError("startDate and endDate are required for custom_range")
        start, end = as_date(start_date), as_date(end_date)
        if start > end:
            raise ValidationError("startDate must not be after endDate")
    else:
        raise ValidationError(f"period must be one of: {', '.join(PERIODS)}", {"field": "period"})

    return DateRange(start_date=start, end_date=end, label=PERIOD_LABELS[period], period=period)


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def trend_months(today: date, months: int = TREND_MONTHS) -> list[tuple[str, date, date]]:
    """(label, first day, last day) for the trailing months, oldest first."""
    result = []
    for offset in range(-(months - 1), 1):
        year, month = shift_month(today.year, today.month, offset)
        last_day = calendar.monthrange(year, month)[1]
        result.append((f"{year:04d}-{month:02d}", date(year, month, 1), date(year, month, last_day)))
    return result


class DashboardService:
    """Read-only aggregation over the accounting tables."""

    def __init__(
        self,
        store: RecordStore,
        cache: DashboardCache | None = None,
        low_cash_threshold: float = 10000,
        alert_threshold: float = WARNING_RATIO,
    ):
        """Initialize the service.

        Args:
            store: Record store
            cache: Summary cache
            low_cash_threshold: Cash on hand below this raises an alert
            alert_threshold: Budget spent/limit ratio that raises an alert
        """
        self.store = store
        self.cache = cache if cache is not None else DashboardCache(ttl_seconds=0)
        self.low_cash_threshold = low_cash_threshold
        self.alert_threshold = alert_threshold

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def get_summary(
        self,
        role: str,
        period: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        today: date | None = None,
        recent_limit: int = 10,
    ) -> dict:
        """Complete dashboard snapshot for one caller role.

        Any failing query aborts the whole summary.
        """
        today = today or date.today()
        date_range = resolve_period(period, start_date, end_date, today)
        key = (date_range.label, date_range.start_date, date_range.end_date, role, recent_limit)

        cached = self.cache.get(key)
        if cached is not None:
            data, _ = cached
            data["metadata"]["dataFreshness"] = "cached"
            return data

        valid_until = datetime.now() + timedelta(seconds=self.cache.ttl_seconds)
        data = {
            "timestamp": datetime.now().isoformat(),
            "period": date_range.to_dict(),
            "kpis": self.get_kpis(date_range.start_date, date_range.end_date),
            "monthlyTrend": self.get_monthly_trend(today),
            "expensesByCategory": self.get_expenses_by_category(date_range.start_date, date_range.end_date),
            "recentTransactions": self.get_recent_transactions(recent_limit),
            "alerts": self.get_alerts(today),
            "cards": self.get_card_summary(),
            "budgetStatus": self.get_budget_status(today),
        }

        data["metadata"] = {
            "dataFreshness": "real-time",
            "cacheUntil": valid_until.isoformat(),
            "cacheDuration": self.cache.ttl_seconds,
            "permissions": {
                "canEdit": role == "admin",
                "canExport": True,
                "canDelete": role == "admin",
            },
            "userRole": role,
        }
        self.cache.set(key, data)
        logger.debug("Dashboard summary built for %s (%s)", role, date_range.label)
        return data

    def invalidate_cache(self, reason: str | None = None) -> int:
        return self.cache.invalidate(reason)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _sum_transactions(self, transaction_type: str, start_date: date, end_date: date) -> float:
        rows = self.store.select(
            "cash_transactions",
            {"transaction_type": transaction_type},
            ranges={"transaction_date": (start_date, end_date)},
            columns=["amount"],
        )
        return sum(to_number(r["amount"]) for r in rows)

    def _cash_on_hand(self) -> float:
        rows = self.store.select("cash_balance", order_by=["-created_at"], limit=1, columns=["amount"])
        return to_number(rows[0]["amount"]) if rows else 0.0

    def _total_payroll(self, start_date: date, end_date: date) -> float:
        rows = self.store.select(
            "salaries",
            {"status": "paid"},
            ranges={"paid_date": (datetime.combine(start_date, time.min), datetime.combine(end_date, time.max))},
            columns=["net_salary"],
        )
        return sum(to_number(r["net_salary"]) for r in rows)

    def get_kpis(self, start_date: date, end_date: date) -> dict:
        total_expenses = self._sum_transactions("expense", start_date, end_date)
        total_income = self._sum_transactions("income", start_date, end_date)

        budgets = self.store.select("budgets", {"is_active": True}, columns=["budget_limit", "spent"])
        if budgets:
            ratios = [utilization(b) or 0.0 for b in budgets]
            budget_utilization = round(sum(ratios) / len(budgets) * 100, 2)
        else:
            budget_utilization = 0

        cards = self.store.select("cards", columns=["card_limit"])

        return {
            "totalExpenses": total_expenses,
            "totalIncome": total_income,
            "availableBalance": total_income - total_expenses,
            "budgetUtilization": budget_utilization,
            "cardsInUse": self.store.count("cards", {"is_active": True}),
            "pendingBills": self.store.count("bills", {"status": "pending"}),
            "cardBalances": sum(to_number(c["card_limit"]) for c in cards),
            "cashOnHand": self._cash_on_hand(),
            "totalPayroll": self._total_payroll(start_date, end_date),
            "activeEmployees": self.store.count("employees", {"is_active": True}),
        }

    def get_monthly_trend(self, today: date | None = None) -> list[dict]:
        """Expenses, income and budget per month for the trailing six months."""
        months = trend_months(today or date.today())
        window_start, window_end = months[0][1], months[-1][2]

        transactions = self.store.select(
            "cash_transactions",
            {"transaction_type": ["income", "expense"]},
            ranges={"transaction_date": (window_start, window_end)},
            columns=["amount", "transaction_type", "transaction_date"],
        )
        budgets = self.store.select(
            "budgets",
            {"is_active": True, "month": [label for label, _, _ in months]},
            columns=["budget_limit", "month"],
        )

        points = []
        for label, first_day, last_day in months:
            in_month = [
                t for t in transactions
                if first_day <= as_date(t["transaction_date"]) <= last_day
            ]
            points.append({
                "month": label,
                "expenses": sum(to_number(t["amount"]) for t in in_month if t["transaction_type"] == "expense"),
                "income": sum(to_number(t["amount"]) for t in in_month if t["transaction_type"] == "income"),
                "budget": sum(to_number(b["budget_limit"]) for b in budgets if str(b["month"])[:7] == label),
            })
        return points

    def get_expenses_by_category(self, start_date: date, end_date: date) -> list[dict]:
        rows = self.store.select(
            "cash_transactions",
            {"transaction_type": "expense"},
            ranges={"transaction_date": (start_date, end_date)},
            columns=["amount", "category"],
        )
        if not rows:
            return []

        totals: dict[str, float] = {}
        for row in rows:
            category = row.get("category") or "Uncategorized"
            totals[category] = totals.get(category, 0.0) + to_number(row["amount"])

        grand_total = sum(totals.values())
        breakdown = [
            {
                "category": category,
                "amount": amount,
                "percentage": round(amount / grand_total * 100, 1) if grand_total > 0 else 0,
                "trend": "stable",
            }
            for category, amount in totals.items()
        ]
        breakdown.sort(key=lambda item: item["amount"], reverse=True)
        return breakdown

    def get_recent_transactions(self, limit: int = 10) -> list[dict]:
        """Newest bills and cash transactions merged by date, at most limit items."""
        if limit <= 0:
            return []
        per_source = max(1, limit // 2)

        bills = self.store.select(
            "bills",
            order_by=["-bill_date", "-created_at"],
            limit=per_source,
            columns=["id", "vendor", "description", "amount", "bill_date", "status"],
        )
        transactions = self.store.select(
            "cash_transactions",
            order_by=["-transaction_date", "-created_at"],
            limit=per_source,
            columns=["id", "description", "amount", "transaction_date", "transaction_type"],
        )

        items = [
            {
                "id": str(b["id"]),
                "type": "bill",
                "description": b.get("description") or b.get("vendor") or "",
                "amount": to_number(b["amount"]),
                "date": as_date(b["bill_date"]),
                "status": b.get("status") or "pending",
            }
            for b in bills
        ]
        items.extend(
            {
                "id": str(t["id"]),
                "type": t.get("transaction_type") or "expense",
                "description": t.get("description") or "",
                "amount": to_number(t["amount"]),
                "date": as_date(t["transaction_date"]),
                "status": "approved",
            }
            for t in transactions
        )

        items.sort(key=lambda item: item["date"] or date.min, reverse=True)
        for item in items:
            item["date"] = item["date"].isoformat() if item["date"] else None
        return items[:limit]

    def get_alerts(self, today: date | None = None) -> dict:
        today = today or date.today()

        budget_alerts = []
        for budget in self.store.select(
            "budgets", {"is_active": True}, columns=["id", "category_name", "budget_limit", "spent"]
        ):
            ratio = utilization(budget)
            if ratio is None or ratio < self.alert_threshold:
                continue

            percentage = round(ratio * 100, 2)
            if ratio >= EXCEEDED_RATIO:
                severity = "high"
            elif ratio >= WARNING_RATIO:
                severity = "medium"
            else:
                severity = "low"

            category = budget.get("category_name") or "Budget"
            budget_alerts.append({
                "id": str(budget["id"]),
                "category": category,
                "current": to_number(budget.get("spent")),
                "limit": to_number(budget.get("budget_limit")),
                "percentage": percentage,
                "severity": severity,
                "message": f"{category} budget at {percentage:g}% utilization",
            })

        past_bills = self.store.select(
            "bills",
            ranges={"bill_date": (None, today - timedelta(days=1))},
            columns=["status"],
        )
        cash_on_hand = self._cash_on_hand()

        return {
            "budgetAlerts": budget_alerts,
            "pendingApprovals": self.store.count("bills", {"status": "pending"}),
            "overdueBills": sum(1 for b in past_bills if b["status"] != "paid"),
            "lowCashBalance": cash_on_hand < self.low_cash_threshold,
        }

    def get_card_summary(self) -> dict:
        cards = self.store.select("cards", columns=["is_active", "card_limit", "balance"])

        total_limit = sum(to_number(c["card_limit"]) for c in cards)
        total_used = max(0.0, total_limit - sum(to_number(c["balance"]) for c in cards))

        return {
            "totalCards": len(cards),
            "activeCards": sum(1 for c in cards if c["is_active"]),
            "totalLimit": total_limit,
            "totalUsed": total_used,
            "available": max(0.0, total_limit - total_used),
        }

    def get_budget_status(self, today: date | None = None) -> dict:
        """Counts of in-period active budgets by utilization band."""
        today = today or date.today()
        budgets = [
            b for b in self.store.select(
                "budgets", {"is_active": True}, columns=["budget_limit", "spent", "period", "month"]
            )
            if period_end(b) is None or period_end(b) >= today
        ]

        on_track = warning = exceeded = 0
        for budget in budgets:
            ratio = utilization(budget)
            if ratio is None:
                continue
            if ratio >= EXCEEDED_RATIO:
                exceeded += 1
            elif ratio >= WARNING_RATIO:
                warning += 1
            else:
                on_track += 1

        return {
            "onTrack": on_track,
            "warning": warning,
            "exceeded": exceeded,
            "total": len(budgets),
        }
