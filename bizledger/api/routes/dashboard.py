"""
Dashboard API Routes

Provides endpoints for the main dashboard view.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..responses import DataMessageResponse, DataResponse, ok
from ...services.dashboard import resolve_period

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class Period(BaseModel):
    startDate: date
    endDate: date
    label: str


class KPIData(BaseModel):
    """Headline figures for the period."""

    totalExpenses: float
    totalIncome: float
    availableBalance: float
    budgetUtilization: float
    cardsInUse: int
    pendingBills: int
    cardBalances: float
    cashOnHand: float
    totalPayroll: float
    activeEmployees: int


class TrendPoint(BaseModel):
    month: str
    expenses: float
    income: float
    budget: float


class CategoryExpense(BaseModel):
    category: str
    amount: float
    percentage: float
    trend: str


class RecentTransaction(BaseModel):
    id: str
    type: str
    description: str
    amount: float
    transaction_date: date | None = Field(None, alias="date")
    status: str


class BudgetAlert(BaseModel):
    """Budget running at or over its warning threshold."""

    id: str
    category: str
    current: float
    limit: float
    percentage: float
    severity: str  # 'low', 'medium', 'high'
    message: str


class Alerts(BaseModel):
    budgetAlerts: list[BudgetAlert]
    pendingApprovals: int
    overdueBills: int
    lowCashBalance: bool


class CardSummary(BaseModel):
    totalCards: int
    activeCards: int
    totalLimit: float
    totalUsed: float
    available: float


class BudgetStatusCounts(BaseModel):
    onTrack: int
    warning: int
    exceeded: int
    total: int


class SummaryPermissions(BaseModel):
    canEdit: bool
    canExport: bool
    canDelete: bool


class SummaryMetadata(BaseModel):
    dataFreshness: str
    cacheUntil: str
    cacheDuration: int
    permissions: SummaryPermissions
    userRole: str


class DashboardSummary(BaseModel):
    """Complete dashboard summary response."""

    timestamp: str
    period: Period
    kpis: KPIData
    monthlyTrend: list[TrendPoint]
    expensesByCategory: list[CategoryExpense]
    recentTransactions: list[RecentTransaction]
    alerts: Alerts
    cards: CardSummary
    budgetStatus: BudgetStatusCounts
    metadata: SummaryMetadata


class KPIResponse(DataResponse[KPIData]):
    period: Period


class ExpenseChartResponse(DataResponse[list[CategoryExpense]]):
    period: Period


class CacheInvalidated(BaseModel):
    invalidated: int


class PeriodParams:
    """Query parameters shared by period-scoped endpoints."""

    def __init__(
        self,
        period: str | None = Query(None, description="current_month, last_30_days or custom_range"),
        start_date: date | None = Query(None, alias="startDate"),
        end_date: date | None = Query(None, alias="endDate"),
    ):
        self.period = period
        self.start_date = start_date
        self.end_date = end_date


@router.get("/summary", response_model=DataResponse[DashboardSummary])
def get_dashboard_summary(
    params: PeriodParams = Depends(),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Get the full dashboard snapshot.

    Args:
        params: Reporting period
        limit: Number of recent transactions
        user: Authenticated user
        services: Application services

    Returns:
        {success, data} where data holds kpis, monthlyTrend,
        expensesByCategory, recentTransactions, alerts, cards,
        budgetStatus, metadata, timestamp and period
    """
    summary = services.dashboard.get_summary(
        user.role,
        params.period,
        params.start_date,
        params.end_date,
        recent_limit=limit,
    )
    return ok(summary)


@router.get("/kpis/summary", response_model=KPIResponse)
def get_kpis(
    params: PeriodParams = Depends(),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    date_range = resolve_period(params.period, params.start_date, params.end_date)
    kpis = services.dashboard.get_kpis(date_range.start_date, date_range.end_date)
    return ok(kpis, period=date_range.to_dict())


@router.get("/charts/expenses", response_model=ExpenseChartResponse)
def get_expense_chart(
    params: PeriodParams = Depends(),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    date_range = resolve_period(params.period, params.start_date, params.end_date)
    breakdown = services.dashboard.get_expenses_by_category(date_range.start_date, date_range.end_date)
    return ok(breakdown, period=date_range.to_dict())


@router.get("/charts/budget-status", response_model=DataResponse[BudgetStatusCounts])
def get_budget_status_chart(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.dashboard.get_budget_status())


@router.get("/charts/monthly-trend", response_model=DataResponse[list[TrendPoint]])
def get_monthly_trend_chart(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.dashboard.get_monthly_trend())


@router.get("/alerts", response_model=DataResponse[Alerts])
def get_alerts(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.dashboard.get_alerts())


@router.get("/recent-transactions", response_model=DataResponse[list[RecentTransaction]])
def get_recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.dashboard.get_recent_transactions(limit))


@router.post("/cache/invalidate", response_model=DataMessageResponse[CacheInvalidated])
def invalidate_cache(
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    dropped = services.dashboard.invalidate_cache(f"requested by {user.email}")
    return ok({"invalidated": dropped}, message="Dashboard cache cleared")
