"""
Service Wiring

Builds the service set once per application and hands it to routes
through FastAPI dependencies.
"""

from dataclasses import dataclass

from fastapi import Request

from ..services import (
    BillsService,
    BudgetsService,
    CardsService,
    CashTransactionsService,
    DashboardCache,
    DashboardService,
    EmployeesService,
    PettyExpensesService,
    RemindersService,
    SalaryService,
    UsersService,
)
from .database import RecordStore
from .permissions import FieldPolicy
from .settings import Settings
from .tokens import TokenCodec


@dataclass
class Services:
    """Everything a request handler needs."""

    store: RecordStore
    settings: Settings
    policy: FieldPolicy
    cache: DashboardCache
    tokens: TokenCodec
    users: UsersService
    bills: BillsService
    cards: CardsService
    cash_transactions: CashTransactionsService
    salary: SalaryService
    petty_expenses: PettyExpensesService
    budgets: BudgetsService
    reminders: RemindersService
    employees: EmployeesService
    dashboard: DashboardService


def build_services(store: RecordStore, settings: Settings, policy: FieldPolicy | None = None) -> Services:
    """Construct every service around one store and one dashboard cache."""
    cache = DashboardCache(ttl_seconds=settings.dashboard_cache_ttl)
    tokens = TokenCodec(settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expires_minutes)

    return Services(
        store=store,
        settings=settings,
        policy=policy or FieldPolicy.load(settings.config_dir),
        cache=cache,
        tokens=tokens,
        users=UsersService(store, tokens, refresh_expires_days=settings.refresh_expires_days),
        bills=BillsService(store, cache),
        cards=CardsService(store, cache),
        cash_transactions=CashTransactionsService(store, cache),
        salary=SalaryService(store, cache),
        petty_expenses=PettyExpensesService(store, cache),
        budgets=BudgetsService(store, cache),
        reminders=RemindersService(store, cache),
        employees=EmployeesService(store, cache),
        dashboard=DashboardService(
            store,
            cache,
            low_cash_threshold=settings.low_cash_threshold,
            alert_threshold=settings.budget_alert_threshold,
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
