"""
Domain services, one per accounting entity, plus the dashboard aggregator.
"""

from .bills import BillsService
from .budgets import BudgetsService
from .cache import DashboardCache
from .cards import CardsService
from .cash_transactions import CashTransactionsService
from .dashboard import DashboardService, resolve_period
from .employees import EmployeesService
from .petty_expenses import PettyExpensesService
from .reminders import RemindersService
from .salary import SalaryService, calculate_net_salary
from .users import UsersService

__all__ = [
    "BillsService",
    "BudgetsService",
    "CardsService",
    "CashTransactionsService",
    "DashboardCache",
    "DashboardService",
    "EmployeesService",
    "PettyExpensesService",
    "RemindersService",
    "SalaryService",
    "UsersService",
    "calculate_net_salary",
    "resolve_period",
]
