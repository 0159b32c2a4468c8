"""
API Routes Package

Contains all route modules for the accounting API.
"""

from .auth import router as auth_router
from .bills import router as bills_router
from .budgets import router as budgets_router
from .cards import router as cards_router
from .cash_transactions import router as cash_transactions_router
from .dashboard import router as dashboard_router
from .employees import router as employees_router
from .petty_expenses import router as petty_expenses_router
from .reminders import router as reminders_router
from .salary import router as salary_router
from .sessions import router as sessions_router

__all__ = [
    "auth_router",
    "bills_router",
    "budgets_router",
    "cards_router",
    "cash_transactions_router",
    "dashboard_router",
    "employees_router",
    "petty_expenses_router",
    "reminders_router",
    "salary_router",
    "sessions_router",
]
