"""
FastAPI Main Application

Entry point for the accounting API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import RecordStore
from .deps import build_services
from .errors import register_error_handlers
from .migrations import init_schema
from .permissions import FieldPolicy
from .routes import (
    auth_router,
    bills_router,
    budgets_router,
    cards_router,
    cash_transactions_router,
    dashboard_router,
    employees_router,
    petty_expenses_router,
    reminders_router,
    salary_router,
    sessions_router,
)
from .settings import Settings

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    policy: FieldPolicy | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Runtime settings (default: from environment)
        store: Record store (default: pooled engine for settings.database_url)
        policy: Field permission policy (default: loaded from config_dir)

    Returns:
        FastAPI app with every router mounted under /api
    """
    settings = settings or Settings()
    owns_store = store is None
    store = store or RecordStore.from_url(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info("Starting Accounting API (%s)", settings.environment)
        if settings.auto_migrate:
            init_schema(store)
        yield
        logger.info("Shutting down Accounting API")
        if owns_store:
            store.dispose()

    app = FastAPI(
        title="Accounting API",
        description="Bills, cards, cash, payroll, budgets and dashboard for small-business bookkeeping",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.services = build_services(store, settings, policy)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, expose_store_errors=settings.is_development)

    for router in (
        auth_router,
        sessions_router,
        bills_router,
        cards_router,
        cash_transactions_router,
        salary_router,
        petty_expenses_router,
        budgets_router,
        reminders_router,
        employees_router,
        dashboard_router,
    ):
        app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Accounting API",
            "version": API_VERSION,
            "status": "running",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "environment": settings.environment}

    @app.get("/api")
    async def api_info():
        """API information endpoint."""
        return {
            "endpoints": {
                "auth": "/api/auth/login",
                "sessions": "/api/sessions",
                "bills": "/api/bills",
                "cards": "/api/cards",
                "cash_transactions": "/api/cash-transactions",
                "salary": "/api/salary",
                "petty_expenses": "/api/petty-expenses",
                "budgets": "/api/budgets",
                "reminders": "/api/reminders",
                "employees": "/api/employees",
                "dashboard": "/api/dashboard/summary",
            },
            "authentication": "Authorization: Bearer <token> required except for /health and /api/auth/login",
        }

    return app


if __name__ == "__main__":
    import uvicorn

    current = Settings()
    uvicorn.run(
        "bizledger.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=current.is_development,
    )
