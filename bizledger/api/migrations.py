"""
Schema Migrations

Idempotent CREATE TABLE IF NOT EXISTS statements for every table the
services use, plus a helper that seeds the first admin account.

Usage:
    python -m bizledger.api.migrations
    ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m bizledger.api.migrations --seed-admin
"""

import argparse
import logging
import os

from .database import RecordStore
from .deps import build_services
from .settings import Settings

logger = logging.getLogger(__name__)

TABLES = {
    "users": """
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            email VARCHAR(255) UNIQUE NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            first_name VARCHAR(100),
            last_name VARCHAR(100),
            role VARCHAR(50) NOT NULL DEFAULT 'user',
            is_active BOOLEAN DEFAULT true,
            last_login_at TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "sessions": """
        CREATE TABLE IF NOT EXISTS sessions (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) REFERENCES users(id) ON DELETE CASCADE,
            token VARCHAR(128) NOT NULL,
            refresh_token VARCHAR(128),
            ip_address VARCHAR(50),
            user_agent TEXT,
            expires_at TIMESTAMP NOT NULL,
            is_active BOOLEAN DEFAULT true,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "employees": """
        CREATE TABLE IF NOT EXISTS employees (
            id VARCHAR(36) PRIMARY KEY,
            first_name VARCHAR(100) NOT NULL,
            last_name VARCHAR(100) NOT NULL,
            email VARCHAR(255) UNIQUE,
            designation VARCHAR(100),
            department_id VARCHAR(36),
            base_salary DECIMAL(12, 2) DEFAULT 0,
            join_date DATE,
            is_active BOOLEAN DEFAULT true,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "cards": """
        CREATE TABLE IF NOT EXISTS cards (
            id VARCHAR(36) PRIMARY KEY,
            card_number VARCHAR(20) NOT NULL UNIQUE,
            card_holder VARCHAR(100) NOT NULL,
            card_type VARCHAR(50) DEFAULT 'credit',
            bank VARCHAR(100),
            expiry_date DATE,
            card_limit DECIMAL(12, 2) DEFAULT 0,
            balance DECIMAL(12, 2) DEFAULT 0,
            is_active BOOLEAN DEFAULT true,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "bills": """
        CREATE TABLE IF NOT EXISTS bills (
            id VARCHAR(36) PRIMARY KEY,
            bill_date DATE NOT NULL,
            vendor VARCHAR(255) NOT NULL,
            amount DECIMAL(12, 2) NOT NULL CHECK (amount > 0),
            description TEXT,
            category_id VARCHAR(36),
            attachment_url VARCHAR(500),
            attachment_type VARCHAR(50),
            card_id VARCHAR(36) REFERENCES cards(id),
            status VARCHAR(50) DEFAULT 'pending',
            created_by VARCHAR(36) REFERENCES users(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "cash_transactions": """
        CREATE TABLE IF NOT EXISTS cash_transactions (
            id VARCHAR(36) PRIMARY KEY,
            transaction_date DATE NOT NULL,
            description VARCHAR(255) NOT NULL,
            amount DECIMAL(12, 2) NOT NULL,
            transaction_type VARCHAR(50) DEFAULT 'expense',
            category VARCHAR(100),
            payment_method VARCHAR(50),
            notes TEXT,
            created_by VARCHAR(36) REFERENCES users(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "salaries": """
        CREATE TABLE IF NOT EXISTS salaries (
            id VARCHAR(36) PRIMARY KEY,
            employee_id VARCHAR(36) REFERENCES employees(id),
            month VARCHAR(7) NOT NULL,
            base_salary DECIMAL(12, 2),
            allowances DECIMAL(12, 2) DEFAULT 0,
            deductions DECIMAL(12, 2) DEFAULT 0,
            net_salary DECIMAL(12, 2),
            status VARCHAR(50) DEFAULT 'pending',
            paid_date TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "petty_expenses": """
        CREATE TABLE IF NOT EXISTS petty_expenses (
            id VARCHAR(36) PRIMARY KEY,
            description VARCHAR(255) NOT NULL,
            amount DECIMAL(12, 2) NOT NULL,
            category VARCHAR(100),
            expense_date DATE NOT NULL,
            vendor VARCHAR(255),
            receipt_number VARCHAR(100),
            notes TEXT,
            created_by VARCHAR(36) REFERENCES users(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "budgets": """
        CREATE TABLE IF NOT EXISTS budgets (
            id VARCHAR(36) PRIMARY KEY,
            category_id VARCHAR(36),
            category_name VARCHAR(100),
            budget_limit DECIMAL(12, 2) NOT NULL,
            spent DECIMAL(12, 2) DEFAULT 0,
            period VARCHAR(50) DEFAULT 'monthly',
            month VARCHAR(7),
            is_active BOOLEAN DEFAULT true,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "reminders": """
        CREATE TABLE IF NOT EXISTS reminders (
            id VARCHAR(36) PRIMARY KEY,
            title VARCHAR(255) NOT NULL,
            description TEXT,
            reminder_date DATE NOT NULL,
            reminder_time TIME,
            type VARCHAR(50) DEFAULT 'custom',
            related_id VARCHAR(36),
            notification_methods TEXT[],
            recipients TEXT[],
            is_active BOOLEAN DEFAULT true,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "cash_balance": """
        CREATE TABLE IF NOT EXISTS cash_balance (
            id VARCHAR(36) PRIMARY KEY,
            amount DECIMAL(12, 2) NOT NULL,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_bills_bill_date ON bills (bill_date)",
    "CREATE INDEX IF NOT EXISTS idx_bills_status ON bills (status)",
    "CREATE INDEX IF NOT EXISTS idx_bills_card_id ON bills (card_id)",
    "CREATE INDEX IF NOT EXISTS idx_cash_transactions_date_type ON cash_transactions (transaction_date, transaction_type)",
    "CREATE INDEX IF NOT EXISTS idx_salaries_employee_month ON salaries (employee_id, month)",
    "CREATE INDEX IF NOT EXISTS idx_budgets_active ON budgets (is_active)",
    "CREATE INDEX IF NOT EXISTS idx_reminders_date ON reminders (reminder_date)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_refresh_token ON sessions (refresh_token)",
]


def init_schema(store: RecordStore) -> list[str]:
    """Create every missing table and index in one transaction.

    Returns:
        Table names, in creation order
    """
    with store.transaction() as tx:
        for name, ddl in TABLES.items():
            tx.execute_query(ddl)
            logger.info("Ensured table %s", name)
        for ddl in INDEXES:
            tx.execute_query(ddl)

    logger.info("Database schema is up to date")
    return list(TABLES)


def seed_admin(store: RecordStore, settings: Settings, email: str, password: str) -> dict:
    """Create the admin account, or reset its password if it already exists."""
    services = build_services(store, settings)
    return services.users.ensure_admin(email, password)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create database tables")
    parser.add_argument("--seed-admin", action="store_true", help="Create the admin user from ADMIN_EMAIL/ADMIN_PASSWORD")
    args = parser.parse_args(argv)

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = RecordStore.from_url(settings.database_url)
    try:
        init_schema(store)

        if args.seed_admin:
            email = os.getenv("ADMIN_EMAIL", "admin@example.com")
            password = os.getenv("ADMIN_PASSWORD")
            if not password:
                parser.error("ADMIN_PASSWORD must be set to seed the admin user")
            user = seed_admin(store, settings, email, password)
            logger.info("Admin user ready: %s", user["email"])
    finally:
        store.dispose()


if __name__ == "__main__":
    main()
