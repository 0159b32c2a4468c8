"""
Pytest configuration and fixtures for accounting service tests.
"""

import copy
import os
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from bizledger.api.errors import StoreError
from bizledger.api.settings import Settings
from bizledger.services import (
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
)

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class FakeStore:
    """In-memory stand-in for RecordStore with the same call contract.

    Rows live in per-table lists. transaction() snapshots every table and
    restores it if the block raises. Tables named in fail_tables raise
    StoreError on any access.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.fail_tables: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self._tick = 0

    def _rows(self, table: str, op: str) -> list[dict]:
        self.calls.append((op, table))
        if table in self.fail_tables:
            raise StoreError(f"relation {table} is unavailable")
        return self.tables.setdefault(table, [])

    @staticmethod
    def _matches(row: dict, filters: dict | None, ranges: dict | None) -> bool:
        for column, value in (filters or {}).items():
            current = row.get(column)
            if value is None:
                if current is not None:
                    return False
            elif isinstance(value, (list, tuple, set, frozenset)):
                if current not in value and str(current) not in {str(v) for v in value}:
                    return False
            elif current != value and str(current) != str(value):
                return False

        for column, (low, high) in (ranges or {}).items():
            current = row.get(column)
            if current is None:
                return False
            if low is not None and current < low:
                return False
            if high is not None and current > high:
                return False
        return True

    def _next_timestamp(self) -> datetime:
        self._tick += 1
        return datetime(2025, 1, 1) + timedelta(seconds=self._tick)

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self.tables)
        try:
            yield self
        except Exception:
            self.tables = snapshot
            raise

    def select(self, table, filters=None, *, ranges=None, order_by=(), limit=None, offset=None, columns=None):
        rows = [r for r in self._rows(table, "select") if self._matches(r, filters, ranges)]

        for key in reversed(list(order_by)):
            name = key.lstrip("-")
            descending = key.startswith("-")
            present = [r for r in rows if r.get(name) is not None]
            missing = [r for r in rows if r.get(name) is None]
            present.sort(key=lambda r: r[name], reverse=descending)
            rows = present + missing if not descending else missing + present

        if offset:
            rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]

        if columns:
            return [{c: row.get(c) for c in columns} for row in rows]
        return [dict(row) for row in rows]

    def get(self, table, record_id):
        rows = self.select(table, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, table, data):
        rows = [data] if isinstance(data, dict) else list(data)
        stored = self._rows(table, "insert")
        inserted = []
        for row in rows:
            now = self._next_timestamp()
            record = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **row}
            stored.append(record)
            inserted.append(dict(record))
        return inserted

    def update(self, table, patch, filters):
        updated = []
        for row in self._rows(table, "update"):
            if self._matches(row, filters, None):
                row.update(patch)
                updated.append(dict(row))
        return updated

    def delete(self, table, filters):
        rows = self._rows(table, "delete")
        deleted = [dict(r) for r in rows if self._matches(r, filters, None)]
        self.tables[table] = [r for r in rows if not self._matches(r, filters, None)]
        return deleted

    def count(self, table, filters=None, *, ranges=None):
        return sum(1 for r in self._rows(table, "count") if self._matches(r, filters, ranges))

    def increment(self, table, record_id, column, delta):
        for row in self._rows(table, "increment"):
            if str(row["id"]) == str(record_id):
                row[column] = float(row.get(column) or 0) + delta
                return row[column]
        return None

    def adjust_card_balance(self, card_id, delta):
        return self.increment("cards", card_id, "balance", delta)

    def seed(self, table: str, **row) -> dict:
        """Insert a row directly, bypassing services."""
        return self.insert(table, row)[0]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir() -> Path:
    """Return the config directory path."""
    return PROJECT_ROOT / "config"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def cache() -> DashboardCache:
    return DashboardCache(ttl_seconds=300)


@pytest.fixture
def bills(store, cache) -> BillsService:
    return BillsService(store, cache)


@pytest.fixture
def cards(store, cache) -> CardsService:
    return CardsService(store, cache)


@pytest.fixture
def cash_transactions(store, cache) -> CashTransactionsService:
    return CashTransactionsService(store, cache)


@pytest.fixture
def salary(store, cache) -> SalaryService:
    return SalaryService(store, cache)


@pytest.fixture
def petty_expenses(store, cache) -> PettyExpensesService:
    return PettyExpensesService(store, cache)


@pytest.fixture
def budgets(store, cache) -> BudgetsService:
    return BudgetsService(store, cache)


@pytest.fixture
def reminders(store, cache) -> RemindersService:
    return RemindersService(store, cache)


@pytest.fixture
def employees(store, cache) -> EmployeesService:
    return EmployeesService(store, cache)


@pytest.fixture
def dashboard(store, cache) -> DashboardService:
    return DashboardService(store, cache, low_cash_threshold=10000, alert_threshold=0.8)


@pytest.fixture
def sample_card(cards) -> dict:
    """Return an active credit card with a 50,000 limit."""
    return cards.create({
        "card_number": "4321",
        "card_holder": "Ana Cruz",
        "card_type": "credit",
        "bank": "BDO",
        "card_limit": 50000,
    })


@pytest.fixture
def sample_employee(employees) -> dict:
    return employees.create({
        "first_name": "Juan",
        "last_name": "Dela Cruz",
        "email": "Juan@Example.com",
        "designation": "Accountant",
        "base_salary": 50000,
        "join_date": date(2024, 3, 1),
    })


@pytest.fixture
def settings(config_dir: Path) -> Settings:
    return Settings(
        database_url="sqlite://",
        environment="test",
        jwt_secret="test-secret",
        jwt_expires_minutes=30,
        refresh_expires_days=7,
        cors_origins=["http://localhost:3000"],
        dashboard_cache_ttl=300,
        low_cash_threshold=10000,
        budget_alert_threshold=0.8,
        auto_migrate=False,
        config_dir=config_dir,
        log_level="INFO",
    )


# Environment setup for tests
@pytest.fixture(autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ.setdefault("POSTGRES_HOST", "localhost")
    os.environ.setdefault("POSTGRES_PORT", "5432")
    os.environ.setdefault("POSTGRES_DB", "accounting_test")
    os.environ.setdefault("POSTGRES_USER", "test")
    os.environ.setdefault("POSTGRES_PASSWORD", "test")
    yield
