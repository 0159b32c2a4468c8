"""
Database Connection Module

Provides the record store used by every domain service: filtered
select/insert/update/delete/count against named PostgreSQL tables.
"""

import logging
import re
import uuid
from contextlib import contextmanager
from typing import Any, Generator, Iterable, Sequence

from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import ConflictError, StoreError, ValidationError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Inclusive (low, high) bounds; either side may be None
Range = tuple[Any, Any]


def _quote(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValidationError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def _error_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig or exc).strip()


class RecordStore:
    """Table-scoped query adapter over a SQLAlchemy engine.

    Filters are AND-combined equality predicates. A list, tuple or set value
    becomes an IN predicate. Ranges are inclusive bounds per column.
    """

    def __init__(self, engine: Engine, connection: Connection | None = None):
        """Initialize the store.

        Args:
            engine: SQLAlchemy engine
            connection: Connection to reuse (set inside transaction())
        """
        self.engine = engine
        self._connection = connection

    @classmethod
    def from_url(cls, database_url: str) -> "RecordStore":
        """Create a store with a pooled engine for the given URL."""
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
        )
        return cls(engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    @property
    def in_transaction(self) -> bool:
        return self._connection is not None

    @contextmanager
    def _connect(self) -> Generator[Connection, None, None]:
        if self._connection is not None:
            yield self._connection
        else:
            with self.engine.begin() as conn:
                yield conn

    @contextmanager
    def transaction(self) -> Generator["RecordStore", None, None]:
        """Run several store calls on one connection that commits or rolls back together.

        Yields:
            Store bound to the transaction's connection
        """
        if self._connection is not None:
            yield self
            return

        try:
            with self.engine.begin() as conn:
                yield RecordStore(self.engine, conn)
        except SQLAlchemyError as e:
            logger.error("Transaction failed: %s", _error_message(e))
            raise StoreError(_error_message(e)) from e

    def execute_query(
        self,
        query: str,
        params: dict | None = None,
        expanding: Iterable[str] = (),
    ) -> list[dict]:
        """Execute a SQL statement and return result rows as dictionaries.

        Args:
            query: SQL query string
            params: Query parameters
            expanding: Parameter names bound as IN lists

        Returns:
            List of result dictionaries (empty for statements without rows)
        """
        statement = text(query)
        expanding = list(expanding)
        if expanding:
            statement = statement.bindparams(*(bindparam(name, expanding=True) for name in expanding))

        try:
            with self._connect() as conn:
                result = conn.execute(statement, params or {})
                if result.returns_rows:
                    return [dict(row._mapping) for row in result.fetchall()]
                return []
        except IntegrityError as e:
            logger.warning("Integrity error: %s", _error_message(e))
            raise ConflictError("Record conflicts with existing data", _error_message(e)) from e
        except SQLAlchemyError as e:
            logger.error("Query failed: %s", _error_message(e))
            raise StoreError(_error_message(e)) from e

    def _where(
        self,
        filters: dict | None,
        ranges: dict[str, Range] | None = None,
    ) -> tuple[str, dict, list[str]]:
        conditions = []
        params: dict[str, Any] = {}
        expanding = []

        for i, (column, value) in enumerate((filters or {}).items()):
            name = f"f{i}"
            if value is None:
                conditions.append(f"{_quote(column)} IS NULL")
            elif isinstance(value, (list, tuple, set, frozenset)):
                if not value:
                    conditions.append("1 = 0")
                    continue
                conditions.append(f"{_quote(column)} IN :{name}")
                params[name] = list(value)
                expanding.append(name)
            else:
                conditions.append(f"{_quote(column)} = :{name}")
                params[name] = value

        for i, (column, (low, high)) in enumerate((ranges or {}).items()):
            if low is not None:
                conditions.append(f"{_quote(column)} >= :r{i}_lo")
                params[f"r{i}_lo"] = low
            if high is not None:
                conditions.append(f"{_quote(column)} <= :r{i}_hi")
                params[f"r{i}_hi"] = high

        where_clause = "WHERE " + " AND ".join(conditions) if conditions else ""
        return where_clause, params, expanding

    def select(
        self,
        table: str,
        filters: dict | None = None,
        *,
        ranges: dict[str, Range] | None = None,
        order_by: Sequence[str] = (),
        limit: int | None = None,
        offset: int | None = None,
        columns: Sequence[str] | None = None,
    ) -> list[dict]:
        """Select rows from a table.

        Args:
            table: Table name
            filters: Column-value equality filters
            ranges: Column -> (low, high) inclusive bounds
            order_by: Column names, prefixed with '-' for descending
            limit: Maximum rows
            offset: Rows to skip
            columns: Columns to return (default: all)

        Returns:
            List of row dictionaries
        """
        column_list = ", ".join(_quote(c) for c in columns) if columns else "*"
        where_clause, params, expanding = self._where(filters, ranges)

        order_parts = []
        for key in order_by:
            descending = key.startswith("-")
            order_parts.append(f"{_quote(key.lstrip('-'))} {'DESC' if descending else 'ASC'}")
        order_clause = "ORDER BY " + ", ".join(order_parts) if order_parts else ""

        paging = ""
        if limit is not None:
            paging += " LIMIT :_limit"
            params["_limit"] = int(limit)
        if offset:
            paging += " OFFSET :_offset"
            params["_offset"] = int(offset)

        query = f"SELECT {column_list} FROM {_quote(table)} {where_clause} {order_clause}{paging}"
        return self.execute_query(query, params, expanding)

    def get(self, table: str, record_id: str) -> dict | None:
        """Fetch a single row by id."""
        rows = self.select(table, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, data: dict | list[dict]) -> list[dict]:
        """Insert one or more rows and return them as stored.

        An id is generated for rows that do not carry one.
        """
        rows = [data] if isinstance(data, dict) else list(data)
        inserted = []

        with self.transaction() as store:
            for row in rows:
                row = {"id": str(uuid.uuid4()), **row}
                columns = ", ".join(_quote(k) for k in row)
                placeholders = ", ".join(f":{k}" for k in row)
                query = f"INSERT INTO {_quote(table)} ({columns}) VALUES ({placeholders}) RETURNING *"
                inserted.extend(store.execute_query(query, row))

        return inserted

    def update(self, table: str, patch: dict, filters: dict) -> list[dict]:
        """Update rows matching filters and return the updated rows."""
        if not patch:
            return self.select(table, filters)

        assignments = ", ".join(f"{_quote(k)} = :p_{k}" for k in patch)
        where_clause, params, expanding = self._where(filters)
        params.update({f"p_{k}": v for k, v in patch.items()})

        query = f"UPDATE {_quote(table)} SET {assignments} {where_clause} RETURNING *"
        return self.execute_query(query, params, expanding)

    def delete(self, table: str, filters: dict) -> list[dict]:
        """Delete rows matching filters and return the deleted rows."""
        where_clause, params, expanding = self._where(filters)
        query = f"DELETE FROM {_quote(table)} {where_clause} RETURNING *"
        return self.execute_query(query, params, expanding)

    def count(
        self,
        table: str,
        filters: dict | None = None,
        *,
        ranges: dict[str, Range] | None = None,
    ) -> int:
        """Count rows matching filters."""
        where_clause, params, expanding = self._where(filters, ranges)
        query = f"SELECT COUNT(*) AS total FROM {_quote(table)} {where_clause}"
        result = self.execute_query(query, params, expanding)
        return int(result[0]["total"]) if result else 0

    def increment(self, table: str, record_id: str, column: str, delta: float) -> float | None:
        """Atomically add delta to a numeric column of one row.

        Returns:
            New value, or None if the row does not exist
        """
        col = _quote(column)
        query = f"""
            UPDATE {_quote(table)}
            SET {col} = COALESCE({col}, 0) + :delta,
                "updated_at" = CURRENT_TIMESTAMP
            WHERE "id" = :record_id
            RETURNING {col} AS value
        """
        result = self.execute_query(query, {"record_id": record_id, "delta": delta})
        return float(result[0]["value"]) if result else None

    def adjust_card_balance(self, card_id: str, delta: float) -> float | None:
        """Add delta to a card's running balance in a single statement."""
        return self.increment("cards", card_id, "balance", delta)
