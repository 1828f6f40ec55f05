"""Table-style CRUD over Postgres.

Services never write SQL; they talk to a ``DataStore`` with named tables,
equality filters and single-column ordering. ``PostgresStore`` is the asyncpg
implementation used in production, the tests swap in an in-memory one.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Protocol

import asyncpg

from . import get_pool
from ..errors import StoreError, StoreWriteError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

TABLES = frozenset({"orders", "order_items", "products", "profiles", "categories"})

_IDENT = re.compile(r"^[a-z_][a-z0-9_]*$")

# driver-level failures that mean "the store did not answer"
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class DataStore(Protocol):
    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]: ...

    async def insert(self, table: str, row: Row) -> Row: ...

    async def insert_many(self, table: str, rows: List[Row]) -> List[Row]: ...

    async def update(self, table: str, row_id: str, patch: Row) -> Optional[Row]: ...

    async def delete(self, table: str, row_id: str) -> None: ...


def check_table(table: str) -> str:
    if table not in TABLES:
        raise ValueError(f"unknown table: {table}")
    return table


def check_column(column: str) -> str:
    if not _IDENT.match(column):
        raise ValueError(f"invalid column name: {column!r}")
    return column


def _where(filters: Optional[Dict[str, Any]], params: List[Any]) -> str:
    """
    Build a WHERE clause from equality filters, appending values to params.
    A list/tuple/set value means "column is one of these".
    """
    clauses = []
    for col, value in (filters or {}).items():
        check_column(col)
        if value is None:
            clauses.append(f"{col} IS NULL")
        elif isinstance(value, (list, tuple, set, frozenset)):
            params.append(list(value))
            clauses.append(f"{col} = ANY(${len(params)})")
        else:
            params.append(value)
            clauses.append(f"{col} = ${len(params)}")
    return " AND ".join(clauses) if clauses else "TRUE"


class PostgresStore:
    """DataStore backed by the shared asyncpg pool."""

    async def _fetch(self, sql: str, *params: Any) -> List[Row]:
        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except _DRIVER_ERRORS as exc:
            logger.error("store read failed: %s", exc)
            raise StoreError(str(exc)) from exc
        return [dict(r) for r in rows]

    async def _write(self, sql: str, *params: Any) -> List[Row]:
        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except _DRIVER_ERRORS as exc:
            logger.error("store write failed: %s", exc)
            raise StoreWriteError(str(exc)) from exc
        return [dict(r) for r in rows]

    async def query(self, table, filters=None, order_by=None, descending=False, limit=None):
        check_table(table)
        params: List[Any] = []
        sql = f"SELECT * FROM {table} WHERE {_where(filters, params)}"
        if order_by:
            sql += f" ORDER BY {check_column(order_by)} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            params.append(int(limit))
            sql += f" LIMIT ${len(params)}"
        return await self._fetch(sql, *params)

    async def insert(self, table, row):
        rows = await self.insert_many(table, [row])
        return rows[0]

    async def insert_many(self, table, rows):
        """Insert rows in one statement; the store fills ids and timestamps."""
        check_table(table)
        if not rows:
            return []
        columns = [check_column(c) for c in rows[0]]
        params: List[Any] = []
        values_sql = []
        for row in rows:
            placeholders = []
            for col in columns:
                params.append(row.get(col))
                placeholders.append(f"${len(params)}")
            values_sql.append("(" + ", ".join(placeholders) + ")")
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES {', '.join(values_sql)} RETURNING *"
        )
        return await self._write(sql, *params)

    async def update(self, table, row_id, patch):
        check_table(table)
        if not patch:
            found = await self.query(table, {"id": row_id}, limit=1)
            return found[0] if found else None
        params: List[Any] = []
        sets = []
        for col, value in patch.items():
            params.append(value)
            sets.append(f"{check_column(col)} = ${len(params)}")
        params.append(row_id)
        sql = f"UPDATE {table} SET {', '.join(sets)} WHERE id = ${len(params)} RETURNING *"
        rows = await self._write(sql, *params)
        return rows[0] if rows else None

    async def delete(self, table, row_id):
        check_table(table)
        await self._write(f"DELETE FROM {table} WHERE id = $1 RETURNING id", row_id)


def first(rows: Iterable[Row]) -> Optional[Row]:
    for r in rows:
        return r
    return None
