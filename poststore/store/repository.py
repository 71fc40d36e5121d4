"""
Shared plumbing for the SQL-backed repositories.

A repository borrows the factory; every call checks a connection out of the
factory's pool, runs its statements on a `dict_row` cursor and hands the
connection back (committing on success, rolling back on error).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Sequence

from psycopg.rows import dict_row

from poststore.utils.logging import SQL_LOGGER_NAME, get_logger

if TYPE_CHECKING:
    from poststore.store.datastore import Datastore

sql_log = get_logger(SQL_LOGGER_NAME)

MAX_PAGE_SIZE = 1000


def clamp_page(offset: int, limit: int) -> tuple[int, int]:
    """Normalize list pagination: offset >= 0, 1 <= limit <= MAX_PAGE_SIZE."""
    return max(0, offset), min(max(1, limit), MAX_PAGE_SIZE)


class SqlRepository:
    """Base class for repositories bound to a Datastore."""

    def __init__(self, store: "Datastore") -> None:
        self._store = store

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        with self._store.pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                yield cur

    def _fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        sql_log.info(sql, extra={"params": len(params)})
        with self._cursor() as cur:
            cur.execute(sql, params)
            return cur.fetchone()

    def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        sql_log.info(sql, extra={"params": len(params)})
        with self._cursor() as cur:
            cur.execute(sql, params)
            return cur.fetchall()

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the affected row count."""
        sql_log.info(sql, extra={"params": len(params)})
        with self._cursor() as cur:
            cur.execute(sql, params)
            return cur.rowcount


__all__ = ["MAX_PAGE_SIZE", "SqlRepository", "clamp_page"]
