"""
Pytest configuration for poststore.

Provides fixtures for:
- Connection options for unit tests and for the integration database
- An in-memory fake connection pool recording executed statements
- Database reachability checks for integration tests
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg
import pytest

from poststore.config import ConnectionOptions
from poststore.infrastructure.db_factory import build_conninfo


class FakeCursor:
    def __init__(self, pool: FakePool) -> None:
        self._pool = pool
        self._rows: List[Dict[str, Any]] = []
        self.rowcount = -1

    def execute(self, statement: Any, params: Any = None) -> None:
        text = statement if isinstance(statement, str) else repr(statement)
        self._pool.executed.append((text, params))
        for needle, exc in self._pool.failures.items():
            if needle in text:
                raise exc
        self._rows = self._pool.results.pop(0) if self._pool.results else []
        self.rowcount = self._pool.rowcount

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    def __enter__(self) -> FakeCursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


class FakeConnection:
    def __init__(self, pool: FakePool) -> None:
        self._pool = pool

    def cursor(self, row_factory: Any = None) -> FakeCursor:
        del row_factory
        return FakeCursor(self._pool)


class FakePool:
    """
    Stand-in for psycopg_pool.ConnectionPool.

    `results` is a queue of row lists, one per executed statement; `failures`
    maps a substring of the statement text to the exception it raises.
    """

    def __init__(self) -> None:
        self.executed: List[tuple[str, Any]] = []
        self.results: List[List[Dict[str, Any]]] = []
        self.failures: Dict[str, Exception] = {}
        self.rowcount = 0
        self.close_calls = 0
        self.close_error: Optional[Exception] = None
        self.closed = False

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Iterator[FakeConnection]:
        del timeout
        if self.closed:
            raise RuntimeError("pool is already closed")
        yield FakeConnection(self)

    def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error
        self.closed = True

    @property
    def statements(self) -> List[str]:
        return [text for text, _ in self.executed]


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def options() -> ConnectionOptions:
    return ConnectionOptions(host="localhost", database="app")


@pytest.fixture(scope="session")
def test_options() -> ConnectionOptions:
    """
    Options for the integration database.

    Can be overridden via environment variables in CI or local testing.
    """
    return ConnectionOptions(
        host=os.getenv("DB_HOST", "127.0.0.1:5432"),
        username=os.getenv("DB_USERNAME", "postgres"),
        password=os.getenv("DB_PASSWORD", "postgres"),
        database=os.getenv("DB_DATABASE", "poststore"),
        max_idle_connections=1,
        max_open_connections=5,
        connect_timeout=5,
    )


@pytest.fixture(scope="session")
def db_connection_available(test_options: ConnectionOptions) -> bool:
    """
    Check if database is reachable.

    Used to skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(build_conninfo(test_options)) as conn:
            conn.execute("SELECT 1;")
        return True
    except psycopg.Error:
        return False
