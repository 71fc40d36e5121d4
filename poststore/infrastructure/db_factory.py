"""
Database connection factory utilities for poststore.

Builds the psycopg connection string from ConnectionOptions, opens the shared
`psycopg_pool.ConnectionPool` the store factory owns, and provides a one-off
connection helper with retry logic for transient failures (used by the CLI
`ping` command).
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from poststore.config import ConnectionOptions, load_connection_options
from poststore.utils.logging import configure_sql_logger, get_logger

log = get_logger(__name__)

POOL_NAME = "poststore"


def build_conninfo(options: ConnectionOptions) -> str:
    """Compose a libpq connection string from the connection options."""
    params = {
        "host": options.hostname,
        "user": options.username,
        "password": options.password,
        "dbname": options.database,
        "connect_timeout": str(max(1, int(options.connect_timeout.total_seconds()))),
    }
    if options.port is not None:
        params["port"] = str(options.port)
    return make_conninfo("", **params)


def open_pool(options: ConnectionOptions) -> ConnectionPool:
    """
    Create and open the connection pool described by `options`.

    Idle connections map to the pool's `min_size`, open connections to
    `max_size` and the connection lifetime to `max_lifetime`. The pool is
    checked with a `SELECT 1` before it is returned so an unreachable database
    fails here instead of on first use.

    Raises
    ------
    psycopg.Error, psycopg_pool.PoolTimeout
        If the pool cannot be opened or the check query fails.
    """
    configure_sql_logger(options.log_level)
    timeout = options.connect_timeout.total_seconds()
    pool = ConnectionPool(
        conninfo=build_conninfo(options),
        min_size=options.max_idle_connections,
        max_size=options.max_open_connections,
        max_lifetime=options.max_connection_life_time.total_seconds(),
        timeout=timeout,
        name=POOL_NAME,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=timeout)
        with pool.connection(timeout=timeout) as conn:
            conn.execute("SELECT 1")
    except BaseException:
        pool.close()
        raise
    log.info(
        "Connection pool opened",
        extra={
            "host": options.host,
            "database": options.database,
            "min_size": options.max_idle_connections,
            "max_size": options.max_open_connections,
        },
    )
    return pool


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(options: Optional[ConnectionOptions] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for one-off checks; repositories go through the factory's pool.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(build_conninfo(options or load_connection_options()))


__all__ = [
    "POOL_NAME",
    "build_conninfo",
    "get_sync_connection",
    "open_pool",
]
