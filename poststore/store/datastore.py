"""
Store factory and its one-time initializer.

`Datastore` owns the connection pool and hands out repository handles.
`FactoryOnce` builds the Datastore at most once: the first caller opens the
pool while concurrent callers wait on the lock, and every caller afterwards
gets the cached result. A failed attempt is cached as well; later calls raise
the same error without trying again, even with different options. Build a new
`FactoryOnce` to start over.

Most processes use the module-level `get_factory_or()`, backed by a default
initializer. Applications that prefer explicit wiring create their own
`FactoryOnce` at startup and pass it (or the Datastore it returns) around.
"""

from __future__ import annotations

import threading
from types import TracebackType
from typing import Callable, Optional

from psycopg_pool import ConnectionPool

from poststore.config import ConnectionOptions, load_connection_options
from poststore.errors import (
    ConfigurationError,
    PoolCreationError,
    StoreClosedError,
    StoreError,
    TeardownError,
)
from poststore.infrastructure.db_factory import open_pool
from poststore.store.abstract import PostStore, UserStore
from poststore.store.posts import Posts
from poststore.store.users import Users
from poststore.utils.logging import get_logger

log = get_logger(__name__)

PoolBuilder = Callable[[ConnectionOptions], ConnectionPool]
OptionsLoader = Callable[[], ConnectionOptions]


class Datastore:
    """
    Owner of the shared connection pool.

    Repository handles keep a reference to the Datastore, never to the pool,
    so they stop working (StoreClosedError) once the Datastore is closed.
    """

    def __init__(self, pool: Optional[ConnectionPool]) -> None:
        self._pool = pool
        self._closed = False
        self._lock = threading.Lock()

    @property
    def pool(self) -> ConnectionPool:
        if self._closed:
            raise StoreClosedError("datastore is closed")
        if self._pool is None:
            raise StoreClosedError("datastore has no connection pool")
        return self._pool

    @property
    def closed(self) -> bool:
        return self._closed

    def users(self) -> UserStore:
        return Users(self)

    def posts(self) -> PostStore:
        return Posts(self)

    def close(self) -> None:
        """
        Close every pooled connection.

        A Datastore without a pool, or one that is already closed, returns
        immediately. Driver failures are raised as TeardownError and not retried.
        """
        with self._lock:
            if self._pool is None or self._closed:
                return
            self._closed = True
            pool = self._pool
        try:
            pool.close()
        except Exception as exc:
            log.error("Failed to close connection pool: %s", exc)
            raise TeardownError(f"failed to close connection pool: {exc}") from exc
        log.info("Connection pool closed")

    def __enter__(self) -> "Datastore":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("open" if self._pool is not None else "empty")
        return f"<Datastore {state}>"


class FactoryOnce:
    """
    Thread-safe, run-once builder of the Datastore.

    Parameters
    ----------
    pool_builder : callable
        Opens the pool from ConnectionOptions (defaults to `open_pool`).
    options_loader : callable
        Supplies ConnectionOptions when the caller passes none (defaults to the
        process configuration).
    """

    def __init__(
        self,
        pool_builder: PoolBuilder = open_pool,
        options_loader: OptionsLoader = load_connection_options,
    ) -> None:
        self._pool_builder = pool_builder
        self._options_loader = options_loader
        self._lock = threading.Lock()
        self._done = False
        self._factory: Optional[Datastore] = None
        self._error: Optional[StoreError] = None
        self._error_tb: Optional[TracebackType] = None

    @property
    def done(self) -> bool:
        return self._done

    def get(self, options: Optional[ConnectionOptions] = None) -> Datastore:
        """
        Return the Datastore, building it on the first call.

        `options` only matters for the call that runs the initialization.

        Raises
        ------
        ConfigurationError
            The options could not be loaded.
        PoolCreationError
            The pool could not be opened. Cached; every later call raises it again.
        """
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._initialize(options)
                    finally:
                        self._done = True

        if self._error is not None:
            raise self._error.with_traceback(self._error_tb)
        if self._factory is None:
            raise PoolCreationError("failed to get store factory, factory: None")
        return self._factory

    def _initialize(self, options: Optional[ConnectionOptions]) -> None:
        try:
            opts = options if options is not None else self._options_loader()
        except ConfigurationError as exc:
            log.error("Store factory configuration rejected: %s", exc)
            self._remember(exc)
            return
        except Exception as exc:
            log.error("Failed to load store factory options: %s", exc)
            error = ConfigurationError(f"failed to load database options: {exc}")
            error.__cause__ = exc
            self._remember(error)
            return

        try:
            pool = self._pool_builder(opts)
        except Exception as exc:
            log.error(
                "Failed to open connection pool: %s", exc, extra={"options": opts.describe()}
            )
            error = PoolCreationError(
                f"failed to get store factory, factory: {self._factory!r}, "
                f"options: {opts.describe()}, error: {exc}"
            )
            error.__cause__ = exc
            self._remember(error)
            return

        self._factory = Datastore(pool)
        log.info("Store factory ready", extra={"host": opts.host, "database": opts.database})

    def _remember(self, exc: StoreError) -> None:
        self._error = exc
        self._error_tb = exc.__traceback__


_default = FactoryOnce()


def get_factory_or(options: Optional[ConnectionOptions] = None) -> Datastore:
    """
    Return the process-wide Datastore, creating its pool on first use.

    See FactoryOnce.get for the failure policy.
    """
    return _default.get(options)


__all__ = [
    "Datastore",
    "FactoryOnce",
    "get_factory_or",
]
