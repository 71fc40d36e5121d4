"""
Error taxonomy for poststore.

Every error raised by the store layer derives from StoreError and is raised
with `raise ... from cause` so the driver exception stays reachable through
`__cause__`.

- ConfigurationError: configuration values cannot produce usable options
- PoolCreationError: the driver could not build or open the connection pool
- TeardownError: closing the pool failed
- SchemaOperationError: a migrate/clean step failed
- StoreClosedError: the factory was used after close()
- NotFoundError: a repository lookup matched no row
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class StoreError(Exception):
    """Base class for store layer failures."""


class ConfigurationError(StoreError):
    """Configuration produced unusable connection options."""

    def __init__(self, message: str, options: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.options = options or {}


class PoolCreationError(StoreError):
    """The database driver failed to establish the connection pool."""


class TeardownError(StoreError):
    """Closing the connection pool failed."""


class SchemaOperationError(StoreError):
    """A schema maintenance step failed."""

    def __init__(self, operation: str, table: str, message: str) -> None:
        super().__init__(f"{operation} failed on table {table!r}: {message}")
        self.operation = operation
        self.table = table


class StoreClosedError(StoreError, RuntimeError):
    """The store factory has already been closed."""


class NotFoundError(StoreError, LookupError):
    """No row matched the requested key."""

    def __init__(self, entity: str, key: Any) -> None:
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key


__all__ = [
    "ConfigurationError",
    "NotFoundError",
    "PoolCreationError",
    "SchemaOperationError",
    "StoreClosedError",
    "StoreError",
    "TeardownError",
]
