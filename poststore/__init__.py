"""
poststore - storage factory for the Users/Posts service.

This package provides:

- A run-once, thread-safe factory that opens one shared PostgreSQL connection
  pool from configuration and hands out Users/Posts repositories
- Opt-in schema maintenance (migrate, clean, reset)
- A short unique id generator for external-facing keys
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from poststore.config import ConnectionOptions, Settings, get_settings
from poststore.errors import (
    ConfigurationError,
    NotFoundError,
    PoolCreationError,
    SchemaOperationError,
    StoreClosedError,
    StoreError,
    TeardownError,
)
from poststore.store import Datastore, FactoryOnce, clean, get_factory_or, migrate, reset
from poststore.utils.logging import configure_logging, get_logger
from poststore.utils.shortid import generate_short_id

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "ConnectionOptions",
    "Settings",
    "get_settings",
    # Factory
    "Datastore",
    "FactoryOnce",
    "get_factory_or",
    # Schema maintenance
    "clean",
    "migrate",
    "reset",
    # Errors
    "ConfigurationError",
    "NotFoundError",
    "PoolCreationError",
    "SchemaOperationError",
    "StoreClosedError",
    "StoreError",
    "TeardownError",
    # Utilities
    "configure_logging",
    "get_logger",
    "generate_short_id",
]
