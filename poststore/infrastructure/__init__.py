"""
Infrastructure package for poststore.

Centralizes database connectivity concerns (conninfo, pool creation, one-off
connections). Keep this layer focused on I/O and resource management, decoupled
from the store factory and repository logic.
"""

from poststore.infrastructure.db_factory import (
    build_conninfo,
    get_sync_connection,
    open_pool,
)

__all__ = [
    "build_conninfo",
    "get_sync_connection",
    "open_pool",
]
