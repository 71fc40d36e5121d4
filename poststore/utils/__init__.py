"""
Utilities package for poststore.

Exports shared helpers for logging and short id generation. Keep this package
lightweight and free of storage logic.
"""

from poststore.utils.logging import configure_logging, configure_sql_logger, get_logger
from poststore.utils.shortid import generate_short_id

__all__ = [
    "configure_logging",
    "configure_sql_logger",
    "generate_short_id",
    "get_logger",
]
