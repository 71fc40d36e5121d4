"""
Store package for poststore.

Re-exports the factory, its initializer, the repository protocols and the
schema maintenance operations so callers can import from `poststore.store`.
"""

from poststore.store.abstract import Factory, PostStore, UserStore
from poststore.store.datastore import Datastore, FactoryOnce, get_factory_or
from poststore.store.posts import Posts
from poststore.store.schema import TABLES, clean, migrate, reset
from poststore.store.users import Users

__all__ = [
    # Factory
    "Datastore",
    "Factory",
    "FactoryOnce",
    "get_factory_or",
    # Repositories
    "PostStore",
    "Posts",
    "UserStore",
    "Users",
    # Schema maintenance
    "TABLES",
    "clean",
    "migrate",
    "reset",
]
