"""
Domain package for poststore.

Exports the entity models stored by the repositories.
"""

from poststore.domain.models import Post, User

__all__ = [
    "Post",
    "User",
]
