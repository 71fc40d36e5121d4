"""
Store interfaces for poststore.

The factory hands out repository handles that satisfy these protocols. Concrete
implementations live next to this module (`users`, `posts`, `datastore`);
callers should depend on the protocols so test doubles can stand in.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from poststore.domain.models import Post, User


@runtime_checkable
class UserStore(Protocol):
    """CRUD capabilities for `users` rows, keyed by username."""

    def create(self, user: User) -> User:
        ...

    def get(self, username: str) -> User:
        ...

    def update(self, user: User) -> User:
        ...

    def delete(self, username: str) -> None:
        ...

    def list(self, offset: int = 0, limit: int = 20) -> Tuple[int, List[User]]:
        ...


@runtime_checkable
class PostStore(Protocol):
    """CRUD capabilities for `posts` rows, keyed by (username, post_id)."""

    def create(self, post: Post) -> Post:
        ...

    def get(self, username: str, post_id: str) -> Post:
        ...

    def update(self, post: Post) -> Post:
        ...

    def delete(self, username: str, post_id: str) -> None:
        ...

    def delete_collection(self, username: str, post_ids: Sequence[str]) -> int:
        ...

    def list(
        self, username: Optional[str] = None, offset: int = 0, limit: int = 20
    ) -> Tuple[int, List[Post]]:
        ...


@runtime_checkable
class Factory(Protocol):
    """
    Entry point to the storage layer.

    `users()` and `posts()` return fresh, cheap handles bound to the shared
    pool; `close()` tears the pool down.
    """

    def users(self) -> UserStore:
        ...

    def posts(self) -> PostStore:
        ...

    def close(self) -> None:
        ...


__all__ = [
    "Factory",
    "PostStore",
    "UserStore",
]
