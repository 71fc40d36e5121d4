from __future__ import annotations

from typing import List, Tuple

from poststore.domain.models import User
from poststore.errors import NotFoundError
from poststore.store.repository import SqlRepository, clamp_page

_COLUMNS = "id, username, password, nickname, email, phone, created_at, updated_at"


class Users(SqlRepository):
    """
    `users` table access keyed by username.

    Handles are cheap and stateless; obtain one per use from `Datastore.users()`.
    """

    def create(self, user: User) -> User:
        row = self._fetchone(
            f"""
            INSERT INTO users (username, password, nickname, email, phone)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_COLUMNS};
            """,
            (user.username, user.password, user.nickname, user.email, user.phone),
        )
        return User.model_validate(row)

    def get(self, username: str) -> User:
        row = self._fetchone(
            f"SELECT {_COLUMNS} FROM users WHERE username = %s;",
            (username,),
        )
        if row is None:
            raise NotFoundError("user", username)
        return User.model_validate(row)

    def update(self, user: User) -> User:
        row = self._fetchone(
            f"""
            UPDATE users
            SET password = %s, nickname = %s, email = %s, phone = %s, updated_at = now()
            WHERE username = %s
            RETURNING {_COLUMNS};
            """,
            (user.password, user.nickname, user.email, user.phone, user.username),
        )
        if row is None:
            raise NotFoundError("user", user.username)
        return User.model_validate(row)

    def delete(self, username: str) -> None:
        self._execute("DELETE FROM users WHERE username = %s;", (username,))

    def list(self, offset: int = 0, limit: int = 20) -> Tuple[int, List[User]]:
        offset, limit = clamp_page(offset, limit)
        total = self._fetchone("SELECT COUNT(*) AS total FROM users;")
        rows = self._fetchall(
            f"SELECT {_COLUMNS} FROM users ORDER BY id DESC OFFSET %s LIMIT %s;",
            (offset, limit),
        )
        return int(total["total"]) if total else 0, [User.model_validate(row) for row in rows]


__all__ = ["Users"]
