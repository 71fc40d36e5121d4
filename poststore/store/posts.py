from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from poststore.domain.models import Post
from poststore.errors import NotFoundError
from poststore.store.repository import SqlRepository, clamp_page
from poststore.utils.shortid import generate_short_id

_COLUMNS = "id, post_id, username, title, content, created_at, updated_at"


class Posts(SqlRepository):
    """
    `posts` table access keyed by (username, post_id).

    New posts without a `post_id` get a generated short id.
    """

    def create(self, post: Post) -> Post:
        post_id = post.post_id or generate_short_id()
        row = self._fetchone(
            f"""
            INSERT INTO posts (post_id, username, title, content)
            VALUES (%s, %s, %s, %s)
            RETURNING {_COLUMNS};
            """,
            (post_id, post.username, post.title, post.content),
        )
        return Post.model_validate(row)

    def get(self, username: str, post_id: str) -> Post:
        row = self._fetchone(
            f"SELECT {_COLUMNS} FROM posts WHERE username = %s AND post_id = %s;",
            (username, post_id),
        )
        if row is None:
            raise NotFoundError("post", post_id)
        return Post.model_validate(row)

    def update(self, post: Post) -> Post:
        row = self._fetchone(
            f"""
            UPDATE posts
            SET title = %s, content = %s, updated_at = now()
            WHERE username = %s AND post_id = %s
            RETURNING {_COLUMNS};
            """,
            (post.title, post.content, post.username, post.post_id),
        )
        if row is None:
            raise NotFoundError("post", post.post_id)
        return Post.model_validate(row)

    def delete(self, username: str, post_id: str) -> None:
        self._execute(
            "DELETE FROM posts WHERE username = %s AND post_id = %s;",
            (username, post_id),
        )

    def delete_collection(self, username: str, post_ids: Sequence[str]) -> int:
        """Delete several posts of one author; returns how many rows went away."""
        if not post_ids:
            return 0
        return self._execute(
            "DELETE FROM posts WHERE username = %s AND post_id = ANY(%s);",
            (username, list(post_ids)),
        )

    def list(
        self, username: Optional[str] = None, offset: int = 0, limit: int = 20
    ) -> Tuple[int, List[Post]]:
        offset, limit = clamp_page(offset, limit)
        where, params = ("WHERE username = %s", [username]) if username else ("", [])
        total = self._fetchone(f"SELECT COUNT(*) AS total FROM posts {where};", params)
        rows = self._fetchall(
            f"SELECT {_COLUMNS} FROM posts {where} ORDER BY id DESC OFFSET %s LIMIT %s;",
            [*params, offset, limit],
        )
        return int(total["total"]) if total else 0, [Post.model_validate(row) for row in rows]


__all__ = ["Posts"]
