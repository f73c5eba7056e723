"""
Post persistence operations.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from sample_backend.db import Database, fits_integer, utc_now
from sample_backend.errors import NotFoundError
from sample_backend.validation import PostInput

_SELECT_POST = (
    "SELECT id, title, content, created_at AS createdAt, updated_at AS updatedAt "
    "FROM posts"
)

POST_NOT_FOUND = "Post not found."


class PostRepository:
    def __init__(self, db: Database, clock: Optional[Callable[[], str]] = None):
        self.db = db
        self.clock = clock or utc_now

    def list(self) -> list[dict[str, Any]]:
        """All posts, newest id first."""
        return self.db.query(f"{_SELECT_POST} ORDER BY id DESC")

    def get(self, post_id: int) -> dict[str, Any]:
        if not fits_integer(post_id):
            raise NotFoundError(POST_NOT_FOUND)
        post = self.db.query_one(f"{_SELECT_POST} WHERE id = :id", {"id": post_id})
        if post is None:
            raise NotFoundError(POST_NOT_FOUND)
        return post

    def create(self, payload: PostInput) -> dict[str, Any]:
        now = self.clock()
        result = self.db.execute(
            "INSERT INTO posts (title, content, created_at, updated_at) "
            "VALUES (:title, :content, :now, :now)",
            {"title": payload.title, "content": payload.content, "now": now},
        )
        return self.get(result.inserted_id)

    def update(self, post_id: int, payload: PostInput) -> dict[str, Any]:
        if not fits_integer(post_id):
            raise NotFoundError(POST_NOT_FOUND)
        result = self.db.execute(
            "UPDATE posts SET title = :title, content = :content, updated_at = :now "
            "WHERE id = :id",
            {
                "title": payload.title,
                "content": payload.content,
                "now": self.clock(),
                "id": post_id,
            },
        )
        if result.rows_affected == 0:
            raise NotFoundError(POST_NOT_FOUND)
        return self.get(post_id)

    def delete(self, post_id: int) -> int:
        if not fits_integer(post_id):
            raise NotFoundError(POST_NOT_FOUND)
        result = self.db.execute("DELETE FROM posts WHERE id = :id", {"id": post_id})
        if result.rows_affected == 0:
            raise NotFoundError(POST_NOT_FOUND)
        return post_id
