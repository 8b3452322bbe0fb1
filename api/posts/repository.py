"""
Post persistence (raw SQL).
This module is where posts-related SQL lives, including the table DDL that
runs at startup.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from core import db

# Idempotent; safe to run on every boot. Columns are only ever added.
SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS posts (
      id uuid PRIMARY KEY,
      title text NOT NULL DEFAULT '',
      content text NOT NULL DEFAULT '',
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    "ALTER TABLE posts ADD COLUMN IF NOT EXISTS title text NOT NULL DEFAULT ''",
    "ALTER TABLE posts ADD COLUMN IF NOT EXISTS content text NOT NULL DEFAULT ''",
    "ALTER TABLE posts ADD COLUMN IF NOT EXISTS created_at timestamptz NOT NULL DEFAULT now()",
    "ALTER TABLE posts ADD COLUMN IF NOT EXISTS updated_at timestamptz NOT NULL DEFAULT now()",
)


async def create_post(*, post_id: UUID, title: str, content: str) -> dict[str, Any]:
    # now() is fixed for the transaction, so created_at == updated_at.
    row = await db.fetch_one(
        """
        INSERT INTO posts (id, title, content, created_at, updated_at)
        VALUES ($1, $2, $3, now(), now())
        RETURNING id, title, content, created_at, updated_at
        """,
        post_id,
        title,
        content,
    )
    if row is None:
        raise db.DatabaseError("Failed to create post.")
    return row


async def list_posts() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, title, content, created_at, updated_at
        FROM posts
        """
    )


async def get_post(post_id: UUID) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, title, content, created_at, updated_at
        FROM posts
        WHERE id = $1
        """,
        post_id,
    )


async def save_post(*, post_id: UUID, title: str, content: str) -> dict[str, Any] | None:
    """
    Full-row write by primary key. Returns None if the row is gone.
    """
    return await db.fetch_one(
        """
        UPDATE posts
        SET title = $2,
            content = $3,
            updated_at = GREATEST(now(), created_at)
        WHERE id = $1
        RETURNING id, title, content, created_at, updated_at
        """,
        post_id,
        title,
        content,
    )


async def delete_post(post_id: UUID) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM posts
        WHERE id = $1
        RETURNING id
        """,
        post_id,
    )
    return row is not None
