"""
Post business logic.

Scope:
- decode create/update payloads (strict or lenient, per settings)
- mint ids on create
- map missing rows to 404
"""

from __future__ import annotations

import logging
import uuid
from typing import Any
from uuid import UUID

from fastapi import HTTPException
from pydantic import ValidationError

from core.errors import validation_message

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_post_response(row: dict) -> schemas.PostResponse:
    return schemas.PostResponse(
        id=row["id"],
        title=str(row["title"]),
        content=str(row["content"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def decode_post_write(payload: Any, *, strict: bool) -> schemas.PostWrite:
    """
    Validate a JSON body against the write schema.
    Strict mode rejects any field other than `title` and `content`.
    """
    model = schemas.write_schema(strict=strict)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=400,
            detail=validation_message(exc.errors(include_url=False)),
        ) from exc


async def list_posts() -> list[schemas.PostResponse]:
    rows = await repository.list_posts()
    return [_to_post_response(row) for row in rows]


async def get_post(post_id: UUID) -> schemas.PostResponse:
    row = await repository.get_post(post_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Post not found.")
    return _to_post_response(row)


async def create_post(payload: Any, *, strict: bool) -> schemas.PostResponse:
    data = decode_post_write(payload, strict=strict)
    row = await repository.create_post(
        post_id=uuid.uuid4(),
        title=data.title,
        content=data.content,
    )
    logger.info("post_created post_id=%s", row["id"])
    return _to_post_response(row)


async def update_post(post_id: UUID, payload: Any, *, strict: bool) -> schemas.PostResponse:
    """
    Replace `content` on an existing post; every other field is kept.
    """
    data = decode_post_write(payload, strict=strict)

    current = await repository.get_post(post_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Post not found.")

    saved = await repository.save_post(
        post_id=post_id,
        title=str(current["title"]),
        content=data.content,
    )
    if saved is None:
        # Deleted between the read and the write.
        raise HTTPException(status_code=404, detail="Post not found.")
    logger.info("post_updated post_id=%s", post_id)
    return _to_post_response(saved)


async def delete_post(post_id: UUID) -> None:
    deleted = await repository.delete_post(post_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Post not found.")
    logger.info("post_deleted post_id=%s", post_id)
