"""
FastAPI router for post endpoints.
"""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from . import schemas, service

PREFIX = "/api"

router = APIRouter(prefix=PREFIX)


def strict_decoding(request: Request) -> bool:
    return bool(request.app.state.settings.strict_decoding)


async def json_body(request: Request) -> Any:
    """
    Decode the request body as JSON whatever the Content-Type header says.
    """
    raw = await request.body()
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {exc}") from exc


@router.get("/post")
async def list_posts() -> list[schemas.PostResponse]:
    return await service.list_posts()


@router.get("/post/{post_id}")
async def get_post(post_id: UUID) -> schemas.PostResponse:
    return await service.get_post(post_id)


@router.post("/post", status_code=201)
async def create_post(
    payload: Any = Depends(json_body),
    strict: bool = Depends(strict_decoding),
) -> Response:
    """
    Create a post. The server mints the id; it is reported only through
    the Location header, the body stays empty.
    """
    post = await service.create_post(payload, strict=strict)
    return Response(status_code=201, headers={"Location": f"{PREFIX}/post/{post.id}"})


@router.api_route("/post/{post_id}", methods=["PUT", "PATCH"], status_code=204)
async def update_post(
    post_id: UUID,
    payload: Any = Depends(json_body),
    strict: bool = Depends(strict_decoding),
) -> Response:
    """
    Replace the post's `content`. Other fields in the body are ignored
    (or rejected, in strict mode, if they are not `title`/`content`).
    """
    await service.update_post(post_id, payload, strict=strict)
    return Response(status_code=204)


@router.delete("/post/{post_id}")
async def delete_post(post_id: UUID) -> Response:
    await service.delete_post(post_id)
    return Response(status_code=200)
