"""Unit tests for post payload decoding and service-level error mapping."""

import uuid

import pytest
from fastapi import HTTPException

from posts import schemas, service


def test_lenient_decode_drops_unknown_fields():
    data = service.decode_post_write({"title": "a", "content": "b", "id": "x"}, strict=False)

    assert isinstance(data, schemas.PostWrite)
    assert data.model_dump() == {"title": "a", "content": "b"}


def test_strict_decode_rejects_unknown_fields():
    with pytest.raises(HTTPException) as exc_info:
        service.decode_post_write({"content": "b", "author": "me"}, strict=True)

    assert exc_info.value.status_code == 400
    assert "author" in exc_info.value.detail


def test_strict_decode_accepts_known_fields():
    data = service.decode_post_write({"content": "b"}, strict=True)

    assert data.title == ""
    assert data.content == "b"


@pytest.mark.asyncio
async def test_get_missing_post_raises_404(store):
    with pytest.raises(HTTPException) as exc_info:
        await service.get_post(uuid.uuid4())

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_create_then_update_keeps_identity(store):
    created = await service.create_post({"title": "t", "content": "one"}, strict=True)
    updated = await service.update_post(created.id, {"content": "two"}, strict=True)

    assert updated.id == created.id
    assert updated.title == "t"
    assert updated.content == "two"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.created_at


@pytest.mark.asyncio
async def test_delete_reports_missing_row(store):
    created = await service.create_post({"title": "t", "content": "c"}, strict=True)

    await service.delete_post(created.id)
    with pytest.raises(HTTPException) as exc_info:
        await service.delete_post(created.id)

    assert exc_info.value.status_code == 404


@pytest.mark.parametrize("strict", [True, False])
def test_null_fields_decode_to_empty_strings(strict):
    data = service.decode_post_write({"title": None, "content": None}, strict=strict)

    assert data.title == ""
    assert data.content == ""
