"""
Pydantic schemas for post endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class PostWrite(BaseModel):
    """
    Create/update payload. Unknown fields (including a client-sent `id`)
    are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    content: str = ""

    @field_validator("title", "content", mode="before")
    @classmethod
    def null_is_empty(cls, value: object) -> object:
        # JSON null leaves the field at its zero value.
        return "" if value is None else value


class StrictPostWrite(PostWrite):
    model_config = ConfigDict(extra="forbid")


class PostResponse(BaseModel):
    id: UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


def write_schema(*, strict: bool) -> type[PostWrite]:
    return StrictPostWrite if strict else PostWrite
