"""
JSON error envelope.

Every failure leaves the API as `{"error": "<message>"}`:
- HTTPException          -> its status code, detail as the message
- request validation     -> 400
- DatabaseError          -> 500
- anything else          -> 500
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.db import DatabaseError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def validation_message(errors: Iterable[dict[str, Any]]) -> str:
    """
    Flatten pydantic/FastAPI error dicts into one line:
    "body.extra: Extra inputs are not permitted; path.post_id: Input should be a valid UUID ..."
    """
    parts: list[str] = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = str(err.get("msg") or "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request."


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, validation_message(exc.errors()))


async def _database_exception_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("database_error method=%s path=%s error=%s", request.method, request.url.path, exc)
    return error_response(500, str(exc))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return error_response(500, str(exc) or "Internal server error.")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(DatabaseError, _database_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
