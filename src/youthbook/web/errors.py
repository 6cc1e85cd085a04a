from __future__ import annotations

import logging

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import JSONResponse

from youthbook.errors import (
    ConflictError,
    InvalidCursor,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from youthbook.logging_config import log_with_fields

logger = logging.getLogger("youthbook.http")


def _error_body(code: str, detail: str, exc: PersistenceError) -> dict[str, object]:
    body: dict[str, object] = {"error": code, "detail": detail}
    if exc.batch_index is not None:
        body["batch_index"] = exc.batch_index
        body["record_id"] = str(exc.record_id) if exc.record_id is not None else None
    return body


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        log_with_fields(
            logger,
            logging.INFO,
            "stale write rejected",
            path=request.url.path,
            model=exc.model_name,
            expected_version=exc.expected_version,
            current_version=exc.current_version,
        )
        body = _error_body(
            exc.reason, "This record was changed by someone else. Reload and try again.", exc
        )
        body["current_version"] = exc.current_version
        return JSONResponse(status_code=409, content=body)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", "This item is no longer available.", exc),
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        body = _error_body("validation_failed", "Some fields are invalid.", exc)
        body["errors"] = exc.errors
        return JSONResponse(status_code=422, content=body)

    @app.exception_handler(InvalidCursor)
    async def invalid_cursor_handler(request: Request, exc: InvalidCursor) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_error_body("invalid_cursor", "This link is no longer valid.", exc),
        )
