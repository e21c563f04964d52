from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.errors import (
    CollaboratorUnavailable,
    DirectoryError,
    DuplicateKeyError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


logger = logging.getLogger(__name__)

STATUS_BY_ERROR: list[tuple[type[DirectoryError], int]] = [
    (ValidationError, 400),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (DuplicateKeyError, 409),
    (CollaboratorUnavailable, 500),
]


def status_for(exc: DirectoryError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def install_error_handlers(app: FastAPI) -> None:
    """Every error leaves the API as {"error": message}."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return JSONResponse({"error": "; ".join(parts) or "Invalid request"}, status_code=400)

    @app.exception_handler(DirectoryError)
    async def _directory_error(request: Request, exc: DirectoryError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error("request failed", extra={"step": request.url.path, "status": status, "error": str(exc)})
        return JSONResponse({"error": str(exc)}, status_code=status)
