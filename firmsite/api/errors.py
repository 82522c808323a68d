"""
HTTP rendering of domain errors.

Every failure leaves the API as {success: false, message, error, errors?}.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from firmsite.domain.errors import (
    AuthError,
    CMSError,
    DependencyError,
    FieldError,
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[CMSError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    AuthError: 401,
    UnsupportedMediaError: 400,
    PayloadTooLargeError: 400,
    DependencyError: 500,
}


def status_for(exc: CMSError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_body(
    message: str, code: str, errors: list[FieldError] | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message, "error": code}
    if errors:
        body["errors"] = [
            {"field": e.field, "code": e.code, "message": e.message} for e in errors
        ]
    return body


async def cms_error_handler(request: Request, exc: CMSError) -> JSONResponse:
    status_code = status_for(exc)
    errors = exc.errors if isinstance(exc, ValidationError) else None
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.code)

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, exc.code, errors),
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        FieldError(
            code="invalid",
            message=str(err.get("msg", "Invalid value")),
            field=".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
            or None,
        )
        for err in exc.errors()
    ]
    message = "; ".join(e.message for e in errors) or "Invalid request"
    return JSONResponse(status_code=400, content=error_body(message, "validation_error", errors))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, f"http_{exc.status_code}"),
        headers=exc.headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CMSError, cms_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
