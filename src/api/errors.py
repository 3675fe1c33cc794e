# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers mapping service errors to HTTP responses.

Every error response has the same envelope:

    {"success": false, "error": "<code>", "message": "...", "details": {...}}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.errors import EduPracticeError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

# Error codes for HTTP exceptions raised by dependencies and the router
_HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


async def service_error_handler(request: Request, exc: EduPracticeError) -> JSONResponse:
    """Render a service error with its own status code."""
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render FastAPI body/query validation failures in the common envelope."""
    errors = [
        {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]
    error = ValidationError("Invalid request", {"errors": errors})
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render auth failures and unknown routes in the common envelope."""
    content = {
        "success": False,
        "error": _HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
        "message": str(exc.detail),
        "details": {},
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Render a storage failure that escaped a service."""
    logger.error("%s %s database failure: %s", request.method, request.url.path, exc)
    error = PersistenceError("Storage is unavailable", exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application.

    Args:
        app: FastAPI application.
    """
    app.add_exception_handler(EduPracticeError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
