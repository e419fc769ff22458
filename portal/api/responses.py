"""
Uniform response envelope: {success, message?, data?, error?}.

Every route answers through these helpers, and the exception handlers
registered in `install_error_handlers` answer errors the same way.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.core.errors import PortalError

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: str | None = None, status_code: int = 200) -> JSONResponse:
    """Success envelope. Absent message / data are omitted, not sent as null."""
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=body)


def fail(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


# =============================================================================
# Exception handlers
# =============================================================================


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        # Internal text goes to the log only
        logger.error(f"{request.method} {request.url.path}: {type(exc).__name__}: {exc.message}")
    return fail(exc.status_code, exc.public_message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Invalid request data on {request.url.path}: {exc.errors()}")
    return fail(400, "Invalid request data")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return fail(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return fail(500, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
