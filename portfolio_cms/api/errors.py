"""Exception handlers producing the JSON error envelope.

Every error response has the shape::

    {"status": "error", "status_code": 404, "message": "...", "error": "NotFoundError"}

Validation failures additionally carry a ``details`` list.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_cms.core.exceptions import AuthenticationError, PortfolioCMSError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    error: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    body = {
        "status": "error",
        "status_code": status_code,
        "message": message,
        "error": error,
        **extra,
    }
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def domain_error_handler(request: Request, exc: PortfolioCMSError) -> JSONResponse:
    headers = (
        {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    )
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(
        exc.status_code, exc.message, type(exc).__name__, headers=headers
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(
        exc.status_code,
        str(exc.detail),
        "HTTPException",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = "; ".join(
        f"{d['field']}: {d['message']}" if d["field"] else d["message"] for d in details
    )
    return error_response(422, message or "Validation failed", "ValidationError", details=details)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = uuid.uuid4().hex[:12]
    logger.exception(
        "Unhandled error %s on %s %s", error_id, request.method, request.url.path
    )
    return error_response(
        500, "Internal server error", "InternalServerError", error_id=error_id
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortfolioCMSError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
