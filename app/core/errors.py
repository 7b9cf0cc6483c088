"""API error types and the JSON error envelope.

Every error response has the same shape::

    {"error": {"code": 400, "type": "bad_request", "message": "..."}}

Handlers raise an ``APIError`` subclass; the exception handlers installed by
``register_error_handlers`` render it.  Framework-raised errors (Starlette
``HTTPException`` for unknown routes, ``RequestValidationError`` for bad
path/query params) are rendered in the same envelope.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_TYPE_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_502_BAD_GATEWAY: "upstream_failure",
}


class APIError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "server_error"
    default_message: str = "Internal server error."

    def __init__(
        self, message: str | None = None, *, headers: dict[str, str] | None = None
    ) -> None:
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class BadRequestError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "bad_request"
    default_message = "Bad request."


class UnauthorizedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "unauthorized"
    default_message = "Unauthorized."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"
    default_message = "Not found."


class UpstreamError(APIError):
    """The payment provider could not complete a server-to-server call."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_type = "upstream_failure"
    default_message = "Upstream request failed."


def error_body(code: int, error_type: str, message: str) -> dict:
    return {"error": {"code": code, "type": error_type, "message": message}}


async def _api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.error_type, exc.message),
        headers=exc.headers,
    )


async def _http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    error_type = _TYPE_BY_STATUS.get(
        exc.status_code, "server_error" if exc.status_code >= 500 else "bad_request"
    )
    message = exc.detail if isinstance(exc.detail, str) else error_type
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, error_type, message),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg"))
    message = "; ".join(str(p) for p in parts) or "Invalid request."
    code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content=error_body(code, "bad_request", message))


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", type(exc).__name__)
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=code,
        content=error_body(code, "server_error", APIError.default_message),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
