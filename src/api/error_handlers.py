# This file defines consistent API error payloads and exception handlers.
# It exists so every endpoint returns the same `{status, error}` envelope with a request trace field.
# The handlers translate validation, auth, storage, and unexpected failures into safe client messages.
# Storage and internal causes are logged server-side and never echoed to the client.

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.api.db_access import DatabaseError, DatabaseTimeoutError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Domain error type with structured API details."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


def validation_error(message: str, *, error_code: str = "VALIDATION_ERROR") -> APIError:
    return APIError(status_code=400, error_code=error_code, message=message)


def unauthorized(message: str = "Unauthorized - missing or invalid token") -> APIError:
    return APIError(status_code=401, error_code="UNAUTHORIZED", message=message)


def not_found(message: str = "The requested resource could not be found") -> APIError:
    return APIError(status_code=404, error_code="NOT_FOUND", message=message)


def conflict(message: str, *, error_code: str = "CONFLICT") -> APIError:
    return APIError(status_code=409, error_code=error_code, message=message)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def _error_body(
    *, request: Request, error_code: str, message: str, details: Any | None = None
) -> dict[str, Any]:
    error: dict[str, Any] = {"message": message, "code": error_code}
    if details is not None:
        error["details"] = details
    return {
        "status": "error",
        "error": error,
        "request_id": _request_id(request),
    }


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "API error method=%s path=%s request_id=%s code=%s",
                request.method,
                request.url.path,
                _request_id(request),
                exc.error_code,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(
            "bad request error method=%s path=%s request_id=%s",
            request.method,
            request.url.path,
            _request_id(request),
        )
        return JSONResponse(
            status_code=400,
            content=_error_body(
                request=request,
                error_code="VALIDATION_ERROR",
                message="Invalid request parameters.",
                details=[
                    {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                    for error in exc.errors()
                ],
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code="HTTP_ERROR",
                message=str(exc.detail),
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DatabaseTimeoutError)
    async def database_timeout_handler(request: Request, exc: DatabaseTimeoutError) -> JSONResponse:
        logger.error(
            "storage timeout method=%s path=%s request_id=%s operation=%s",
            request.method,
            request.url.path,
            _request_id(request),
            exc.operation,
        )
        return JSONResponse(
            status_code=503,
            content=_error_body(
                request=request,
                error_code="TIMEOUT",
                message="The server took too long to process your request.",
            ),
        )

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
        logger.error(
            "storage error method=%s path=%s request_id=%s operation=%s cause=%s",
            request.method,
            request.url.path,
            _request_id(request),
            exc.operation,
            exc.__cause__,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request=request,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered a problem and could not process your request.",
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "internal server error method=%s path=%s request_id=%s",
            request.method,
            request.url.path,
            _request_id(request),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request=request,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered a problem and could not process your request.",
            ),
        )
