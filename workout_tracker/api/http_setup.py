"""HTTP middleware and exception handler wiring for the FastAPI app."""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from workout_tracker.api.contracts import ApiErrorResponse
from workout_tracker.api.errors import (
    ApiErrorCode,
    api_error_from_domain,
    to_error_payload,
)
from workout_tracker.core.config import AppConfig
from workout_tracker.core.errors import WorkoutTrackerError
from workout_tracker.core.logging import set_correlation_id

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}

CORRELATION_HEADERS = ("x-request-id", "x-correlation-id")


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the ``{error_code, message}`` envelope."""
    body = ApiErrorResponse(error_code=error_code, message=message)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(), headers=headers
    )


def _request_extra(request: Request, status_code: int) -> dict[str, object]:
    extra: dict[str, object] = {
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
    }
    user = getattr(request.state, "user", None)
    if user is not None:
        extra["user_id"] = user.user_id
    return extra


def _declared_length(request: Request) -> int:
    raw = request.headers.get("content-length", "")
    try:
        return int(raw) if raw else 0
    except ValueError:
        return 0


def register_http_middleware(
    app: FastAPI, *, config: AppConfig, logger: logging.Logger
) -> None:
    """Attach request size limiting, correlation ids and security headers."""
    max_bytes = config.security.request_max_bytes

    @app.middleware("http")
    async def request_size_limit_middleware(request: Request, call_next):
        if _declared_length(request) > max_bytes:
            return error_response(
                413,
                ApiErrorCode.REQUEST_TOO_LARGE,
                f"Request size exceeds configured limit ({max_bytes} bytes).",
            )
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = next(
            (request.headers[name] for name in CORRELATION_HEADERS if request.headers.get(name)),
            uuid.uuid4().hex,
        )
        set_correlation_id(correlation_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = correlation_id
        response.headers.update(SECURITY_HEADERS)
        logger.info(
            "request_completed", extra=_request_extra(request, response.status_code)
        )
        return response


def register_exception_handlers(app: FastAPI, *, logger: logging.Logger) -> None:
    """Map domain, HTTP and unexpected failures onto the error envelope."""

    @app.exception_handler(WorkoutTrackerError)
    async def handle_domain_error(
        request: Request, exc: WorkoutTrackerError
    ) -> JSONResponse:
        api_error = api_error_from_domain(exc)
        payload = to_error_payload(api_error.detail, api_error.status_code)
        logger.warning(
            "domain_error:%s",
            type(exc).__name__,
            extra=_request_extra(request, api_error.status_code),
        )
        return error_response(api_error.status_code, **payload)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        payload = to_error_payload(exc.detail, exc.status_code)
        logger.warning("http_exception", extra=_request_extra(request, exc.status_code))
        return error_response(
            exc.status_code, **payload, headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_exception", extra=_request_extra(request, 422))
        return error_response(422, ApiErrorCode.VALIDATION_ERROR, str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("unexpected_exception", extra=_request_extra(request, 500))
        return error_response(
            500, ApiErrorCode.INTERNAL_SERVER_ERROR, "Internal server error"
        )
