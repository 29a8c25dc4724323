"""HTTP middleware that enforces auth on protected API routes."""

from __future__ import annotations

from typing import Callable

from fastapi import Request

from workout_tracker.api.errors import ApiErrorCode
from workout_tracker.api.http_setup import error_response
from workout_tracker.auth.service import AuthService
from workout_tracker.core.errors import InvalidTokenError

PUBLIC_PATHS = frozenset(
    {
        "/api/health",
        "/api/auth/signup",
        "/api/auth/login",
        "/api/auth/refresh",
    }
)

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def extract_bearer_token(authorization: str | None) -> str:
    """Extract bearer token from authorization header value."""
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def create_auth_middleware(service: AuthService) -> Callable:
    """Create middleware function that validates access tokens."""

    async def auth_middleware(request: Request, call_next: Callable):
        """Reject anonymous calls to protected API paths; attach claims otherwise."""
        path = request.url.path
        if not path.startswith("/api/") or path in PUBLIC_PATHS:
            return await call_next(request)

        token = extract_bearer_token(request.headers.get("authorization"))
        if not token:
            return error_response(
                401, ApiErrorCode.AUTH_MISSING_TOKEN, "Missing bearer token", _CHALLENGE
            )

        try:
            claims = service.verify_access_token(token)
        except InvalidTokenError as exc:
            return error_response(
                401, ApiErrorCode.AUTH_TOKEN_INVALID, exc.message, _CHALLENGE
            )

        request.state.user = claims
        return await call_next(request)

    return auth_middleware
