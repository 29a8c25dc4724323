"""Authentication API router."""

from __future__ import annotations

from fastapi import APIRouter, Request

from workout_tracker.api.contracts import (
    ApiErrorResponse,
    AuthMeResponse,
    AuthSessionResponse,
    LogoutResponse,
    SignUpResponse,
)
from workout_tracker.api.errors import ApiError, ApiErrorCode
from workout_tracker.auth.models import (
    AccessClaims,
    LoginRequest,
    RefreshRequest,
    SignUpRequest,
)
from workout_tracker.auth.service import AuthService


def current_user(request: Request) -> AccessClaims:
    """Return claims attached by the auth middleware, or raise 401."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise ApiError(
            status_code=401,
            error_code=ApiErrorCode.AUTH_MISSING_TOKEN,
            message="Missing bearer token",
        )
    return user


def create_auth_router(service: AuthService) -> APIRouter:
    """Build authentication router with signup/login/refresh/logout/me endpoints."""
    router = APIRouter(tags=["auth"])

    @router.post(
        "/api/auth/signup",
        response_model=SignUpResponse,
        status_code=201,
        responses={
            400: {"model": ApiErrorResponse},
            409: {"model": ApiErrorResponse},
        },
    )
    def signup(req: SignUpRequest) -> SignUpResponse:
        """Register a new account."""
        profile = service.sign_up(
            username=req.username,
            first_name=req.first_name,
            last_name=req.last_name,
            email=req.email,
            password=req.password,
        )
        return SignUpResponse(user=profile)

    @router.post(
        "/api/auth/login",
        response_model=AuthSessionResponse,
        responses={401: {"model": ApiErrorResponse}},
    )
    def login(req: LoginRequest) -> AuthSessionResponse:
        """Authenticate user and return token pair."""
        session = service.login(req.email, req.password)
        if session is None:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_INVALID_CREDENTIALS,
                message="Invalid email or password",
            )
        return AuthSessionResponse(**session.model_dump())

    @router.post(
        "/api/auth/refresh",
        response_model=AuthSessionResponse,
        responses={401: {"model": ApiErrorResponse}},
    )
    def refresh(req: RefreshRequest) -> AuthSessionResponse:
        """Rotate refresh token and issue new session tokens."""
        session = service.refresh(req.access_token, req.refresh_token)
        if session is None:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_REFRESH_REJECTED,
                message="Refresh token is invalid or expired",
            )
        return AuthSessionResponse(**session.model_dump())

    @router.post(
        "/api/auth/logout",
        response_model=LogoutResponse,
        responses={401: {"model": ApiErrorResponse}},
    )
    def logout(request: Request) -> LogoutResponse:
        """Invalidate the caller's stored refresh token."""
        service.logout(current_user(request).user_id)
        return LogoutResponse(status="ok")

    @router.get(
        "/api/auth/me",
        response_model=AuthMeResponse,
        responses={401: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def me(request: Request) -> AuthMeResponse:
        """Return the profile of the authenticated caller."""
        return AuthMeResponse(user=service.get_profile(current_user(request).user_id))

    return router
