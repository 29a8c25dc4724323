"""Pydantic models for the authentication domain."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Account(BaseModel):
    """Persisted account record."""

    user_id: str
    username: str
    first_name: str
    last_name: str | None = None
    email: str
    password_hash: str
    refresh_token: str | None = None
    refresh_token_expires_at: datetime | None = None
    created_at: datetime

    def profile(self) -> "AccountProfile":
        return AccountProfile(
            user_id=self.user_id,
            username=self.username,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            created_at=self.created_at,
        )


class AccountProfile(BaseModel):
    """Public view of an account; never carries credentials."""

    user_id: str
    username: str
    first_name: str
    last_name: str | None = None
    email: str
    created_at: datetime


class SignUpRequest(BaseModel):
    """Signup request payload."""

    username: str
    first_name: str
    last_name: str | None = None
    email: str
    password: str


class LoginRequest(BaseModel):
    """Login request payload."""

    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    """Refresh request payload: the (possibly expired) pair held by the client."""

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class AccessClaims(BaseModel):
    """Identity carried by a validated access token."""

    user_id: str
    email: str
    username: str
    expires_at: datetime
