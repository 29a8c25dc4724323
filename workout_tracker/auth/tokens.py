"""Access token signing/validation and opaque refresh token generation."""

from __future__ import annotations

import base64
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from workout_tracker.auth.models import AccessClaims, Account
from workout_tracker.core.clock import Clock, utc_now
from workout_tracker.core.errors import ConfigError, InvalidTokenError

ACCESS_TOKEN_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 192
REQUIRED_CLAIMS = ["sub", "email", "exp", "iss"]


class TokenEngine:
    """Issues HS256 access tokens and random refresh tokens.

    The signing key is fixed for the lifetime of the engine. Validation only
    ever accepts ``HS256``; a token announcing any other algorithm (``none``,
    ``RS256`` with the secret as a public key, ...) is rejected before its
    signature is looked at.

    ``clock`` only stamps ``iat`` and ``exp`` at issue time. Validation always
    judges those claims against the wall clock with zero leeway.
    """

    def __init__(
        self,
        *,
        secret_key: str,
        issuer: str,
        access_token_ttl: timedelta = timedelta(minutes=30),
        clock: Clock = utc_now,
    ) -> None:
        if not secret_key:
            raise ConfigError("Token signing secret is empty")
        self._key = secret_key.encode("utf-8")
        self._issuer = issuer
        self._access_token_ttl = access_token_ttl
        self._clock = clock

    @property
    def access_token_ttl(self) -> timedelta:
        return self._access_token_ttl

    def issue_access_token(self, account: Account) -> str:
        now = self._clock()
        payload = {
            "iss": self._issuer,
            "sub": account.user_id,
            "email": account.email,
            "username": account.username,
            "iat": now,
            "exp": now + self._access_token_ttl,
        }
        return jwt.encode(payload, self._key, algorithm=ACCESS_TOKEN_ALGORITHM)

    @staticmethod
    def issue_refresh_token() -> str:
        """Return 192 random bytes as standard base64 (256 characters)."""
        return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")

    def validate_live(self, token: str) -> AccessClaims:
        """Validate signature, claims and expiry against wall-clock time, zero leeway."""
        return self._decode(token, verify_exp=True)

    def validate_expired(self, token: str) -> AccessClaims:
        """Validate signature and claims while ignoring expiry.

        Used by refresh rotation, where the access token has usually lapsed.
        """
        return self._decode(token, verify_exp=False)

    def _decode(self, token: str, *, verify_exp: bool) -> AccessClaims:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("Malformed token") from exc
        if header.get("alg") != ACCESS_TOKEN_ALGORITHM:
            raise InvalidTokenError("Unexpected token algorithm")

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._key,
                algorithms=[ACCESS_TOKEN_ALGORITHM],
                issuer=self._issuer,
                leeway=0,
                options={"verify_exp": verify_exp, "require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("Invalid token") from exc

        user_id = str(payload.get("sub") or "")
        email = str(payload.get("email") or "")
        if not user_id or not email:
            raise InvalidTokenError("Token is missing identity claims")
        return AccessClaims(
            user_id=user_id,
            email=email,
            username=str(payload.get("username") or ""),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), timezone.utc),
        )
