"""Authentication service: signup, login, refresh rotation and logout."""

from __future__ import annotations

import hmac
import logging
import uuid
from datetime import datetime, timedelta
from typing import Protocol

from workout_tracker.auth.models import (
    AccessClaims,
    Account,
    AccountProfile,
    TokenPair,
)
from workout_tracker.auth.tokens import TokenEngine
from workout_tracker.auth.validators import (
    validate_email,
    validate_password,
    validate_required,
    validate_username,
)
from workout_tracker.core.clock import Clock, utc_now
from workout_tracker.core.errors import (
    ConflictError,
    InvalidTokenError,
    NotFoundError,
)
from workout_tracker.core.security import PasswordHasher

LOGGER = logging.getLogger(__name__)


class AccountRepositoryProtocol(Protocol):
    """Credential store operations used by the auth service."""

    def add(self, account: Account) -> None:
        """Insert a new account; raise ``ConflictError`` if the email is taken."""

    def get_by_id(self, user_id: str) -> Account | None:
        """Return the account with ``user_id``, or ``None``."""

    def get_by_email(self, email: str) -> Account | None:
        """Return the account registered under ``email``, or ``None``."""

    def update(self, account: Account) -> None:
        """Persist the mutable fields of ``account``."""

    def rotate_refresh_token(
        self,
        *,
        user_id: str,
        expected_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Replace the refresh token if it still matches; report success."""


class AuthService:
    """Account lifecycle over a credential store, hasher and token engine."""

    def __init__(
        self,
        *,
        repo: AccountRepositoryProtocol,
        tokens: TokenEngine,
        hasher: PasswordHasher,
        refresh_token_ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ) -> None:
        self._repo = repo
        self._tokens = tokens
        self._hasher = hasher
        self._refresh_token_ttl = refresh_token_ttl
        self._clock = clock

    def sign_up(
        self,
        *,
        username: str,
        first_name: str,
        last_name: str | None,
        email: str,
        password: str,
    ) -> AccountProfile:
        """Register a new account.

        All input checks run before the store is consulted. Raises
        ``ValidationError`` for bad input and ``ConflictError`` when the email
        is already registered.
        """
        validate_username(username)
        validate_password(password)
        first_name = validate_required(first_name, "First name")
        normalized_email = validate_email(email)

        if self._repo.get_by_email(normalized_email) is not None:
            LOGGER.warning("signup_rejected_duplicate_email")
            raise ConflictError("An account with this email already exists.")

        account = Account(
            user_id=uuid.uuid4().hex,
            username=username,
            first_name=first_name,
            last_name=(last_name or "").strip() or None,
            email=normalized_email,
            password_hash=self._hasher.hash(password),
            created_at=self._clock(),
        )
        self._repo.add(account)
        LOGGER.info("account_registered", extra={"user_id": account.user_id})
        return account.profile()

    def login(self, email: str, password: str) -> TokenPair | None:
        """Return a fresh token pair, or ``None`` for bad credentials.

        Unknown emails and wrong passwords are indistinguishable to the
        caller, including in how long the check takes.
        """
        account = self._repo.get_by_email(email.strip().lower())
        if account is None:
            self._hasher.burn(password)
            LOGGER.warning("login_rejected")
            return None
        if not self._hasher.verify(password, account.password_hash):
            LOGGER.warning("login_rejected")
            return None

        access_token = self._tokens.issue_access_token(account)
        refresh_token = self._tokens.issue_refresh_token()
        account = account.model_copy(
            update={
                "refresh_token": refresh_token,
                "refresh_token_expires_at": self._clock() + self._refresh_token_ttl,
            }
        )
        self._repo.update(account)
        LOGGER.info("login_succeeded", extra={"user_id": account.user_id})
        return self._pair(access_token, refresh_token)

    def refresh(self, access_token: str, refresh_token: str) -> TokenPair | None:
        """Rotate the token pair.

        The access token may be expired but must carry a valid signature;
        otherwise ``InvalidTokenError`` is raised. Returns ``None`` when the
        refresh token is unknown, stale or expired. The presented refresh
        token stops working as soon as this call succeeds.
        """
        claims = self._tokens.validate_expired(access_token)
        if not claims.email:
            raise InvalidTokenError("Token is missing the email claim")

        account = self._repo.get_by_email(claims.email)
        now = self._clock()
        if account is None or not account.refresh_token:
            LOGGER.warning("refresh_rejected")
            return None
        if not hmac.compare_digest(
            account.refresh_token.encode("utf-8"), refresh_token.encode("utf-8")
        ):
            LOGGER.warning("refresh_rejected", extra={"user_id": account.user_id})
            return None
        expires_at = account.refresh_token_expires_at
        if expires_at is None or expires_at <= now:
            LOGGER.warning("refresh_rejected_expired", extra={"user_id": account.user_id})
            return None

        new_access_token = self._tokens.issue_access_token(account)
        new_refresh_token = self._tokens.issue_refresh_token()
        rotated = self._repo.rotate_refresh_token(
            user_id=account.user_id,
            expected_token=refresh_token,
            new_token=new_refresh_token,
            new_expires_at=now + self._refresh_token_ttl,
            now=now,
        )
        if not rotated:
            # A concurrent refresh with the same token got there first.
            LOGGER.warning("refresh_rejected_race", extra={"user_id": account.user_id})
            return None

        LOGGER.info("refresh_rotated", extra={"user_id": account.user_id})
        return self._pair(new_access_token, new_refresh_token)

    def logout(self, user_id: str) -> None:
        """Drop the stored refresh token so the session cannot be renewed."""
        account = self._repo.get_by_id(user_id)
        if account is None or account.refresh_token is None:
            return
        self._repo.update(
            account.model_copy(
                update={"refresh_token": None, "refresh_token_expires_at": None}
            )
        )
        LOGGER.info("logout_succeeded", extra={"user_id": user_id})

    def verify_access_token(self, token: str) -> AccessClaims:
        return self._tokens.validate_live(token)

    def get_profile(self, user_id: str) -> AccountProfile:
        account = self._repo.get_by_id(user_id)
        if account is None:
            raise NotFoundError("Account not found.")
        return account.profile()

    def _pair(self, access_token: str, refresh_token: str) -> TokenPair:
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=int(self._tokens.access_token_ttl.total_seconds()),
        )
