"""Repository for account records and their refresh token slot."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any

from pymongo.errors import DuplicateKeyError

from workout_tracker.auth.models import Account
from workout_tracker.core.clock import from_storage, to_storage
from workout_tracker.core.errors import ConflictError
from workout_tracker.core.storage import open_sqlite

_ACCOUNT_COLUMNS = (
    "user_id, username, first_name, last_name, email, password_hash, "
    "refresh_token, refresh_token_expires_at, created_at"
)


class AccountRepository:
    """Account store backed by MongoDB when a database is given, SQLite otherwise."""

    def __init__(
        self, *, database_path: Path | None = None, mongo_db: Any = None
    ) -> None:
        self._lock = Lock()
        self._connection: sqlite3.Connection | None = None
        self._mongo_accounts = None

        if mongo_db is not None:
            self._mongo_accounts = mongo_db["accounts"]
        elif database_path is not None:
            self._connection = open_sqlite(database_path)
        else:
            raise ValueError("AccountRepository needs database_path or mongo_db")

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Account:
        return Account(
            user_id=row["user_id"],
            username=row["username"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            refresh_token=row["refresh_token"],
            refresh_token_expires_at=from_storage(row["refresh_token_expires_at"]),
            created_at=from_storage(row["created_at"]),
        )

    def _sqlite(self) -> sqlite3.Connection:
        assert self._connection is not None
        return self._connection

    def add(self, account: Account) -> None:
        """Insert a new account, raising ``ConflictError`` on a taken email."""
        if self._mongo_accounts is not None:
            try:
                self._mongo_accounts.insert_one(account.model_dump())
            except DuplicateKeyError as exc:
                raise ConflictError("An account with this email already exists.") from exc
            return

        with self._lock:
            connection = self._sqlite()
            try:
                connection.execute(
                    f"INSERT INTO accounts({_ACCOUNT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        account.user_id,
                        account.username,
                        account.first_name,
                        account.last_name,
                        account.email,
                        account.password_hash,
                        account.refresh_token,
                        to_storage(account.refresh_token_expires_at),
                        to_storage(account.created_at),
                    ),
                )
                connection.commit()
            except sqlite3.IntegrityError as exc:
                connection.rollback()
                raise ConflictError("An account with this email already exists.") from exc

    def get_by_id(self, user_id: str) -> Account | None:
        if self._mongo_accounts is not None:
            doc = self._mongo_accounts.find_one({"user_id": user_id}, {"_id": 0})
            return Account.model_validate(doc) if doc else None

        with self._lock:
            row = self._sqlite().execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return self._from_row(row) if row else None

    def get_by_email(self, email: str) -> Account | None:
        key = email.strip().lower()
        if self._mongo_accounts is not None:
            doc = self._mongo_accounts.find_one({"email": key}, {"_id": 0})
            return Account.model_validate(doc) if doc else None

        with self._lock:
            row = self._sqlite().execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = ?",
                (key,),
            ).fetchone()
        return self._from_row(row) if row else None

    def update(self, account: Account) -> None:
        """Overwrite the mutable fields of an existing account."""
        if self._mongo_accounts is not None:
            doc = account.model_dump(exclude={"user_id", "created_at"})
            self._mongo_accounts.update_one({"user_id": account.user_id}, {"$set": doc})
            return

        with self._lock:
            connection = self._sqlite()
            connection.execute(
                """
                UPDATE accounts SET
                  username = ?, first_name = ?, last_name = ?, email = ?,
                  password_hash = ?, refresh_token = ?, refresh_token_expires_at = ?
                WHERE user_id = ?
                """,
                (
                    account.username,
                    account.first_name,
                    account.last_name,
                    account.email,
                    account.password_hash,
                    account.refresh_token,
                    to_storage(account.refresh_token_expires_at),
                    account.user_id,
                ),
            )
            connection.commit()

    def rotate_refresh_token(
        self,
        *,
        user_id: str,
        expected_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Swap the stored refresh token only if it still equals ``expected_token``.

        Returns ``False`` when another rotation already replaced it or it has
        expired, so at most one of several concurrent refreshes wins.
        """
        if self._mongo_accounts is not None:
            result = self._mongo_accounts.update_one(
                {
                    "user_id": user_id,
                    "refresh_token": expected_token,
                    "refresh_token_expires_at": {"$gt": now},
                },
                {
                    "$set": {
                        "refresh_token": new_token,
                        "refresh_token_expires_at": new_expires_at,
                    }
                },
            )
            return result.modified_count == 1

        with self._lock:
            connection = self._sqlite()
            cursor = connection.execute(
                """
                UPDATE accounts SET refresh_token = ?, refresh_token_expires_at = ?
                WHERE user_id = ? AND refresh_token = ? AND refresh_token_expires_at > ?
                """,
                (
                    new_token,
                    to_storage(new_expires_at),
                    user_id,
                    expected_token,
                    to_storage(now),
                ),
            )
            connection.commit()
            return cursor.rowcount == 1

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
