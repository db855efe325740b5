"""
User Accounts on JSON Storage

Passwords are hashed with bcrypt (salted, adaptive cost) and only the hash
is stored. Every user returned to callers goes through User.public(), which
strips the hash.

Login failures use one message for every cause, so a caller cannot tell an
unknown username from a wrong password.
"""

from typing import Any, Optional
from uuid import uuid4

import bcrypt
from pydantic import ValidationError

from finance_monitor.audit import AuditLogger
from finance_monitor.models.audit import AuditEventBuilder
from finance_monitor.models.records import StorageResult, User, utc_now
from finance_monitor.services.storage.interface import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    StorageWriteError,
    UserStorageInterface,
)
from finance_monitor.services.storage.json_store import JsonFileClient


INVALID_CREDENTIALS = "Invalid credentials"
WRONG_CURRENT_PASSWORD = "Current password is incorrect"

# Keys update_user_profile refuses to touch
PROTECTED_PROFILE_KEYS = ("userId", "passwordHash", "password", "createdAt")


class JsonUserStorage(UserStorageInterface):
    """User accounts stored in users.json."""

    collection = "users"

    def __init__(
        self,
        client: JsonFileClient,
        hash_rounds: int = 10,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._client = client
        self._rounds = hash_rounds
        self._audit = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Password helpers
    # -------------------------------------------------------------------------

    def _hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def _verify_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Stored hash is not a valid bcrypt string
            return False

    # -------------------------------------------------------------------------
    # Row helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _find_index(rows: list[Any], key: str, value: str) -> Optional[int]:
        for index, row in enumerate(rows):
            if isinstance(row, dict) and row.get(key) == value:
                return index
        return None

    def _parse(self, row: dict[str, Any]) -> Optional[User]:
        try:
            return User.model_validate(row)
        except ValidationError as e:
            self._audit.log_row_skipped(self.collection, str(e))
            return None

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def register_user(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str = "",
    ) -> dict[str, Any]:
        rows = self._client.read(self.collection)

        if self._find_index(rows, "username", username) is not None:
            raise DuplicateIdentityError("Username already exists")
        if self._find_index(rows, "email", email) is not None:
            raise DuplicateIdentityError("Email already exists")

        now = utc_now()
        user = User(
            user_id=uuid4().hex,
            username=username,
            email=email,
            full_name=full_name or "",
            password_hash=self._hash_password(password),
            created_at=now,
            updated_at=now,
        )
        rows.append(user.to_row())

        if not self._client.write(self.collection, rows):
            raise StorageWriteError("Could not save the new user")

        self._audit.log(AuditEventBuilder.user_registered(user.user_id, username))
        return user.public()

    def login_user(self, identity: str, password: str) -> dict[str, Any]:
        rows = self._client.read(self.collection)

        user = None
        for row in rows:
            if isinstance(row, dict) and identity in (row.get("username"), row.get("email")):
                user = self._parse(row)
                break

        if user is None or not self._verify_password(password, user.password_hash):
            self._audit.log(AuditEventBuilder.login_failed(identity))
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        self._audit.log(AuditEventBuilder.user_logged_in(user.user_id))
        return user.public()

    def change_password(
        self,
        user_id: str,
        old_password: str,
        new_password: str,
    ) -> StorageResult:
        rows = self._client.read(self.collection)
        index = self._find_index(rows, "userId", user_id)
        user = self._parse(rows[index]) if index is not None else None

        if user is None or not self._verify_password(old_password, user.password_hash):
            raise InvalidCredentialsError(WRONG_CURRENT_PASSWORD)

        user.password_hash = self._hash_password(new_password)
        user.updated_at = utc_now()
        rows[index] = user.to_row()

        if not self._client.write(self.collection, rows):
            return StorageResult.io_failure("Could not save the new password")

        self._audit.log(AuditEventBuilder.password_changed(user_id))
        return StorageResult.success()

    def update_user_profile(self, user_id: str, fields: dict[str, Any]) -> StorageResult:
        """
        Merge profile fields (full name, email, ...) into the user.

        A username or email already held by another user is a CONFLICT.
        """
        rows = self._client.read(self.collection)
        index = self._find_index(rows, "userId", user_id)
        if index is None:
            return StorageResult.not_found("User not found")

        changes = User.to_wire(fields)
        for key in PROTECTED_PROFILE_KEYS:
            changes.pop(key, None)
        for key, label in (("username", "Username"), ("email", "Email")):
            if key in changes and changes[key] != rows[index].get(key):
                if self._find_index(rows, key, changes[key]) is not None:
                    return StorageResult.conflict(f"{label} already exists")
        changes["updatedAt"] = utc_now()

        user = User.model_validate({**rows[index], **changes})
        rows[index] = user.to_row()

        if not self._client.write(self.collection, rows):
            return StorageResult.io_failure("Could not save the profile")

        self._audit.log(AuditEventBuilder.profile_updated(user_id, sorted(changes)))
        return StorageResult.success(user.public())

    def get_user(self, user_id: str) -> Optional[dict[str, Any]]:
        rows = self._client.read(self.collection)
        index = self._find_index(rows, "userId", user_id)
        if index is None:
            return None
        user = self._parse(rows[index])
        return user.public() if user else None
