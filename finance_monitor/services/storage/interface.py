"""
Abstract Storage Interface

We define abstract interfaces for storage operations. This allows us to:
1. Keep the JSON file store behind a small contract
2. Use a different backend in tests or later on
3. Keep the service bridge decoupled from how rows are persisted

The interface is intentionally simple - we're not building a database.
One RecordStorageInterface per collection, one UserStorageInterface.

Outcome conventions:
- Lookup misses and write failures on update/delete/status changes come back
  as a falsy StorageResult (NOT_FOUND / IO_FAILURE), never as exceptions
- Credential and identity problems raise (InvalidCredentialsError,
  DuplicateIdentityError)
- A failed write while creating a record raises StorageWriteError
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from finance_monitor.models.records import RecordModel, StorageResult


RecordT = TypeVar("RecordT", bound=RecordModel)


class CascadeRule(BaseModel):
    """Deleting a parent row removes child rows whose foreign key matches."""

    child_collection: str
    foreign_key: str


# Every relational rule in the system. Nothing else cascades: deleting a
# user leaves their records in place.
CASCADE_RULES: dict[str, tuple[CascadeRule, ...]] = {
    "goals": (
        CascadeRule(child_collection="milestones", foreign_key="goalId"),
    ),
}


class RecordStorageInterface(ABC, Generic[RecordT]):
    """
    Abstract interface for one collection of owned records.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def list_for_owner(self, owner_id: str) -> list[RecordT]:
        """
        List the owner's records in the collection's canonical order.

        Args:
            owner_id: userId (or goalId for milestones)

        Returns:
            Matching records; empty when the owner has none
        """
        pass

    @abstractmethod
    def get(self, record_id: str) -> Optional[RecordT]:
        """
        Retrieve a record by its ID.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    def add(self, owner_id: str, fields: dict[str, Any]) -> RecordT:
        """
        Create a record with a fresh ID and creation timestamp.

        Args:
            owner_id: Owner stamped onto the record
            fields: Wire or python field names; any ID given is ignored

        Returns:
            The stored record

        Raises:
            DuplicateError: If the generated ID is already taken
            StorageWriteError: If the collection could not be saved
            pydantic.ValidationError: If the fields don't form a valid record
        """
        pass

    @abstractmethod
    def update(
        self,
        record_id: str,
        fields: dict[str, Any],
        owner_id: Optional[str] = None,
    ) -> StorageResult:
        """
        Merge fields over an existing record and stamp updatedAt.

        Args:
            record_id: Record to change
            fields: Fields to overwrite (fields cannot be removed)
            owner_id: If given, records of other owners count as missing

        Returns:
            Truthy result holding the merged record, or NOT_FOUND / IO_FAILURE
        """
        pass

    @abstractmethod
    def mark(
        self,
        record_id: str,
        flag_field: str,
        stamp_field: str,
        owner_id: Optional[str] = None,
    ) -> StorageResult:
        """
        Set a boolean flag to true and stamp when it happened.

        Used for completing tasks and milestones, paying bills,
        achieving goals.
        """
        pass

    @abstractmethod
    def delete(self, record_id: str, owner_id: Optional[str] = None) -> StorageResult:
        """
        Delete a record by ID and apply cascade rules.

        Deleting an ID that does not exist still succeeds.
        """
        pass


class UserStorageInterface(ABC):
    """
    Abstract interface for user accounts.

    Returned users never include the password hash.
    """

    @abstractmethod
    def register_user(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str = "",
    ) -> dict[str, Any]:
        """
        Create a user with a salted, hashed password.

        Raises:
            DuplicateIdentityError: If username or email already exists
        """
        pass

    @abstractmethod
    def login_user(self, identity: str, password: str) -> dict[str, Any]:
        """
        Authenticate by username or email.

        Raises:
            InvalidCredentialsError: Same error for unknown user and bad password
        """
        pass

    @abstractmethod
    def change_password(
        self,
        user_id: str,
        old_password: str,
        new_password: str,
    ) -> StorageResult:
        """
        Replace the password hash after verifying the old password.

        Raises:
            InvalidCredentialsError: If the old password does not verify
        """
        pass

    @abstractmethod
    def update_user_profile(self, user_id: str, fields: dict[str, Any]) -> StorageResult:
        """Merge non-credential fields into the user record."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[dict[str, Any]]:
        """Public view of a user, or None."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class DuplicateIdentityError(DuplicateError):
    """Username or email already registered."""
    pass


class InvalidCredentialsError(StorageError):
    """Login or password check failed. Never says which part was wrong."""
    pass


class StorageWriteError(StorageError):
    """A collection file could not be written."""
    pass
