"""
Storage Services Package

Provides the abstract storage interfaces and the JSON file implementation:
one array per collection in a single local directory.
"""

from finance_monitor.services.storage.interface import (
    CASCADE_RULES,
    CascadeRule,
    DuplicateError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    RecordStorageInterface,
    StorageError,
    StorageWriteError,
    UserStorageInterface,
)
from finance_monitor.services.storage.json_store import (
    COLLECTIONS,
    JsonFileClient,
    JsonRecordStorage,
)
from finance_monitor.services.storage.users import JsonUserStorage
from finance_monitor.services.storage.finance import FinanceStorage

__all__ = [
    # Interfaces
    "CASCADE_RULES",
    "CascadeRule",
    "RecordStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "DuplicateError",
    "DuplicateIdentityError",
    "InvalidCredentialsError",
    "StorageError",
    "StorageWriteError",
    # JSON implementation
    "COLLECTIONS",
    "FinanceStorage",
    "JsonFileClient",
    "JsonRecordStorage",
    "JsonUserStorage",
]
