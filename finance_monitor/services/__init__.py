"""Services package."""

from finance_monitor.services.storage import (
    DuplicateError,
    DuplicateIdentityError,
    FinanceStorage,
    InvalidCredentialsError,
    JsonFileClient,
    JsonRecordStorage,
    JsonUserStorage,
    StorageError,
    StorageWriteError,
)

__all__ = [
    "DuplicateError",
    "DuplicateIdentityError",
    "FinanceStorage",
    "InvalidCredentialsError",
    "JsonFileClient",
    "JsonRecordStorage",
    "JsonUserStorage",
    "StorageError",
    "StorageWriteError",
]
