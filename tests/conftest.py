"""
Shared fixtures.

Every test gets its own data directory under tmp_path and a cheap bcrypt
cost so hashing stays fast.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from finance_monitor.bridge import ServiceBridge, register_handlers
from finance_monitor.config import AppSettings, StorageSettings
from finance_monitor.queries import QueryExecutor
from finance_monitor.services.storage import FinanceStorage


FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage_settings(tmp_path):
    return StorageSettings(
        data_dir=tmp_path / "data",
        password_hash_rounds=4,
        write_retry_attempts=1,
        write_retry_wait_seconds=0,
    )


@pytest.fixture
def storage(storage_settings):
    return FinanceStorage(settings=storage_settings)


@pytest.fixture
def executor(storage):
    return QueryExecutor(storage, now_provider=lambda: FIXED_NOW)


@pytest.fixture
def bridge(storage, executor):
    bridge = ServiceBridge()
    register_handlers(bridge, storage, executor, AppSettings(upcoming_window_days=7))
    return bridge


@pytest.fixture
def call(bridge):
    """Invoke a channel synchronously and return the envelope."""
    def _call(channel, payload=None):
        return asyncio.run(bridge.invoke(channel, payload))
    return _call
