"""
Application Wiring

Builds the components a running monitor needs, in dependency order:

    settings -> logging -> FinanceStorage -> QueryExecutor -> ServiceBridge

The UI process only ever talks to the bridge; storage and queries sit
behind it.
"""

from pathlib import Path
from typing import Optional

from finance_monitor.audit import AuditLogger, configure_logging
from finance_monitor.bridge.dispatcher import ServiceBridge
from finance_monitor.bridge.handlers import register_handlers
from finance_monitor.config import Settings, get_settings
from finance_monitor.queries import QueryExecutor
from finance_monitor.services.storage import FinanceStorage


def create_app_components(
    data_dir: Optional[Path] = None,
    settings: Optional[Settings] = None,
    now_provider=None,
) -> tuple[ServiceBridge, FinanceStorage, QueryExecutor]:
    """
    Factory function to create all application components.

    Args:
        data_dir: Overrides the configured data directory
        settings: Overrides the cached environment settings
        now_provider: Clock for the upcoming-item queries

    Returns:
        (bridge, storage, executor)

    Raises:
        StorageWriteError: If the data directory can't be initialized
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    audit_logger = AuditLogger()
    storage = FinanceStorage(
        data_dir=data_dir,
        settings=settings.storage,
        audit_logger=audit_logger,
    )
    executor = QueryExecutor(storage, now_provider=now_provider)

    bridge = ServiceBridge(audit_logger=AuditLogger("finance_monitor.bridge"))
    register_handlers(bridge, storage, executor, app_settings, audit_logger=audit_logger)

    return bridge, storage, executor
