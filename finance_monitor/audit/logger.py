"""
Audit Logger

Every mutation and every storage failure is logged as a structured event.
This provides:
1. Traceability of what changed in which collection
2. Debugging capability when a collection file goes bad
3. A record of failed logins

The audit logger:
- Writes through structlog to the stdlib logging tree (stderr), never stdout,
  since stdout carries the bridge protocol
- Never raises; a failure to log must not break the operation being logged
- Supports correlation IDs to tie together the events of one bridge call
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_monitor.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route log records to stderr at the given level."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )
    logging.getLogger().setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log at the level matching the
    event severity.
    """

    def __init__(self, logger_name: str = "finance_monitor.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be emitted.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (ValueError, TypeError, OSError):
            # Broken stream or unserializable detail; the caller carries on
            return False

        return True

    def log_record_created(
        self,
        collection: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_created(collection, record_id, correlation_id))

    def log_record_updated(
        self,
        collection: str,
        record_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_updated(collection, record_id, fields, correlation_id))

    def log_record_deleted(
        self,
        collection: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(collection, record_id, correlation_id))

    def log_status_changed(
        self,
        collection: str,
        record_id: str,
        flag: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.status_changed(collection, record_id, flag, correlation_id))

    def log_read_failed(self, collection: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_read_failed(collection, error_message))

    def log_write_failed(self, collection: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_write_failed(collection, error_message))

    def log_row_skipped(self, collection: str, error_message: str) -> None:
        self.log(AuditEventBuilder.row_skipped(collection, error_message))

    def log_bridge_failure(
        self,
        channel: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventBuilder.bridge_call_failed(
                channel=channel,
                error_type=type(error).__name__,
                error_message=str(error),
                correlation_id=correlation_id,
            )
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The bridge creates one per incoming call.
    """
    return uuid4()
