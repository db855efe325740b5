"""
Audit Models for Finance Monitor

Every mutation that crosses the service bridge, and every storage failure,
produces an audit event. Events are written to the local structured log.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Users
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"
    LOGIN_FAILED = "login_failed"
    PASSWORD_CHANGED = "password_changed"
    PROFILE_UPDATED = "profile_updated"

    # Records
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    STATUS_CHANGED = "status_changed"
    CASCADE_APPLIED = "cascade_applied"

    # Storage
    STORAGE_INITIALIZED = "storage_initialized"
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"
    ROW_SKIPPED = "row_skipped"

    # Bridge
    BRIDGE_CALL_FAILED = "bridge_call_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    entity_type is the collection name ("transactions", "users", ...),
    entity_id the record id when there is one.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together the events of one bridge call"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created("tasks", task_id)
        event = AuditEventBuilder.storage_write_failed("bills", str(exc))
    """

    @staticmethod
    def user_registered(
        user_id: str,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="users",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"User registered: {username}",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def user_logged_in(
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            entity_type="users",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        identity: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # The identity is logged, never the password.
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="users",
            correlation_id=correlation_id,
            description="Login failed: invalid credentials",
            details={"identity": identity},
            is_user_action=True,
        )

    @staticmethod
    def password_changed(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSWORD_CHANGED,
            entity_type="users",
            entity_id=user_id,
            description="Password changed",
            is_user_action=True,
        )

    @staticmethod
    def profile_updated(user_id: str, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="users",
            entity_id=user_id,
            description="Profile updated",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def record_created(
        collection: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type=collection,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record added to {collection}",
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        collection: str,
        record_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=collection,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record updated in {collection}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        collection: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=collection,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record deleted from {collection}",
            is_user_action=True,
        )

    @staticmethod
    def status_changed(
        collection: str,
        record_id: str,
        flag: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_CHANGED,
            entity_type=collection,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{flag} set on {collection} record",
            details={"flag": flag},
            is_user_action=True,
        )

    @staticmethod
    def cascade_applied(
        parent_collection: str,
        parent_id: str,
        child_collection: str,
        removed: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CASCADE_APPLIED,
            entity_type=parent_collection,
            entity_id=parent_id,
            description=f"Removed {removed} dependent rows from {child_collection}",
            details={"child_collection": child_collection, "removed": removed},
        )

    @staticmethod
    def storage_initialized(
        data_dir: str,
        created: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_INITIALIZED,
            description=f"Storage ready at {data_dir}",
            details={"data_dir": data_dir, "created_files": created},
        )

    @staticmethod
    def storage_read_failed(
        collection: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            description=f"Could not read {collection}; treating it as empty",
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(
        collection: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            description=f"Could not write {collection}",
            error_message=error_message,
        )

    @staticmethod
    def row_skipped(
        collection: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROW_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            description=f"Skipped malformed row in {collection}",
            error_message=error_message,
        )

    @staticmethod
    def bridge_call_failed(
        channel: str,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BRIDGE_CALL_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Call failed on channel {channel}",
            details={"channel": channel, "error_type": error_type},
            error_message=error_message,
        )
