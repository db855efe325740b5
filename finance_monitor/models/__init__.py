"""
Data Models Package

Pydantic models for every persisted record, the storage result type,
query results and audit events.
"""

from finance_monitor.models.records import (
    DEFAULT_CATEGORIES,
    Bill,
    Category,
    CategoryExpense,
    Event,
    Goal,
    Milestone,
    MonthlyTotals,
    Note,
    RecordModel,
    StorageFailure,
    StorageResult,
    Task,
    TaskPriority,
    Transaction,
    TransactionType,
    User,
    UserSettings,
    parse_moment,
    utc_now,
)
from finance_monitor.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "DEFAULT_CATEGORIES",
    "Bill",
    "Category",
    "Event",
    "Goal",
    "Milestone",
    "Note",
    "RecordModel",
    "Task",
    "TaskPriority",
    "Transaction",
    "TransactionType",
    "User",
    "UserSettings",
    "parse_moment",
    "utc_now",
    # Results
    "CategoryExpense",
    "MonthlyTotals",
    "StorageFailure",
    "StorageResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
