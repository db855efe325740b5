"""
Tests for Finance Monitor models

Test strategy:
1. Unit tests for record models (aliases, coercion, serialization)
2. Result and audit event models
3. No filesystem access here (see test_storage.py)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from finance_monitor.models.records import (
    DEFAULT_CATEGORIES,
    Bill,
    Category,
    Note,
    StorageFailure,
    StorageResult,
    Task,
    TaskPriority,
    Transaction,
    TransactionType,
    User,
    parse_moment,
)
from finance_monitor.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestRecordModels:
    """Tests for the persisted record models."""

    def test_transaction_accepts_short_type_key(self):
        """Test that "type" is accepted in place of transactionType."""
        transaction = Transaction.model_validate({
            "transactionId": "t1",
            "userId": "u1",
            "type": "INCOME",
            "amount": "1000.00",
            "transactionDate": "2024-03-01T10:00:00+00:00",
        })
        assert transaction.transaction_type == TransactionType.INCOME
        assert transaction.amount == Decimal("1000.00")

    def test_transaction_row_uses_camel_case(self):
        """Test that rows serialize with the wire keys."""
        transaction = Transaction(
            transaction_id="t1",
            user_id="u1",
            transaction_type=TransactionType.EXPENSE,
            amount=Decimal("12.50"),
            category_name="Food & Dining",
            transaction_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        row = transaction.to_row()
        assert row["transactionId"] == "t1"
        assert row["transactionType"] == "EXPENSE"
        assert row["categoryName"] == "Food & Dining"
        assert row["amount"] == 12.5
        assert "createdAt" not in row

    def test_negative_amount_rejected(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Bill(
                bill_id="b1",
                user_id="u1",
                name="Rent",
                amount=Decimal("-1"),
                due_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            )

    def test_task_title_alias(self):
        """Test that tasks store their title as taskTitle."""
        task = Task.model_validate({"taskId": "k1", "userId": "u1", "title": "Pay rent"})
        assert task.title == "Pay rent"
        assert task.priority == TaskPriority.NORMAL
        assert task.to_row()["taskTitle"] == "Pay rent"

    def test_to_wire_renames_known_fields(self):
        """Test that field names and aliases map to wire keys."""
        wire = Task.to_wire({"title": "A", "is_completed": True, "color": "red"})
        assert wire == {"taskTitle": "A", "isCompleted": True, "color": "red"}

    def test_unknown_keys_are_kept(self):
        """Test that extra keys survive a round through the model."""
        note = Note.model_validate({"noteId": "n1", "userId": "u1", "pinned": True})
        assert note.to_row()["pinned"] is True

    def test_user_public_strips_hash(self):
        """Test that public() never includes the password hash."""
        user = User(user_id="u1", username="ravi", email="r@example.com", password_hash="$2b$...")
        public = user.public()
        assert "passwordHash" not in public
        assert public["username"] == "ravi"


class TestParseMoment:
    """Tests for date coercion."""

    def test_empty_values_mean_no_date(self):
        assert parse_moment(None) is None
        assert parse_moment("") is None

    def test_naive_string_becomes_aware(self):
        moment = parse_moment("2024-03-10T09:30:00")
        assert moment.tzinfo is not None
        assert moment.astimezone().hour == 9

    def test_date_only_string(self):
        moment = parse_moment("2024-03-10")
        assert moment.astimezone().date() == date(2024, 3, 10)

    def test_offset_preserved(self):
        moment = parse_moment("2024-03-10T09:30:00+05:30")
        assert moment.utcoffset().total_seconds() == 5.5 * 3600

    def test_garbage_passes_through(self):
        """Test that unparseable input is left for pydantic to reject."""
        assert parse_moment("next tuesday") == "next tuesday"


class TestStorageResult:
    """Tests for the explicit storage outcome."""

    def test_success_is_truthy(self):
        result = StorageResult.success("value")
        assert result
        assert result.value == "value"
        assert result.failure is None

    def test_failures_are_falsy(self):
        for result, kind in (
            (StorageResult.not_found("gone"), StorageFailure.NOT_FOUND),
            (StorageResult.conflict("taken"), StorageFailure.CONFLICT),
            (StorageResult.io_failure("disk"), StorageFailure.IO_FAILURE),
        ):
            assert not result
            assert result.failure == kind


class TestDefaultCategories:
    """Tests for the seeded category list."""

    def test_twelve_seeds(self):
        assert len(DEFAULT_CATEGORIES) == 12
        assert [c["categoryId"] for c in DEFAULT_CATEGORIES] == [f"cat-{i}" for i in range(1, 13)]

    def test_seeds_validate(self):
        categories = [Category.model_validate(row) for row in DEFAULT_CATEGORIES]
        incomes = [c.category_name for c in categories if c.category_type == TransactionType.INCOME]
        assert incomes == ["Salary", "Freelance", "Investment", "Other Income"]


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type="tasks",
            entity_id="k1",
            description="Record added to tasks",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_builder_record_created(self):
        """Test AuditEventBuilder.record_created."""
        correlation_id = uuid4()
        event = AuditEventBuilder.record_created("bills", "b1", correlation_id)

        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.entity_type == "bills"
        assert event.entity_id == "b1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_login_failed_is_warning(self):
        event = AuditEventBuilder.login_failed("ravi")
        assert event.severity == AuditSeverity.WARNING
        assert event.details == {"identity": "ravi"}

    def test_write_failure_is_error(self):
        event = AuditEventBuilder.storage_write_failed("notes", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.to_log_dict()["error_message"] == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
