"""
Record Models for Finance Monitor

Every collection on disk is a flat JSON array. These models are the typed
view of one row in each collection:
1. Wire keys are camelCase (userId, transactionDate, ...) so the files stay
   compatible with the UI that reads them
2. Unknown keys are kept (extra="allow"), the store is schemaless
3. Money is Decimal (written as a JSON number), dates are timezone-aware datetimes
4. Rows serialize back with to_row()

DESIGN DECISION: Models are validated on every write. Rows already on disk that
fail validation are skipped by readers but never rewritten.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Generic, Optional, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Timestamp used for createdAt / updatedAt / completion stamps."""
    return datetime.now(timezone.utc)


def parse_moment(value: Any) -> Any:
    """
    Coerce a wire date value into a timezone-aware datetime.

    Accepts ISO strings (with or without offset, date-only included),
    date and datetime objects. Naive values are read as local time.
    Empty strings mean "no date". Anything unparseable is passed through
    so pydantic reports the error.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            return value
    else:
        return value

    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment


Moment = Annotated[Optional[datetime], BeforeValidator(parse_moment)]

# Decimal in Python, a plain JSON number on disk and on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money for transactions and categories."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TaskPriority(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


# =============================================================================
# BASE RECORD
# =============================================================================

class RecordModel(BaseModel):
    """
    Base for every persisted row.

    Subclasses declare which field holds the record id and which field
    holds the owner id (used for scoping reads).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id_field: ClassVar[str]
    owner_field: ClassVar[Optional[str]] = "user_id"

    @property
    def record_id(self) -> str:
        return getattr(self, self.id_field)

    @property
    def owner_id(self) -> Optional[str]:
        if self.owner_field is None:
            return None
        return getattr(self, self.owner_field)

    def to_row(self) -> dict[str, Any]:
        """Serialize to the flat JSON object stored on disk."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def wire_key(cls, name: str) -> str:
        """Wire key of a field (``user_id`` -> ``userId``)."""
        info = cls.model_fields.get(name)
        if info is None:
            return to_camel(name)
        return info.alias or name

    @classmethod
    def to_wire(cls, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Rename any known field name or accepted alias to its wire key.

        Unknown keys pass through unchanged. Needed before merging a partial
        update over a stored row, so that ``title`` and ``taskTitle`` do not
        end up side by side.
        """
        lookup: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            wire = info.alias or name
            lookup[name] = wire
            lookup[wire] = wire
            if isinstance(info.validation_alias, AliasChoices):
                for choice in info.validation_alias.choices:
                    if isinstance(choice, str):
                        lookup[choice] = wire
        return {lookup.get(key, key): value for key, value in fields.items()}


# =============================================================================
# USERS & CATEGORIES (not user-scoped)
# =============================================================================

class User(RecordModel):
    """
    A registered user.

    CRITICAL: password_hash never leaves the storage layer; callers get
    public() instead.
    """
    id_field: ClassVar[str] = "user_id"
    owner_field: ClassVar[Optional[str]] = None

    user_id: str
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    full_name: str = ""
    password_hash: str
    created_at: Moment = None
    updated_at: Moment = None

    def public(self) -> dict[str, Any]:
        """Wire form of the user with the password hash stripped."""
        row = self.to_row()
        row.pop(self.wire_key("password_hash"), None)
        return row


class Category(RecordModel):
    """Process-wide budgeting category, referenced by name from transactions."""
    id_field: ClassVar[str] = "category_id"
    owner_field: ClassVar[Optional[str]] = None

    category_id: str
    category_name: str
    category_type: TransactionType = Field(..., alias="type")


DEFAULT_CATEGORIES: list[dict[str, str]] = [
    {"categoryId": "cat-1", "categoryName": "Food & Dining", "type": "EXPENSE"},
    {"categoryId": "cat-2", "categoryName": "Transportation", "type": "EXPENSE"},
    {"categoryId": "cat-3", "categoryName": "Shopping", "type": "EXPENSE"},
    {"categoryId": "cat-4", "categoryName": "Entertainment", "type": "EXPENSE"},
    {"categoryId": "cat-5", "categoryName": "Bills & Utilities", "type": "EXPENSE"},
    {"categoryId": "cat-6", "categoryName": "Healthcare", "type": "EXPENSE"},
    {"categoryId": "cat-7", "categoryName": "Education", "type": "EXPENSE"},
    {"categoryId": "cat-8", "categoryName": "Personal", "type": "EXPENSE"},
    {"categoryId": "cat-9", "categoryName": "Salary", "type": "INCOME"},
    {"categoryId": "cat-10", "categoryName": "Freelance", "type": "INCOME"},
    {"categoryId": "cat-11", "categoryName": "Investment", "type": "INCOME"},
    {"categoryId": "cat-12", "categoryName": "Other Income", "type": "INCOME"},
]


# =============================================================================
# USER-OWNED RECORDS
# =============================================================================

class Transaction(RecordModel):
    id_field: ClassVar[str] = "transaction_id"

    transaction_id: str
    user_id: str
    transaction_type: TransactionType = Field(
        ...,
        alias="transactionType",
        validation_alias=AliasChoices("transactionType", "transaction_type", "type"),
    )
    amount: Money = Field(..., ge=0)
    category_name: Optional[str] = None
    description: str = ""
    transaction_date: Moment = Field(...)
    created_at: Moment = None
    updated_at: Moment = None


class Task(RecordModel):
    id_field: ClassVar[str] = "task_id"

    task_id: str
    user_id: str
    title: str = Field(..., min_length=1, alias="taskTitle")
    description: str = ""
    due_date: Moment = None
    priority: TaskPriority = TaskPriority.NORMAL
    is_completed: bool = False
    completed_at: Moment = None
    created_at: Moment = None
    updated_at: Moment = None


class Bill(RecordModel):
    id_field: ClassVar[str] = "bill_id"

    bill_id: str
    user_id: str
    name: str = Field(..., min_length=1, alias="billName")
    amount: Money = Field(..., ge=0)
    due_date: Moment = Field(...)
    is_recurring: bool = False
    is_paid: bool = False
    paid_at: Moment = None
    created_at: Moment = None
    updated_at: Moment = None


class Goal(RecordModel):
    """A savings goal. Owns zero or more milestones (deleted with it)."""
    id_field: ClassVar[str] = "goal_id"

    goal_id: str
    user_id: str
    title: str = Field(..., min_length=1, alias="goalTitle")
    description: str = ""
    target_amount: Money = Field(..., ge=0)
    current_amount: Money = Field(default=Decimal("0"), ge=0)
    target_date: Moment = None
    is_achieved: bool = False
    achieved_at: Moment = None
    created_at: Moment = None
    updated_at: Moment = None


class Milestone(RecordModel):
    """Checkpoint on the way to a goal; scoped by goal, not by user."""
    id_field: ClassVar[str] = "milestone_id"
    owner_field: ClassVar[Optional[str]] = "goal_id"

    milestone_id: str
    goal_id: str
    description: str = Field(..., min_length=1)
    target_date: Moment = None
    is_completed: bool = False
    completed_at: Moment = None
    created_at: Moment = None
    updated_at: Moment = None


class Event(RecordModel):
    id_field: ClassVar[str] = "event_id"

    event_id: str
    user_id: str
    title: str = Field(..., min_length=1, alias="eventTitle")
    description: str = ""
    event_date: Moment = Field(...)
    created_at: Moment = None
    updated_at: Moment = None


class Note(RecordModel):
    id_field: ClassVar[str] = "note_id"

    note_id: str
    user_id: str
    title: str = ""
    content: str = ""
    created_at: Moment = None
    updated_at: Moment = None


class UserSettings(RecordModel):
    """
    Per-user dashboard preferences.

    dashboard_widgets lists the visible widget ids (None means all visible),
    dashboard_layout lists widget ids in display order.
    """
    id_field: ClassVar[str] = "settings_id"

    settings_id: str
    user_id: str
    dashboard_widgets: Optional[list[str]] = None
    dashboard_layout: Optional[list[str]] = None
    created_at: Moment = None
    updated_at: Moment = None


# =============================================================================
# RESULT MODELS
# =============================================================================

class StorageFailure(str, Enum):
    """Why a storage operation did not happen."""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    IO_FAILURE = "io_failure"


T = TypeVar("T")


class StorageResult(BaseModel, Generic[T]):
    """
    Explicit outcome of a storage mutation.

    Truthy exactly when the operation succeeded, so callers can keep writing
    ``if storage.update_task(...):``.
    """

    ok: bool
    failure: Optional[StorageFailure] = None
    message: str = ""
    value: Optional[T] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> "StorageResult[T]":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def not_found(cls, message: str) -> "StorageResult[T]":
        return cls(ok=False, failure=StorageFailure.NOT_FOUND, message=message)

    @classmethod
    def conflict(cls, message: str) -> "StorageResult[T]":
        return cls(ok=False, failure=StorageFailure.CONFLICT, message=message)

    @classmethod
    def io_failure(cls, message: str) -> "StorageResult[T]":
        return cls(ok=False, failure=StorageFailure.IO_FAILURE, message=message)


class MonthlyTotals(BaseModel):
    """Income / expense totals for one calendar month, as 2-dp strings."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    income: str
    expenses: str
    net_savings: str


class CategoryExpense(BaseModel):
    category: str
    amount: str
