"""
Bridge Request Models

Every channel validates its payload into one of these models before the
handler runs. Keys are camelCase on the wire (userId, oldPassword, ...),
snake_case in Python.

Payloads that are a bare value (the UI sends delete-task with just the task
id) bind to the model's first field.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, create_model
from pydantic.alias_generators import to_camel


class BridgeRequest(BaseModel):
    """Base for all channel requests."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def from_payload(cls, payload: Any) -> "BridgeRequest":
        """
        Validate a raw channel payload.

        Raises:
            ValueError: If a bare value is sent to a channel without fields
            pydantic.ValidationError: If the payload doesn't fit the model
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            fields = list(cls.model_fields)
            if not fields:
                raise ValueError("This call takes no arguments")
            payload = {fields[0]: payload}
        return cls.model_validate(payload)


class EmptyRequest(BridgeRequest):
    pass


# =============================================================================
# USERS
# =============================================================================

class RegisterUserRequest(BridgeRequest):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    full_name: str = ""


class LoginRequest(BridgeRequest):
    username: str = Field(
        ...,
        validation_alias=AliasChoices("username", "email", "identity"),
        description="Username or email",
    )
    password: str


class UpdateProfileRequest(BridgeRequest):
    user_id: str
    data: dict[str, Any]


class ChangePasswordRequest(BridgeRequest):
    user_id: str
    old_password: str
    new_password: str = Field(..., min_length=1)


# =============================================================================
# QUERIES
# =============================================================================

class UserRequest(BridgeRequest):
    user_id: str


class MonthRequest(BridgeRequest):
    user_id: str
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1)


class UpcomingRequest(BridgeRequest):
    user_id: str
    days: Optional[int] = Field(default=None, ge=0)


class SearchNotesRequest(BridgeRequest):
    user_id: str
    keyword: str = ""


class SaveSettingsRequest(BridgeRequest):
    user_id: str
    settings: dict[str, Any]


# =============================================================================
# STATUS CHANGES
# =============================================================================

class TaskIdRequest(BridgeRequest):
    task_id: str
    user_id: Optional[str] = None


class BillIdRequest(BridgeRequest):
    bill_id: str
    user_id: Optional[str] = None


class GoalIdRequest(BridgeRequest):
    goal_id: str
    user_id: Optional[str] = None


class MilestoneIdRequest(BridgeRequest):
    milestone_id: str


# =============================================================================
# GENERIC RECORD REQUESTS
# =============================================================================

class RecordRequests(BaseModel):
    """The four request models used by one collection's CRUD channels."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    owner: type[BridgeRequest]
    add: type[BridgeRequest]
    update: type[BridgeRequest]
    delete: type[BridgeRequest]


def build_record_requests(
    name: str,
    entity_key: str,
    id_name: str,
    owner_name: str = "user_id",
    scoped: bool = True,
) -> RecordRequests:
    """
    Build request models for a collection's list/add/update/delete channels.

    Args:
        name: Model name prefix, e.g. "Transaction"
        entity_key: Field holding the record fields, e.g. "transaction"
        id_name: Field holding the record id, e.g. "transaction_id"
        owner_name: Field naming the owner on list/add
        scoped: Whether update/delete accept an optional userId check
    """
    scope_fields: dict[str, Any] = {"user_id": (Optional[str], None)} if scoped else {}

    return RecordRequests(
        owner=create_model(
            f"List{name}Request",
            __base__=BridgeRequest,
            **{owner_name: (str, ...)},
        ),
        add=create_model(
            f"Add{name}Request",
            __base__=BridgeRequest,
            **{owner_name: (str, ...), entity_key: (dict[str, Any], ...)},
        ),
        update=create_model(
            f"Update{name}Request",
            __base__=BridgeRequest,
            **{id_name: (str, ...), entity_key: (dict[str, Any], ...)},
            **scope_fields,
        ),
        delete=create_model(
            f"Delete{name}Request",
            __base__=BridgeRequest,
            **{id_name: (str, ...)},
            **scope_fields,
        ),
    )
