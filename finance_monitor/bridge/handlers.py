"""
Channel Handlers

Registers every channel the UI calls on a ServiceBridge. Each handler runs
its storage work in a worker thread and returns the success payload; the
bridge adds the envelope.

CRUD channels for the record collections are generated from RECORD_CHANNELS.
Account, status, query and settings channels are written out below.
"""

import asyncio
from typing import Any, NamedTuple, Optional

from finance_monitor.audit import AuditLogger
from finance_monitor.bridge.dispatcher import ServiceBridge, ensure
from finance_monitor.bridge.requests import (
    BillIdRequest,
    ChangePasswordRequest,
    EmptyRequest,
    GoalIdRequest,
    LoginRequest,
    MilestoneIdRequest,
    MonthRequest,
    RegisterUserRequest,
    SaveSettingsRequest,
    SearchNotesRequest,
    TaskIdRequest,
    UpcomingRequest,
    UpdateProfileRequest,
    UserRequest,
    build_record_requests,
)
from finance_monitor.config import AppSettings
from finance_monitor.models.records import RecordModel
from finance_monitor.queries import QueryExecutor
from finance_monitor.services.storage import FinanceStorage, JsonRecordStorage


class RecordChannels(NamedTuple):
    """Naming of one collection's CRUD channels."""
    collection: str
    singular: str
    entity_key: str
    owner_name: str = "user_id"
    scoped: bool = True
    list_channel: Optional[str] = None

    @property
    def id_name(self) -> str:
        return f"{self.singular}_id"


RECORD_CHANNELS = (
    RecordChannels("transactions", "transaction", "transaction"),
    RecordChannels("tasks", "task", "task"),
    RecordChannels("bills", "bill", "bill"),
    RecordChannels("goals", "goal", "goal"),
    RecordChannels(
        "milestones", "milestone", "milestone",
        owner_name="goal_id", scoped=False, list_channel="get-goal-milestones",
    ),
    RecordChannels("events", "event", "event_data"),
    RecordChannels("notes", "note", "note"),
)


def dump_records(records: list[RecordModel]) -> list[dict[str, Any]]:
    return [record.to_row() for record in records]


def register_record_channels(
    bridge: ServiceBridge,
    store: JsonRecordStorage,
    channels: RecordChannels,
    audit: AuditLogger,
) -> None:
    """Register get-/add-/update-/delete- channels for one collection."""
    requests = build_record_requests(
        name=channels.singular.title(),
        entity_key=channels.entity_key,
        id_name=channels.id_name,
        owner_name=channels.owner_name,
        scoped=channels.scoped,
    )

    def scope(request: Any) -> Optional[str]:
        return request.user_id if channels.scoped else None

    @bridge.handle(channels.list_channel or f"get-{channels.collection}", requests.owner)
    async def list_records(request, correlation_id):
        owner_id = getattr(request, channels.owner_name)
        records = await asyncio.to_thread(store.list_for_owner, owner_id)
        return {channels.collection: dump_records(records)}

    @bridge.handle(f"add-{channels.singular}", requests.add)
    async def add_record(request, correlation_id):
        owner_id = getattr(request, channels.owner_name)
        fields = getattr(request, channels.entity_key)
        record = await asyncio.to_thread(store.add, owner_id, fields)
        audit.log_record_created(store.collection, record.record_id, correlation_id)
        return {channels.singular: record.to_row()}

    @bridge.handle(f"update-{channels.singular}", requests.update)
    async def update_record(request, correlation_id):
        record_id = getattr(request, channels.id_name)
        fields = getattr(request, channels.entity_key)
        ensure(await asyncio.to_thread(store.update, record_id, fields, scope(request)))
        audit.log_record_updated(store.collection, record_id, sorted(fields), correlation_id)
        return {}

    @bridge.handle(f"delete-{channels.singular}", requests.delete)
    async def delete_record(request, correlation_id):
        record_id = getattr(request, channels.id_name)
        ensure(await asyncio.to_thread(store.delete, record_id, scope(request)))
        audit.log_record_deleted(store.collection, record_id, correlation_id)
        return {}


def register_handlers(
    bridge: ServiceBridge,
    storage: FinanceStorage,
    executor: QueryExecutor,
    app_settings: AppSettings,
    audit_logger: Optional[AuditLogger] = None,
) -> ServiceBridge:
    """Register every channel on the bridge and return it."""
    audit = audit_logger or AuditLogger("finance_monitor.bridge")

    for channels in RECORD_CHANNELS:
        register_record_channels(bridge, getattr(storage, channels.collection), channels, audit)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @bridge.handle("register-user", RegisterUserRequest)
    async def register_user(request, correlation_id):
        user = await asyncio.to_thread(
            storage.register_user,
            request.username, request.email, request.password, request.full_name,
        )
        return {"user": user}

    @bridge.handle("login-user", LoginRequest)
    async def login_user(request, correlation_id):
        user = await asyncio.to_thread(storage.login_user, request.username, request.password)
        return {"user": user}

    @bridge.handle("update-profile", UpdateProfileRequest)
    async def update_profile(request, correlation_id):
        ensure(await asyncio.to_thread(storage.update_user_profile, request.user_id, request.data))
        return {}

    @bridge.handle("change-password", ChangePasswordRequest)
    async def change_password(request, correlation_id):
        ensure(await asyncio.to_thread(
            storage.change_password, request.user_id, request.old_password, request.new_password,
        ))
        return {}

    # -------------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------------

    @bridge.handle("complete-task", TaskIdRequest)
    async def complete_task(request, correlation_id):
        ensure(await asyncio.to_thread(storage.complete_task, request.task_id, request.user_id))
        audit.log_status_changed("tasks", request.task_id, "isCompleted", correlation_id)
        return {}

    @bridge.handle("mark-bill-paid", BillIdRequest)
    async def mark_bill_paid(request, correlation_id):
        ensure(await asyncio.to_thread(storage.mark_bill_paid, request.bill_id, request.user_id))
        audit.log_status_changed("bills", request.bill_id, "isPaid", correlation_id)
        return {}

    @bridge.handle("mark-goal-achieved", GoalIdRequest)
    async def mark_goal_achieved(request, correlation_id):
        ensure(await asyncio.to_thread(storage.mark_goal_achieved, request.goal_id, request.user_id))
        audit.log_status_changed("goals", request.goal_id, "isAchieved", correlation_id)
        return {}

    @bridge.handle("complete-milestone", MilestoneIdRequest)
    async def complete_milestone(request, correlation_id):
        ensure(await asyncio.to_thread(storage.complete_milestone, request.milestone_id))
        audit.log_status_changed("milestones", request.milestone_id, "isCompleted", correlation_id)
        return {}

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @bridge.handle("get-categories", EmptyRequest)
    async def get_categories(request, correlation_id):
        categories = await asyncio.to_thread(storage.get_all_categories)
        return {"categories": dump_records(categories)}

    @bridge.handle("get-monthly-totals", MonthRequest)
    async def get_monthly_totals(request, correlation_id):
        totals = await asyncio.to_thread(
            executor.monthly_totals, request.user_id, request.month, request.year
        )
        return {"totals": totals.model_dump(by_alias=True)}

    @bridge.handle("get-expenses-by-category", MonthRequest)
    async def get_expenses_by_category(request, correlation_id):
        expenses = await asyncio.to_thread(
            executor.expenses_by_category, request.user_id, request.month, request.year
        )
        return {"expenses": [expense.model_dump() for expense in expenses]}

    @bridge.handle("get-upcoming-bills", UpcomingRequest)
    async def get_upcoming_bills(request, correlation_id):
        days = app_settings.upcoming_window_days if request.days is None else request.days
        bills = await asyncio.to_thread(executor.upcoming_bills, request.user_id, days)
        return {"bills": dump_records(bills)}

    @bridge.handle("get-upcoming-events", UpcomingRequest)
    async def get_upcoming_events(request, correlation_id):
        days = app_settings.upcoming_window_days if request.days is None else request.days
        events = await asyncio.to_thread(executor.upcoming_events, request.user_id, days)
        return {"events": dump_records(events)}

    @bridge.handle("search-notes", SearchNotesRequest)
    async def search_notes(request, correlation_id):
        notes = await asyncio.to_thread(executor.search_notes, request.user_id, request.keyword)
        return {"notes": dump_records(notes)}

    # -------------------------------------------------------------------------
    # Dashboard settings
    # -------------------------------------------------------------------------

    @bridge.handle("get-settings", UserRequest)
    async def get_settings(request, correlation_id):
        settings = await asyncio.to_thread(storage.get_user_settings, request.user_id)
        return {"settings": settings.to_row() if settings else None}

    @bridge.handle("save-settings", SaveSettingsRequest)
    async def save_settings(request, correlation_id):
        result = ensure(await asyncio.to_thread(
            storage.save_user_settings, request.user_id, request.settings
        ))
        audit.log_record_updated("settings", request.user_id, sorted(request.settings), correlation_id)
        return {"settings": result.value.to_row()}

    return bridge
