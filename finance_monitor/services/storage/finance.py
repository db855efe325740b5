"""
Finance Storage Facade

Wires one JsonRecordStorage per collection and exposes the named operations
the service bridge calls: get_all_transactions, add_task, mark_bill_paid, ...

Each collection declares its canonical list order here:

    transactions  transactionDate  newest first
    tasks         createdAt        newest first
    bills         dueDate          soonest first
    goals         targetDate       soonest first
    milestones    targetDate       soonest first
    events        eventDate        soonest first
    notes         updatedAt        newest first (createdAt if never updated)
"""

from pathlib import Path
from typing import Any, Optional

from finance_monitor.audit import AuditLogger
from finance_monitor.config import StorageSettings, get_settings
from finance_monitor.models.records import (
    Bill,
    Category,
    Event,
    Goal,
    Milestone,
    Note,
    StorageResult,
    Task,
    Transaction,
    UserSettings,
)
from finance_monitor.services.storage.json_store import JsonFileClient, JsonRecordStorage
from finance_monitor.services.storage.users import JsonUserStorage


class FinanceStorage:
    """
    All collections of one data directory.

    Creating the storage initializes the directory (missing files are
    created, categories seeded).
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = settings or get_settings().storage
        self._audit = audit_logger or AuditLogger()
        self.client = JsonFileClient(data_dir=data_dir, settings=settings, audit_logger=self._audit)
        self.client.initialize()

        self.users = JsonUserStorage(
            self.client,
            hash_rounds=settings.password_hash_rounds,
            audit_logger=self._audit,
        )
        self.categories = self._store("categories", Category)
        self.transactions = self._store(
            "transactions", Transaction, sort_field="transaction_date", descending=True
        )
        self.tasks = self._store(
            "tasks", Task, sort_field="created_at", descending=True,
            initial_values={"is_completed": False},
        )
        self.bills = self._store(
            "bills", Bill, sort_field="due_date",
            initial_values={"is_paid": False},
        )
        self.goals = self._store(
            "goals", Goal, sort_field="target_date",
            initial_values={"is_achieved": False},
        )
        self.milestones = self._store(
            "milestones", Milestone, sort_field="target_date",
            initial_values={"is_completed": False},
        )
        self.events = self._store("events", Event, sort_field="event_date")
        self.notes = self._store(
            "notes", Note, sort_field="updated_at", descending=True,
            fallback_sort_field="created_at", touch_on_create=True,
        )
        self.settings = self._store("settings", UserSettings)

    def _store(self, collection: str, model: type, **options: Any) -> JsonRecordStorage:
        return JsonRecordStorage(self.client, collection, model, audit_logger=self._audit, **options)

    # =========================================================================
    # USERS
    # =========================================================================

    def register_user(self, username: str, email: str, password: str, full_name: str = "") -> dict:
        return self.users.register_user(username, email, password, full_name)

    def login_user(self, identity: str, password: str) -> dict:
        return self.users.login_user(identity, password)

    def update_user_profile(self, user_id: str, fields: dict[str, Any]) -> StorageResult:
        return self.users.update_user_profile(user_id, fields)

    def change_password(self, user_id: str, old_password: str, new_password: str) -> StorageResult:
        return self.users.change_password(user_id, old_password, new_password)

    def get_user(self, user_id: str) -> Optional[dict]:
        return self.users.get_user(user_id)

    # =========================================================================
    # TRANSACTIONS & CATEGORIES
    # =========================================================================

    def get_all_transactions(self, user_id: str) -> list[Transaction]:
        return self.transactions.list_for_owner(user_id)

    def add_transaction(self, user_id: str, fields: dict[str, Any]) -> Transaction:
        return self.transactions.add(user_id, fields)

    def update_transaction(
        self, transaction_id: str, fields: dict[str, Any], user_id: Optional[str] = None
    ) -> StorageResult:
        return self.transactions.update(transaction_id, fields, owner_id=user_id)

    def delete_transaction(self, transaction_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.transactions.delete(transaction_id, owner_id=user_id)

    def get_all_categories(self) -> list[Category]:
        return self.categories.list_all()

    # =========================================================================
    # TASKS
    # =========================================================================

    def get_all_tasks(self, user_id: str) -> list[Task]:
        return self.tasks.list_for_owner(user_id)

    def add_task(self, user_id: str, fields: dict[str, Any]) -> Task:
        return self.tasks.add(user_id, fields)

    def update_task(self, task_id: str, fields: dict[str, Any], user_id: Optional[str] = None) -> StorageResult:
        return self.tasks.update(task_id, fields, owner_id=user_id)

    def delete_task(self, task_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.tasks.delete(task_id, owner_id=user_id)

    def complete_task(self, task_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.tasks.mark(task_id, "is_completed", "completed_at", owner_id=user_id)

    # =========================================================================
    # BILLS
    # =========================================================================

    def get_all_bills(self, user_id: str) -> list[Bill]:
        return self.bills.list_for_owner(user_id)

    def add_bill(self, user_id: str, fields: dict[str, Any]) -> Bill:
        return self.bills.add(user_id, fields)

    def update_bill(self, bill_id: str, fields: dict[str, Any], user_id: Optional[str] = None) -> StorageResult:
        return self.bills.update(bill_id, fields, owner_id=user_id)

    def delete_bill(self, bill_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.bills.delete(bill_id, owner_id=user_id)

    def mark_bill_paid(self, bill_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.bills.mark(bill_id, "is_paid", "paid_at", owner_id=user_id)

    # =========================================================================
    # GOALS & MILESTONES
    # =========================================================================

    def get_all_goals(self, user_id: str) -> list[Goal]:
        return self.goals.list_for_owner(user_id)

    def add_goal(self, user_id: str, fields: dict[str, Any]) -> Goal:
        return self.goals.add(user_id, fields)

    def update_goal(self, goal_id: str, fields: dict[str, Any], user_id: Optional[str] = None) -> StorageResult:
        return self.goals.update(goal_id, fields, owner_id=user_id)

    def delete_goal(self, goal_id: str, user_id: Optional[str] = None) -> StorageResult:
        """Delete a goal and, through the cascade rules, its milestones."""
        return self.goals.delete(goal_id, owner_id=user_id)

    def mark_goal_achieved(self, goal_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.goals.mark(goal_id, "is_achieved", "achieved_at", owner_id=user_id)

    def get_goal_milestones(self, goal_id: str) -> list[Milestone]:
        return self.milestones.list_for_owner(goal_id)

    def add_milestone(self, goal_id: str, fields: dict[str, Any]) -> Milestone:
        return self.milestones.add(goal_id, fields)

    def update_milestone(self, milestone_id: str, fields: dict[str, Any]) -> StorageResult:
        return self.milestones.update(milestone_id, fields)

    def delete_milestone(self, milestone_id: str) -> StorageResult:
        return self.milestones.delete(milestone_id)

    def complete_milestone(self, milestone_id: str) -> StorageResult:
        return self.milestones.mark(milestone_id, "is_completed", "completed_at")

    # =========================================================================
    # EVENTS
    # =========================================================================

    def get_all_events(self, user_id: str) -> list[Event]:
        return self.events.list_for_owner(user_id)

    def add_event(self, user_id: str, fields: dict[str, Any]) -> Event:
        return self.events.add(user_id, fields)

    def update_event(self, event_id: str, fields: dict[str, Any], user_id: Optional[str] = None) -> StorageResult:
        return self.events.update(event_id, fields, owner_id=user_id)

    def delete_event(self, event_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.events.delete(event_id, owner_id=user_id)

    # =========================================================================
    # NOTES
    # =========================================================================

    def get_all_notes(self, user_id: str) -> list[Note]:
        return self.notes.list_for_owner(user_id)

    def add_note(self, user_id: str, fields: dict[str, Any]) -> Note:
        return self.notes.add(user_id, fields)

    def update_note(self, note_id: str, fields: dict[str, Any], user_id: Optional[str] = None) -> StorageResult:
        return self.notes.update(note_id, fields, owner_id=user_id)

    def delete_note(self, note_id: str, user_id: Optional[str] = None) -> StorageResult:
        return self.notes.delete(note_id, owner_id=user_id)

    # =========================================================================
    # DASHBOARD SETTINGS
    # =========================================================================

    def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        found = self.settings.list_for_owner(user_id)
        return found[0] if found else None

    def save_user_settings(self, user_id: str, fields: dict[str, Any]) -> StorageResult:
        """Create the user's settings row on first save, merge afterwards."""
        existing = self.get_user_settings(user_id)
        if existing is None:
            return StorageResult.success(self.settings.add(user_id, fields))
        return self.settings.update(existing.settings_id, fields, owner_id=user_id)
