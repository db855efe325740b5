"""
JSON File Storage Implementation

One directory, one JSON array per collection. Every operation re-reads the
whole file, changes it in memory and writes the whole file back.

TRADEOFFS:
- No indexes, every query is a scan (fine for one person's data)
- No locking between processes; last writer wins
- No cache; the file is always the source of truth, so nothing goes stale

Writes go to a temporary sibling file which then replaces the target, so a
crash mid-write leaves the previous version in place.
"""

import json
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_monitor.audit import AuditLogger
from finance_monitor.config import StorageSettings, get_settings
from finance_monitor.models.audit import AuditEventBuilder
from finance_monitor.models.records import DEFAULT_CATEGORIES, StorageResult, utc_now
from finance_monitor.services.storage.interface import (
    CASCADE_RULES,
    CascadeRule,
    DuplicateError,
    RecordStorageInterface,
    RecordT,
    StorageError,
    StorageWriteError,
)


COLLECTIONS = (
    "users",
    "transactions",
    "categories",
    "tasks",
    "bills",
    "goals",
    "milestones",
    "events",
    "notes",
    "settings",
)


class JsonFileClient:
    """
    Low-level access to the collection files.

    Handles directory setup, seeding and retrying writes.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().storage
        self.data_dir = Path(data_dir) if data_dir else self._settings.data_dir
        self._audit = audit_logger or AuditLogger()

    def path_for(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise StorageError(f"Unknown collection: {collection}")
        return self.data_dir / f"{collection}.json"

    def initialize(self) -> list[str]:
        """
        Create the data directory and any missing collection file.

        Missing files start as an empty array, except categories which are
        seeded with the default list.

        Returns:
            Names of the collections that were created
        """
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Cannot create data directory {self.data_dir}: {e}")

        created = []
        for collection in COLLECTIONS:
            if self.path_for(collection).exists():
                continue
            default = [dict(row) for row in DEFAULT_CATEGORIES] if collection == "categories" else []
            if not self.write(collection, default):
                raise StorageWriteError(f"Cannot create {collection}.json in {self.data_dir}")
            created.append(collection)

        self._audit.log(AuditEventBuilder.storage_initialized(str(self.data_dir), created))
        return created

    def read(self, collection: str) -> list[Any]:
        """
        Read a whole collection.

        A file that is missing, unreadable or not a JSON array reads as an
        empty collection (the failure is logged).
        """
        path = self.path_for(collection)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self._audit.log_read_failed(collection, str(e))
            return []

        if not isinstance(data, list):
            self._audit.log_read_failed(collection, f"expected a JSON array, got {type(data).__name__}")
            return []
        return data

    def write(self, collection: str, rows: list[Any]) -> bool:
        """
        Replace a whole collection on disk.

        Retries on OSError. Returns False (after logging) when every attempt
        failed.
        """
        path = self.path_for(collection)
        tmp = path.with_suffix(path.suffix + ".tmp")

        retrying = Retrying(
            stop=stop_after_attempt(self._settings.write_retry_attempts),
            wait=wait_exponential(multiplier=self._settings.write_retry_wait_seconds, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    with tmp.open("w", encoding="utf-8") as f:
                        json.dump(rows, f, ensure_ascii=False, indent=2)
                    tmp.replace(path)
        except OSError as e:
            self._audit.log_write_failed(collection, str(e))
            return False

        return True


class JsonRecordStorage(RecordStorageInterface[RecordT]):
    """
    CRUD over one collection file.

    Rows are validated into the collection's model when read; rows that fail
    validation are skipped (and logged) but left on disk untouched.
    """

    def __init__(
        self,
        client: JsonFileClient,
        collection: str,
        model: type[RecordT],
        sort_field: Optional[str] = None,
        descending: bool = False,
        fallback_sort_field: Optional[str] = None,
        initial_values: Optional[dict[str, Any]] = None,
        touch_on_create: bool = False,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            client: File access
            collection: Collection (file) name
            model: Record model for rows of this collection
            sort_field: Field ordering list results; rows without it go last
            descending: Newest/largest first
            fallback_sort_field: Used when sort_field is empty on a row
            initial_values: Values forced onto every new record
            touch_on_create: Also stamp updatedAt when creating
        """
        self._client = client
        self.collection = collection
        self.model = model
        self._sort_field = sort_field
        self._descending = descending
        self._fallback_sort_field = fallback_sort_field
        self._initial_values = model.to_wire(initial_values or {})
        self._touch_on_create = touch_on_create
        self._cascades: tuple[CascadeRule, ...] = CASCADE_RULES.get(collection, ())
        self._audit = audit_logger or AuditLogger()

        self._id_key = model.wire_key(model.id_field)
        self._owner_key = model.wire_key(model.owner_field) if model.owner_field else None
        self._created_key = model.wire_key("created_at")
        self._updated_key = model.wire_key("updated_at")

    @property
    def label(self) -> str:
        return self.model.__name__

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def _parse(self, rows: list[Any]) -> list[RecordT]:
        records = []
        for row in rows:
            if not isinstance(row, dict):
                self._audit.log_row_skipped(self.collection, "row is not a JSON object")
                continue
            try:
                records.append(self.model.model_validate(row))
            except ValidationError as e:
                self._audit.log_row_skipped(self.collection, str(e))
        return records

    def _sort_value(self, record: RecordT) -> Any:
        value = getattr(record, self._sort_field)
        if value is None and self._fallback_sort_field:
            value = getattr(record, self._fallback_sort_field)
        return value

    def _sorted(self, records: list[RecordT]) -> list[RecordT]:
        if not self._sort_field:
            return records
        dated = [r for r in records if self._sort_value(r) is not None]
        undated = [r for r in records if self._sort_value(r) is None]
        dated.sort(key=self._sort_value, reverse=self._descending)
        return dated + undated

    def list_all(self) -> list[RecordT]:
        """Every valid record in the collection, in canonical order."""
        return self._sorted(self._parse(self._client.read(self.collection)))

    def list_for_owner(self, owner_id: str) -> list[RecordT]:
        records = self._parse(self._client.read(self.collection))
        return self._sorted([r for r in records if r.owner_id == owner_id])

    def get(self, record_id: str) -> Optional[RecordT]:
        rows = self._client.read(self.collection)
        index = self._find_index(rows, record_id)
        if index is None:
            return None
        try:
            return self.model.model_validate(rows[index])
        except ValidationError as e:
            self._audit.log_row_skipped(self.collection, str(e))
            return None

    def _find_index(self, rows: list[Any], record_id: str) -> Optional[int]:
        for index, row in enumerate(rows):
            if isinstance(row, dict) and row.get(self._id_key) == record_id:
                return index
        return None

    def _owned_by(self, row: dict[str, Any], owner_id: str) -> bool:
        return self._owner_key is None or row.get(self._owner_key) == owner_id

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def add(self, owner_id: str, fields: dict[str, Any]) -> RecordT:
        rows = self._client.read(self.collection)

        record_id = uuid4().hex
        if self._find_index(rows, record_id) is not None:
            raise DuplicateError(f"{self.label} id collision: {record_id}")

        now = utc_now()
        payload = self.model.to_wire(fields)
        payload.pop(self._id_key, None)
        payload.update(self._initial_values)
        payload[self._id_key] = record_id
        payload[self._created_key] = now
        if self._touch_on_create:
            payload[self._updated_key] = now
        if self._owner_key:
            payload[self._owner_key] = owner_id

        record = self.model.model_validate(payload)
        rows.append(record.to_row())

        if not self._client.write(self.collection, rows):
            raise StorageWriteError(f"Could not save {self.label.lower()}")
        return record

    def _protect(self, changes: dict[str, Any]) -> dict[str, Any]:
        changes.pop(self._id_key, None)
        if self._owner_key:
            changes.pop(self._owner_key, None)
        changes.pop(self._created_key, None)
        return changes

    def _replace(
        self,
        record_id: str,
        changes: dict[str, Any],
        owner_id: Optional[str],
    ) -> StorageResult:
        rows = self._client.read(self.collection)
        index = self._find_index(rows, record_id)
        if index is None or (owner_id is not None and not self._owned_by(rows[index], owner_id)):
            return StorageResult.not_found(f"{self.label} not found")

        record = self.model.model_validate({**rows[index], **changes})
        rows[index] = record.to_row()

        if not self._client.write(self.collection, rows):
            return StorageResult.io_failure(f"Could not save {self.label.lower()}")
        return StorageResult.success(record)

    def update(
        self,
        record_id: str,
        fields: dict[str, Any],
        owner_id: Optional[str] = None,
    ) -> StorageResult:
        changes = self._protect(self.model.to_wire(fields))
        changes[self._updated_key] = utc_now()
        return self._replace(record_id, changes, owner_id)

    def mark(
        self,
        record_id: str,
        flag_field: str,
        stamp_field: str,
        owner_id: Optional[str] = None,
    ) -> StorageResult:
        changes = {
            self.model.wire_key(flag_field): True,
            self.model.wire_key(stamp_field): utc_now(),
        }
        return self._replace(record_id, changes, owner_id)

    def delete(self, record_id: str, owner_id: Optional[str] = None) -> StorageResult:
        rows = self._client.read(self.collection)

        if owner_id is not None:
            index = self._find_index(rows, record_id)
            if index is not None and not self._owned_by(rows[index], owner_id):
                return StorageResult.not_found(f"{self.label} not found")

        remaining = [
            row for row in rows
            if not (isinstance(row, dict) and row.get(self._id_key) == record_id)
        ]
        if not self._client.write(self.collection, remaining):
            return StorageResult.io_failure(f"Could not delete {self.label.lower()}")

        for rule in self._cascades:
            if not self._apply_cascade(rule, record_id):
                return StorageResult.io_failure(
                    f"{self.label} deleted but its {rule.child_collection} could not be removed"
                )

        return StorageResult.success()

    def _apply_cascade(self, rule: CascadeRule, parent_id: str) -> bool:
        rows = self._client.read(rule.child_collection)
        kept = [
            row for row in rows
            if not (isinstance(row, dict) and row.get(rule.foreign_key) == parent_id)
        ]
        if not self._client.write(rule.child_collection, kept):
            return False

        removed = len(rows) - len(kept)
        if removed:
            self._audit.log(
                AuditEventBuilder.cascade_applied(
                    self.collection, parent_id, rule.child_collection, removed
                )
            )
        return True
