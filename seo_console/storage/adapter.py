"""
Storage adapter interface for SEO records.

Every backend stores complete :class:`SEORecord` objects and enforces one
record per ``(user_id, route_path)``. Records are always validated through
the pydantic models on the way in and on the way out.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from seo_console.core.models import SEORecord, SEORecordCreate, SEORecordUpdate

DEFAULT_USER_ID = "file-user"


class RecordNotFoundError(LookupError):
    """Raised when an operation requires a record that does not exist."""


class DuplicateRouteError(ValueError):
    """Raised when a user already owns a record for the route."""

    def __init__(self, route_path: str, user_id: str):
        super().__init__(f"A record for route '{route_path}' already exists (user '{user_id}').")
        self.route_path = route_path
        self.user_id = user_id


def new_record(payload: SEORecordCreate, now: Optional[datetime] = None) -> SEORecord:
    """Materialise a create payload: fresh id, pending status, timestamps."""
    now = now or datetime.now(timezone.utc)
    data = payload.model_dump()
    data["user_id"] = payload.user_id or DEFAULT_USER_ID
    return SEORecord(
        **data,
        id=str(uuid.uuid4()),
        created_at=now,
        updated_at=now,
    )


def merge_record(record: SEORecord, changes: SEORecordUpdate) -> SEORecord:
    """Apply the explicitly-set fields of ``changes`` and bump ``updated_at``."""
    data: Dict[str, Any] = record.model_dump()
    data.update(changes.model_dump(exclude_unset=True))
    data["updated_at"] = datetime.now(timezone.utc)
    return SEORecord.model_validate(data)


class StorageAdapter(ABC):
    """Backend-agnostic record store."""

    @abstractmethod
    def get_records(self, user_id: Optional[str] = None) -> List[SEORecord]:
        """All records, optionally restricted to one owner, oldest first."""

    @abstractmethod
    def get_record_by_id(self, record_id: str) -> Optional[SEORecord]:
        """The record with ``record_id`` or ``None``."""

    @abstractmethod
    def get_record_by_route(self, route_path: str, user_id: Optional[str] = None) -> Optional[SEORecord]:
        """The record for ``route_path`` (first match across owners when ``user_id`` is None)."""

    @abstractmethod
    def create_record(self, payload: SEORecordCreate) -> SEORecord:
        """Persist a new record.

        Raises:
            DuplicateRouteError: If the owner already has a record for the route.
        """

    @abstractmethod
    def update_record(self, record_id: str, changes: SEORecordUpdate) -> Optional[SEORecord]:
        """Apply a partial update. Returns ``None`` when the id is unknown.

        Raises:
            DuplicateRouteError: If ``changes`` moves the record onto a route
                the owner already uses.
        """

    @abstractmethod
    def delete_record(self, record_id: str) -> bool:
        """Delete a record. Returns ``False`` when the id is unknown."""

    @abstractmethod
    def is_available(self) -> bool:
        """True when the backend can currently be read and written."""

    def require_record(self, record_id: str) -> SEORecord:
        """Like :meth:`get_record_by_id` but raise when the id is unknown.

        Raises:
            RecordNotFoundError: If no record has ``record_id``.
        """
        record = self.get_record_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(f"SEO record with id {record_id} not found")
        return record
