"""
JSON-file record store.

The whole collection lives in one JSON array (camelCase keys), rewritten
on every change. The file is created empty on first use. Good for a
single-site setup with a few hundred routes; use the SQL store beyond that.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

from seo_console.core.logging_config import get_logger
from seo_console.core.models import SEORecord, SEORecordCreate, SEORecordUpdate
from seo_console.storage.adapter import (
    DEFAULT_USER_ID,
    DuplicateRouteError,
    StorageAdapter,
    merge_record,
    new_record,
)

logger = get_logger(__name__)


class FileStorage(StorageAdapter):
    """Records persisted to a JSON file."""

    def __init__(self, file_path: str | Path = "seo-records.json"):
        self.file_path = Path(file_path)

    # ── I/O ───────────────────────────────────────────────────────────────────

    def _load(self) -> List[SEORecord]:
        if not self.file_path.exists():
            self._save([])
            return []
        with self.file_path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        return [SEORecord.model_validate(item) for item in raw]

    def _save(self, records: List[SEORecord]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump([r.to_json_dict() for r in records], fh, indent=2, ensure_ascii=False)
        tmp.replace(self.file_path)
        logger.debug("Saved %d record(s) to %s", len(records), self.file_path)

    @staticmethod
    def _route_taken(records: List[SEORecord], route_path: str, user_id: str, skip_id: str | None = None) -> bool:
        return any(
            r.route_path == route_path and r.user_id == user_id and r.id != skip_id
            for r in records
        )

    # ── StorageAdapter ────────────────────────────────────────────────────────

    def get_records(self, user_id: Optional[str] = None) -> List[SEORecord]:
        records = self._load()
        if user_id is not None:
            records = [r for r in records if r.user_id == user_id]
        return records

    def get_record_by_id(self, record_id: str) -> Optional[SEORecord]:
        return next((r for r in self._load() if r.id == record_id), None)

    def get_record_by_route(self, route_path: str, user_id: Optional[str] = None) -> Optional[SEORecord]:
        return next(
            (
                r for r in self._load()
                if r.route_path == route_path and (user_id is None or r.user_id == user_id)
            ),
            None,
        )

    def create_record(self, payload: SEORecordCreate) -> SEORecord:
        records = self._load()
        user_id = payload.user_id or DEFAULT_USER_ID
        if self._route_taken(records, payload.route_path, user_id):
            raise DuplicateRouteError(payload.route_path, user_id)

        record = new_record(payload)
        records.append(record)
        self._save(records)
        logger.info("Created record %s for route '%s'", record.id, record.route_path)
        return record

    def update_record(self, record_id: str, changes: SEORecordUpdate) -> Optional[SEORecord]:
        records = self._load()
        for idx, record in enumerate(records):
            if record.id != record_id:
                continue
            updated = merge_record(record, changes)
            if updated.route_path != record.route_path and self._route_taken(
                records, updated.route_path, updated.user_id, skip_id=record_id,
            ):
                raise DuplicateRouteError(updated.route_path, updated.user_id)
            records[idx] = updated
            self._save(records)
            return updated
        logger.debug("update_record: id %s not found", record_id)
        return None

    def delete_record(self, record_id: str) -> bool:
        records = self._load()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        logger.info("Deleted record %s", record_id)
        return True

    def is_available(self) -> bool:
        directory = self.file_path.parent if str(self.file_path.parent) else Path(".")
        return directory.is_dir() and os.access(directory, os.W_OK)
