"""
SQL record store (SQLAlchemy Core).

One row per record in the ``seo_records`` table; column names match the
model field names, so rows map straight onto :class:`SEORecord`. The table
is created on first use. SQLite is the default; PostgreSQL works through
the same URL-based engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Engine,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError

from seo_console.core.logging_config import get_logger
from seo_console.core.models import SEORecord, SEORecordCreate, SEORecordUpdate
from seo_console.db.connection import check_connection, get_engine
from seo_console.storage.adapter import (
    DEFAULT_USER_ID,
    DuplicateRouteError,
    StorageAdapter,
    merge_record,
    new_record,
)

logger = get_logger(__name__)

TABLE_NAME = "seo_records"

metadata = MetaData()

seo_records = Table(
    TABLE_NAME,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(255), nullable=False),
    Column("route_path", Text, nullable=False),
    # Basic metadata
    Column("title", Text),
    Column("description", Text),
    Column("keywords", JSON),
    # Open Graph
    Column("og_title", Text),
    Column("og_description", Text),
    Column("og_image_url", Text),
    Column("og_image_width", Integer),
    Column("og_image_height", Integer),
    Column("og_type", String(32)),
    Column("og_url", Text),
    Column("og_site_name", Text),
    # Twitter Card
    Column("twitter_card", String(32)),
    Column("twitter_title", Text),
    Column("twitter_description", Text),
    Column("twitter_image_url", Text),
    Column("twitter_site", Text),
    Column("twitter_creator", Text),
    # Additional metadata
    Column("canonical_url", Text),
    Column("robots", Text),
    Column("author", Text),
    Column("published_time", DateTime(timezone=True)),
    Column("modified_time", DateTime(timezone=True)),
    Column("structured_data", JSON),
    # Validation state
    Column("validation_status", String(16), nullable=False, default="pending"),
    Column("last_validated_at", DateTime(timezone=True)),
    Column("validation_errors", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("user_id", "route_path", name="uq_seo_records_user_route"),
)


def _to_row(record: SEORecord) -> Dict[str, Any]:
    """Model → column values (enums stored by value, JSON columns as-is)."""
    row = record.model_dump()
    for key, value in row.items():
        if isinstance(value, Enum):
            row[key] = value.value
    if record.validation_errors is not None:
        row["validation_errors"] = record.model_dump(mode="json")["validation_errors"]
    return row


def _from_row(row: Any) -> SEORecord:
    return SEORecord.model_validate(dict(row._mapping))


class SqlStorage(StorageAdapter):
    """Records persisted to a SQL database."""

    def __init__(self, dsn: str | None = None, engine: Engine | None = None):
        self.engine = engine or get_engine(dsn)
        self._table_ready = False

    def _ensure_table(self) -> None:
        if self._table_ready:
            return
        metadata.create_all(self.engine, tables=[seo_records])
        self._table_ready = True
        logger.debug("Table '%s' ready on %s", TABLE_NAME, self.engine.url)

    def _select_one(self, *criteria) -> Optional[SEORecord]:
        self._ensure_table()
        stmt = select(seo_records).where(*criteria).order_by(seo_records.c.created_at).limit(1)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _from_row(row) if row is not None else None

    # ── StorageAdapter ────────────────────────────────────────────────────────

    def get_records(self, user_id: Optional[str] = None) -> List[SEORecord]:
        self._ensure_table()
        stmt = select(seo_records).order_by(seo_records.c.created_at, seo_records.c.route_path)
        if user_id is not None:
            stmt = stmt.where(seo_records.c.user_id == user_id)
        with self.engine.connect() as conn:
            return [_from_row(row) for row in conn.execute(stmt)]

    def get_record_by_id(self, record_id: str) -> Optional[SEORecord]:
        return self._select_one(seo_records.c.id == record_id)

    def get_record_by_route(self, route_path: str, user_id: Optional[str] = None) -> Optional[SEORecord]:
        criteria = [seo_records.c.route_path == route_path]
        if user_id is not None:
            criteria.append(seo_records.c.user_id == user_id)
        return self._select_one(*criteria)

    def create_record(self, payload: SEORecordCreate) -> SEORecord:
        user_id = payload.user_id or DEFAULT_USER_ID
        if self.get_record_by_route(payload.route_path, user_id) is not None:
            raise DuplicateRouteError(payload.route_path, user_id)

        record = new_record(payload)
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(seo_records).values(**_to_row(record)))
        except IntegrityError as exc:
            raise DuplicateRouteError(payload.route_path, user_id) from exc
        logger.info("Created record %s for route '%s'", record.id, record.route_path)
        return record

    def update_record(self, record_id: str, changes: SEORecordUpdate) -> Optional[SEORecord]:
        current = self.get_record_by_id(record_id)
        if current is None:
            logger.debug("update_record: id %s not found", record_id)
            return None

        updated = merge_record(current, changes)
        row = _to_row(updated)
        row.pop("id")
        try:
            with self.engine.begin() as conn:
                conn.execute(update(seo_records).where(seo_records.c.id == record_id).values(**row))
        except IntegrityError as exc:
            raise DuplicateRouteError(updated.route_path, updated.user_id) from exc
        return updated

    def delete_record(self, record_id: str) -> bool:
        self._ensure_table()
        with self.engine.begin() as conn:
            result = conn.execute(delete(seo_records).where(seo_records.c.id == record_id))
        if result.rowcount:
            logger.info("Deleted record %s", record_id)
        return bool(result.rowcount)

    def is_available(self) -> bool:
        return check_connection(self.engine)
