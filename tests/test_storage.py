"""
Unit tests for seo_console/storage (file and SQL backends, factory).
"""

from __future__ import annotations

import json

import pytest

from seo_console.core.models import (
    SEORecordCreate,
    SEORecordUpdate,
    StorageConfig,
    ValidationStatus,
)
from seo_console.storage.adapter import (
    DEFAULT_USER_ID,
    DuplicateRouteError,
    RecordNotFoundError,
)
from seo_console.storage.factory import create_storage_adapter
from seo_console.storage.file_storage import FileStorage
from seo_console.storage.sql_storage import SqlStorage


# ============================================================================
# Shared behaviour (both backends)
# ============================================================================

class TestStorageAdapter:
    def test_starts_empty(self, store):
        assert store.get_records() == []

    def test_create_assigns_id_and_defaults(self, store):
        record = store.create_record(SEORecordCreate(route_path="/about", title="About"))
        assert record.id
        assert record.user_id == DEFAULT_USER_ID
        assert record.validation_status == ValidationStatus.PENDING
        assert record.created_at is not None
        assert record.created_at == record.updated_at

    def test_get_by_id_and_route(self, store):
        record = store.create_record(SEORecordCreate(route_path="/about", title="About"))
        assert store.get_record_by_id(record.id).title == "About"
        assert store.get_record_by_route("/about").id == record.id

    def test_unknown_lookups_return_none(self, store):
        assert store.get_record_by_id("nope") is None
        assert store.get_record_by_route("/nope") is None

    def test_round_trips_all_field_kinds(self, store):
        payload = SEORecordCreate(
            route_path="/p",
            keywords=["a", "b"],
            og_type="article",
            og_image_width=1200,
            twitter_card="summary",
            structured_data={"@type": "Article", "wordCount": 300},
            canonical_url="https://x.com/p",
        )
        created = store.create_record(payload)
        loaded = store.get_record_by_id(created.id)
        assert loaded.keywords == ["a", "b"]
        assert loaded.og_type.value == "article"
        assert loaded.og_image_width == 1200
        assert loaded.twitter_card.value == "summary"
        assert loaded.structured_data == {"@type": "Article", "wordCount": 300}

    def test_duplicate_route_same_user_rejected(self, store):
        store.create_record(SEORecordCreate(route_path="/a"))
        with pytest.raises(DuplicateRouteError):
            store.create_record(SEORecordCreate(route_path="/a"))

    def test_same_route_other_user_allowed(self, store):
        store.create_record(SEORecordCreate(route_path="/a", user_id="u1"))
        store.create_record(SEORecordCreate(route_path="/a", user_id="u2"))
        assert len(store.get_records()) == 2
        assert len(store.get_records("u1")) == 1
        assert store.get_record_by_route("/a", "u2").user_id == "u2"

    def test_update_applies_only_set_fields(self, store):
        record = store.create_record(SEORecordCreate(route_path="/a", title="Old", description="Keep"))
        updated = store.update_record(record.id, SEORecordUpdate(title="New"))
        assert updated.title == "New"
        assert updated.description == "Keep"
        assert store.get_record_by_id(record.id).title == "New"

    def test_update_can_clear_field(self, store):
        record = store.create_record(SEORecordCreate(route_path="/a", description="D"))
        updated = store.update_record(record.id, SEORecordUpdate(description=None))
        assert updated.description is None

    def test_update_validation_state(self, store):
        record = store.create_record(SEORecordCreate(route_path="/a"))
        updated = store.update_record(
            record.id,
            SEORecordUpdate(validation_status="invalid", validation_errors={"isValid": False, "issues": []}),
        )
        assert updated.validation_status == ValidationStatus.INVALID
        assert store.get_record_by_id(record.id).validation_errors == {"isValid": False, "issues": []}

    def test_update_unknown_returns_none(self, store):
        assert store.update_record("nope", SEORecordUpdate(title="x")) is None

    def test_rename_onto_taken_route_rejected(self, store):
        store.create_record(SEORecordCreate(route_path="/a"))
        other = store.create_record(SEORecordCreate(route_path="/b"))
        with pytest.raises(DuplicateRouteError):
            store.update_record(other.id, SEORecordUpdate(route_path="/a"))

    def test_delete(self, store):
        record = store.create_record(SEORecordCreate(route_path="/a"))
        assert store.delete_record(record.id) is True
        assert store.get_record_by_id(record.id) is None
        assert store.delete_record(record.id) is False

    def test_require_record_raises(self, store):
        with pytest.raises(RecordNotFoundError):
            store.require_record("nope")

    def test_is_available(self, store):
        assert store.is_available() is True


# ============================================================================
# FileStorage specifics
# ============================================================================

class TestFileStorage:
    def test_file_created_on_first_use(self, tmp_path):
        path = tmp_path / "records.json"
        FileStorage(path).get_records()
        assert json.loads(path.read_text(encoding="utf-8")) == []

    def test_file_uses_camel_case(self, file_store):
        file_store.create_record(SEORecordCreate(route_path="/a", og_title="T"))
        [item] = json.loads(file_store.file_path.read_text(encoding="utf-8"))
        assert item["routePath"] == "/a"
        assert item["ogTitle"] == "T"
        assert item["validationStatus"] == "pending"

    def test_unavailable_when_directory_missing(self, tmp_path):
        assert FileStorage(tmp_path / "missing" / "records.json").is_available() is False


# ============================================================================
# Factory
# ============================================================================

class TestCreateStorageAdapter:
    def test_default_is_file(self):
        assert isinstance(create_storage_adapter(), FileStorage)

    def test_file_path(self, tmp_path):
        store = create_storage_adapter(StorageConfig(file_path=tmp_path / "x.json"))
        assert store.file_path == tmp_path / "x.json"

    def test_dsn_selects_sql(self, tmp_path):
        store = create_storage_adapter(StorageConfig(dsn=f"sqlite:///{tmp_path / 'x.db'}"))
        assert isinstance(store, SqlStorage)
