"""
Validation runs against stored records.

Ties the validators to a :class:`StorageAdapter`: validate a record's live
page and persist the outcome, validate every record of a site, and seed
records in bulk or from a live site's current metadata.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, List, Mapping, Optional, Union
from urllib.parse import urljoin

from pydantic import ValidationError

from seo_console.core.logging_config import get_logger
from seo_console.core.models import (
    BatchItemResult,
    SEORecord,
    SEORecordCreate,
    SEORecordUpdate,
    ValidationResult,
    ValidationStatus,
    ValidatorConfig,
)
from seo_console.html_validator import validate_url
from seo_console.metadata_extractor import extract_metadata_from_url, metadata_to_seo_record
from seo_console.storage.adapter import DuplicateRouteError, RecordNotFoundError, StorageAdapter

logger = get_logger(__name__)


def status_for_result(result: ValidationResult) -> ValidationStatus:
    """critical issue → invalid, only lesser issues → warning, none → valid."""
    if result.has_critical:
        return ValidationStatus.INVALID
    if result.issues:
        return ValidationStatus.WARNING
    return ValidationStatus.VALID


def record_url(base_url: str, record: SEORecord) -> str:
    """Absolute page URL for a record: ``base_url`` + ``route_path``."""
    return urljoin(base_url.rstrip("/") + "/", record.route_path.lstrip("/"))


# ============================================================================
# SINGLE RECORD
# ============================================================================

def apply_validation_result(store: StorageAdapter, record_id: str, result: ValidationResult) -> SEORecord:
    """Persist a validation outcome on the record.

    Raises:
        RecordNotFoundError: If ``record_id`` is unknown.
    """
    changes = SEORecordUpdate(
        validation_status=status_for_result(result),
        validation_errors=result.to_json_dict(),
        last_validated_at=result.validated_at,
    )
    updated = store.update_record(record_id, changes)
    if updated is None:
        raise RecordNotFoundError(f"SEO record with id {record_id} not found")
    logger.info("Record %s → %s", record_id, updated.validation_status.value)
    return updated


def validate_record(
    store: StorageAdapter,
    record_id: str,
    base_url: str,
    config: ValidatorConfig | None = None,
) -> ValidationResult:
    """Fetch the record's page under ``base_url``, validate it and persist the result.

    Raises:
        RecordNotFoundError: If ``record_id`` is unknown.
        ValueError:          If ``base_url`` is not an absolute http(s) URL.
    """
    record = store.require_record(record_id)
    result = validate_url(record_url(base_url, record), record, config)
    apply_validation_result(store, record.id, result)
    return result


# ============================================================================
# BATCHES
# ============================================================================

def bulk_validate(
    store: StorageAdapter,
    base_url: str,
    config: ValidatorConfig | None = None,
    user_id: Optional[str] = None,
) -> List[BatchItemResult]:
    """Validate every stored record (optionally one owner's) in turn.

    A failure on one record is reported in its result and does not stop
    the run. ``import_delay`` separates consecutive page fetches.
    """
    config = config or ValidatorConfig()
    records = store.get_records(user_id)
    total = len(records)
    logger.info("bulk_validate('%s') → %d record(s)", base_url, total)

    results: List[BatchItemResult] = []
    for idx, record in enumerate(records, start=1):
        logger.info("[%d/%d] Validating: %s", idx, total, record.route_path)
        try:
            result = validate_record(store, record.id, base_url, config)
            results.append(BatchItemResult(
                route=record.route_path,
                success=True,
                record_id=record.id,
                status=status_for_result(result),
            ))
        except Exception as exc:
            logger.error("  Validation error for '%s': %s", record.route_path, exc, exc_info=True)
            results.append(BatchItemResult(
                route=record.route_path, success=False, record_id=record.id, error=str(exc),
            ))
        if idx < total:
            time.sleep(config.import_delay)

    invalid = sum(1 for r in results if r.status == ValidationStatus.INVALID)
    logger.info("bulk_validate → %d validated, %d invalid", len(results), invalid)
    return results


def _payload_route(payload: Union[SEORecordCreate, Mapping[str, Any]]) -> Optional[str]:
    if isinstance(payload, SEORecordCreate):
        return payload.route_path
    return payload.get("routePath") or payload.get("route_path")


def bulk_create_records(
    store: StorageAdapter,
    payloads: Iterable[Union[SEORecordCreate, Mapping[str, Any]]],
) -> List[BatchItemResult]:
    """Create one record per payload; invalid or duplicate payloads are reported, not raised."""
    results: List[BatchItemResult] = []
    for payload in payloads:
        route = _payload_route(payload)
        try:
            create = (
                payload if isinstance(payload, SEORecordCreate)
                else SEORecordCreate.model_validate(payload)
            )
            record = store.create_record(create)
            results.append(BatchItemResult(route=record.route_path, success=True, record_id=record.id))
        except (ValidationError, DuplicateRouteError) as exc:
            logger.warning("  Skipping record for '%s': %s", route, exc)
            results.append(BatchItemResult(route=route, success=False, error=str(exc)))

    created = sum(1 for r in results if r.success)
    logger.info("bulk_create_records → %d/%d created", created, len(results))
    return results


def import_from_site(
    store: StorageAdapter,
    base_url: str,
    routes: Optional[List[str]] = None,
    config: ValidatorConfig | None = None,
    user_id: Optional[str] = None,
) -> List[BatchItemResult]:
    """Seed records from the metadata a live site currently serves.

    Args:
        store:    Destination store.
        base_url: Site root, e.g. ``https://example.com``.
        routes:   Route paths to import; defaults to ``["/"]``.
        config:   HTTP settings; ``import_delay`` paces the requests.
        user_id:  Owner of the created records (default: ``"extracted"``).

    Returns:
        One :class:`BatchItemResult` per route. Routes whose page yields no
        metadata at all fail with ``"No metadata found"``.
    """
    config = config or ValidatorConfig()
    routes = routes or ["/"]
    logger.info("import_from_site('%s', %d route(s))", base_url, len(routes))

    results: List[BatchItemResult] = []
    for idx, route in enumerate(routes, start=1):
        logger.info("[%d/%d] Importing: %s", idx, len(routes), route)
        try:
            metadata = extract_metadata_from_url(urljoin(base_url, route), config)
            if metadata.is_empty():
                logger.warning("  No metadata found for '%s'", route)
                results.append(BatchItemResult(route=route, success=False, error="No metadata found"))
                continue

            payload = metadata_to_seo_record(metadata, route, user_id=user_id or "extracted")
            record = store.create_record(payload)
            results.append(BatchItemResult(route=route, success=True, record_id=record.id))
            time.sleep(config.import_delay)
        except Exception as exc:
            logger.error("  Import error for '%s': %s", route, exc, exc_info=True)
            results.append(BatchItemResult(route=route, success=False, error=str(exc)))

    imported = sum(1 for r in results if r.success)
    logger.info("import_from_site → %d/%d imported", imported, len(results))
    return results
