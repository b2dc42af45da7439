"""
Import/export of SEO records and a per-site issue summary.

CSV exports carry the report columns only (route, title, description,
status, canonical, OG image, robots); JSON exports carry complete records
in their camelCase wire form. Both formats can be imported back as new
records.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from pydantic import BaseModel

from seo_console.core.logging_config import get_logger
from seo_console.core.models import BatchItemResult, SEORecord
from seo_console.html_validator import TITLE_MAX_LENGTH
from seo_console.storage.adapter import StorageAdapter
from seo_console.validation_runner import bulk_create_records

logger = get_logger(__name__)

# Report column → record field (camelCase wire name)
CSV_COLUMNS: Dict[str, str] = {
    "Route Path": "routePath",
    "Title": "title",
    "Description": "description",
    "Status": "validationStatus",
    "Canonical URL": "canonicalUrl",
    "OG Image": "ogImageUrl",
    "Robots": "robots",
}


# ============================================================================
# EXPORT
# ============================================================================

def records_to_dataframe(records: Iterable[SEORecord]) -> pd.DataFrame:
    """One row per record with the report columns; unset values are blank."""
    rows = []
    for record in records:
        data = record.to_json_dict()
        rows.append({col: data.get(field) or "" for col, field in CSV_COLUMNS.items()})
    return pd.DataFrame(rows, columns=list(CSV_COLUMNS))


def export_records_csv(records: Iterable[SEORecord], path: str | Path | None = None) -> str:
    """Render records as CSV with every cell quoted.

    Args:
        records: Records to export.
        path:    Optional destination file; the CSV text is returned either way.

    Returns:
        The CSV content.
    """
    df = records_to_dataframe(records)
    content = df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    if path is not None:
        Path(path).write_text(content, encoding="utf-8")
        logger.info("Exported %d record(s) to '%s'", len(df), path)
    return content


def export_records_json(records: Iterable[SEORecord], path: str | Path | None = None) -> str:
    """Render complete records as a JSON array (camelCase keys, 2-space indent)."""
    items = [record.to_json_dict() for record in records]
    content = json.dumps(items, indent=2, ensure_ascii=False)
    if path is not None:
        Path(path).write_text(content, encoding="utf-8")
        logger.info("Exported %d record(s) to '%s'", len(items), path)
    return content


# ============================================================================
# IMPORT
# ============================================================================

def _read_csv_payloads(source: str | Path) -> List[Dict[str, Any]]:
    df = pd.read_csv(source, dtype=str, keep_default_na=False)
    unknown = [col for col in df.columns if col not in CSV_COLUMNS and col not in CSV_COLUMNS.values()]
    if unknown:
        logger.debug("Ignoring unknown CSV column(s): %s", ", ".join(unknown))

    payloads: List[Dict[str, Any]] = []
    for row in df.to_dict(orient="records"):
        payload: Dict[str, Any] = {}
        for col, field in CSV_COLUMNS.items():
            value = row.get(col, row.get(field, ""))
            # CSV has no null: a blank cell means "not set".
            payload[field] = (value.strip() or None) if isinstance(value, str) else None
        payload.pop("validationStatus")
        payloads.append(payload)
    return payloads


def load_records_file(path: str | Path) -> List[Dict[str, Any]]:
    """Read record payloads from a ``.csv`` or ``.json`` file.

    Payloads are returned unvalidated so that one bad row does not prevent
    the others from being imported.

    Raises:
        ValueError: For another extension, or JSON that is not a list of objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        payloads = _read_csv_payloads(path)
    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ValueError(f"'{path}' must contain a JSON array of record objects.")
        payloads = data
    else:
        raise ValueError(f"Unsupported import format '{suffix}' (expected .csv or .json).")

    logger.info("Loaded %d payload(s) from '%s'", len(payloads), path)
    return payloads


def import_records(store: StorageAdapter, path: str | Path, user_id: Optional[str] = None) -> List[BatchItemResult]:
    """Create a record for each payload in ``path``; failures are reported per row."""
    payloads = load_records_file(path)
    if user_id is not None:
        payloads = [{**payload, "userId": user_id} for payload in payloads]
    return bulk_create_records(store, payloads)


# ============================================================================
# SUMMARY
# ============================================================================

class RecordIssueSummary(BaseModel):
    total: int = 0
    valid: int = 0
    warning: int = 0
    invalid: int = 0
    pending: int = 0
    missing_descriptions: int = 0
    missing_titles: int = 0
    missing_canonical_urls: int = 0
    missing_og_images: int = 0
    titles_too_long: int = 0


def summarize_record_issues(records: Iterable[SEORecord]) -> RecordIssueSummary:
    """Count records per validation status and per common metadata gap."""
    summary = RecordIssueSummary()
    for record in records:
        summary.total += 1
        status = record.validation_status.value
        setattr(summary, status, getattr(summary, status) + 1)

        if not record.description:
            summary.missing_descriptions += 1
        if not record.title:
            summary.missing_titles += 1
        elif len(record.title) > TITLE_MAX_LENGTH:
            summary.titles_too_long += 1
        if not record.canonical_url:
            summary.missing_canonical_urls += 1
        if not record.og_image_url:
            summary.missing_og_images += 1
    return summary
