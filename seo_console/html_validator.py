"""
HTML validation of live pages against their SEO record.

Each metadata field set on the record is compared with the tag found in
the page. An absent tag is "missing"; a tag present with an empty value is
missing too unless the record itself expects the empty string. The issue
message and ``actual`` say which of the two it was. Fields the record leaves
unset (``None``) are skipped entirely.

Severity rules:

  ============== ===================== ===========================
  Field          critical              warning
  ============== ===================== ===========================
  title          missing               mismatch, > 60 characters
  description    missing               mismatch, > 160 characters
  og:title       missing
  og:description                       missing
  og:image       missing
  og:type                              mismatch
  og:url                               mismatch
  twitter:card                         mismatch
  twitter:title                        missing
  twitter:image                        missing
  canonical      missing               mismatch, not absolute
  ============== ===================== ===========================
"""

from __future__ import annotations

import requests
from bs4 import BeautifulSoup

from seo_console.core.http import http_get, is_success, require_http_url
from seo_console.core.logging_config import get_logger
from seo_console.core.models import (
    SEOMetadata,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidatorConfig,
    is_absolute_http_url,
)
from seo_console.metadata_extractor import find_canonical, find_meta, find_title, parse_html

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 60
DESCRIPTION_MAX_LENGTH = 160


# ============================================================================
# HELPERS
# ============================================================================

def _is_missing(expected: str | None, actual: str | None) -> bool:
    """An absent tag is always missing; an empty one only when a value is expected."""
    return actual is None or (actual == "" and expected != "")


def _missing_message(label: str, actual: str | None) -> str:
    return f"{label} is missing" if actual is None else f"{label} is empty"


def _twitter_meta(soup: BeautifulSoup, key: str) -> str | None:
    """Twitter tags are specified with ``name=``; ``property=`` is tolerated."""
    value = find_meta(soup, name=f"twitter:{key}")
    if value is None:
        value = find_meta(soup, prop=f"twitter:{key}")
    return value


def _expect_present(
    issues: list[ValidationIssue],
    field: str,
    label: str,
    expected: str | None,
    actual: str | None,
    severity: Severity,
) -> None:
    """Append a "missing" issue when ``expected`` is set and the tag is absent/empty."""
    if expected is not None and _is_missing(expected, actual):
        issues.append(ValidationIssue(
            field=field,
            severity=severity,
            message=_missing_message(label, actual),
            expected=expected,
            actual=actual,
        ))


def _expect_equal(
    issues: list[ValidationIssue],
    field: str,
    label: str,
    expected: str | None,
    actual: str | None,
) -> None:
    """Append a mismatch warning when ``expected`` is set and differs from the page."""
    if expected is not None and actual != expected:
        issues.append(ValidationIssue(
            field=field,
            severity=Severity.WARNING,
            message=f"{label} does not match SEO record",
            expected=expected,
            actual=actual,
        ))


def _check_text_field(
    issues: list[ValidationIssue],
    field: str,
    label: str,
    expected: str | None,
    actual: str | None,
    max_length: int,
) -> None:
    """Title/description: critical when missing, warning on mismatch or excess length."""
    if expected is None:
        return
    if _is_missing(expected, actual):
        _expect_present(issues, field, label, expected, actual, Severity.CRITICAL)
        return
    _expect_equal(issues, field, label, expected, actual)
    if len(actual) > max_length:
        issues.append(ValidationIssue(
            field=field,
            severity=Severity.WARNING,
            message=f"{label} exceeds recommended {max_length} characters",
            expected=f"<= {max_length} characters",
            actual=f"{len(actual)} characters",
        ))


def _enum_value(value: object) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", value)


# ============================================================================
# VALIDATION
# ============================================================================

def validate_html(html: str, record: SEOMetadata) -> ValidationResult:
    """Validate an HTML document against an SEO record.

    Args:
        html:   Raw HTML of the page.
        record: Expected metadata (an :class:`SEORecord` or any
                :class:`SEOMetadata`).

    Returns:
        :class:`ValidationResult`; ``is_valid`` is False iff a critical
        issue was found. Identical inputs yield identical issues.

    Raises:
        TypeError: If ``html`` is not a string.
    """
    soup = parse_html(html)
    issues: list[ValidationIssue] = []

    # ── Title & description ───────────────────────────────────────────────────
    _check_text_field(
        issues, "title", "Title tag",
        record.title, find_title(soup), TITLE_MAX_LENGTH,
    )
    _check_text_field(
        issues, "description", "Meta description",
        record.description, find_meta(soup, name="description"), DESCRIPTION_MAX_LENGTH,
    )

    # ── Open Graph ────────────────────────────────────────────────────────────
    _expect_present(
        issues, "og:title", "Open Graph title",
        record.og_title, find_meta(soup, prop="og:title"), Severity.CRITICAL,
    )
    _expect_present(
        issues, "og:description", "Open Graph description",
        record.og_description, find_meta(soup, prop="og:description"), Severity.WARNING,
    )
    _expect_present(
        issues, "og:image", "Open Graph image",
        record.og_image_url, find_meta(soup, prop="og:image"), Severity.CRITICAL,
    )
    _expect_equal(
        issues, "og:type", "Open Graph type",
        _enum_value(record.og_type), find_meta(soup, prop="og:type"),
    )
    _expect_equal(
        issues, "og:url", "Open Graph URL",
        record.og_url, find_meta(soup, prop="og:url"),
    )

    # ── Twitter Card ──────────────────────────────────────────────────────────
    _expect_equal(
        issues, "twitter:card", "Twitter card type",
        _enum_value(record.twitter_card), _twitter_meta(soup, "card"),
    )
    _expect_present(
        issues, "twitter:title", "Twitter title",
        record.twitter_title, _twitter_meta(soup, "title"), Severity.WARNING,
    )
    _expect_present(
        issues, "twitter:image", "Twitter image",
        record.twitter_image_url, _twitter_meta(soup, "image"), Severity.WARNING,
    )

    # ── Canonical ─────────────────────────────────────────────────────────────
    if record.canonical_url is not None:
        canonical = find_canonical(soup)
        if _is_missing(record.canonical_url, canonical):
            _expect_present(
                issues, "canonical", "Canonical URL",
                record.canonical_url, canonical, Severity.CRITICAL,
            )
        else:
            _expect_equal(issues, "canonical", "Canonical URL", record.canonical_url, canonical)
            if not is_absolute_http_url(canonical):
                issues.append(ValidationIssue(
                    field="canonical",
                    severity=Severity.WARNING,
                    message="Canonical URL should be absolute",
                    actual=canonical,
                ))

    result = ValidationResult.from_issues(issues)
    logger.debug(
        "validate_html → valid=%s, %d issue(s)", result.is_valid, len(result.issues),
    )
    return result


def _fetch_failure(url: str, message: str) -> ValidationResult:
    return ValidationResult.from_issues([
        ValidationIssue(
            field="fetch",
            severity=Severity.CRITICAL,
            message=message,
            actual=url,
        )
    ])


def validate_url(
    url: str,
    record: SEOMetadata,
    config: ValidatorConfig | None = None,
) -> ValidationResult:
    """Fetch a page and validate it against ``record``.

    A non-2xx response, a timeout or a connection error yields a single
    critical ``fetch`` issue; the page is not parsed in that case.

    Raises:
        ValueError: If ``url`` is not an absolute http(s) URL.
    """
    url = require_http_url(url)
    config = config or ValidatorConfig()
    logger.info("validate_url('%s')", url)

    try:
        resp = http_get(url, config, timeout=config.html_timeout)
    except requests.RequestException as exc:
        logger.warning("  Fetch failed for '%s': %s", url, exc)
        return _fetch_failure(url, f"Failed to fetch URL: {exc}")

    if not is_success(resp):
        logger.warning("  Fetch failed for '%s': HTTP %d", url, resp.status_code)
        return _fetch_failure(
            url, f"Failed to fetch URL: {resp.status_code} {resp.reason or ''}".rstrip(),
        )

    return validate_html(resp.text, record)
