"""
sitemap.xml generation from SEO records.

Only records with a canonical URL end up in the sitemap: the canonical is
the URL search engines should index, so a record without one has nothing
to contribute.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Literal, Optional, Tuple
from urllib.parse import urljoin
from xml.sax.saxutils import escape

from pydantic import BaseModel

from seo_console.core.logging_config import get_logger
from seo_console.core.models import SEORecord, is_absolute_http_url

logger = get_logger(__name__)

ChangeFreq = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


class SitemapEntry(BaseModel):
    """One ``<url>`` element. ``loc`` may be relative to the site base URL."""

    loc: str
    lastmod: Optional[str] = None
    changefreq: Optional[ChangeFreq] = None
    priority: Optional[float] = None


# ============================================================================
# XML
# ============================================================================

def _url_element(entry: SitemapEntry, base_url: str) -> str:
    loc = entry.loc if entry.loc.startswith("http") else urljoin(base_url, entry.loc)
    lines = ["  <url>", f"    <loc>{escape(loc, _XML_ENTITIES)}</loc>"]
    if entry.lastmod:
        lines.append(f"    <lastmod>{escape(entry.lastmod)}</lastmod>")
    if entry.changefreq:
        lines.append(f"    <changefreq>{entry.changefreq}</changefreq>")
    if entry.priority is not None:
        lines.append(f"    <priority>{entry.priority}</priority>")
    lines.append("  </url>")
    return "\n".join(lines)


def generate_sitemap_xml(base_url: str, entries: Iterable[SitemapEntry]) -> str:
    """Render a sitemap.xml document.

    Args:
        base_url: Site root used to resolve relative ``loc`` values.
        entries:  Entries in output order.

    Returns:
        The XML document as a string (UTF-8 declaration included).
    """
    body = "\n".join(_url_element(entry, base_url) for entry in entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<urlset xmlns="{_SITEMAP_NS}">\n'
        f"{body}\n"
        "</urlset>"
    )


# ============================================================================
# RECORDS → ENTRIES
# ============================================================================

def _lastmod(record: SEORecord) -> Optional[str]:
    stamp = record.modified_time or record.last_validated_at
    return stamp.date().isoformat() if stamp else None


def _frequency_for_route(route_path: str) -> Tuple[ChangeFreq, float]:
    if route_path == "/":
        return "daily", 1.0
    if "/blog/" in route_path or "/posts/" in route_path:
        return "weekly", 0.8
    return "monthly", 0.6


def seo_records_to_sitemap_entries(records: Iterable[SEORecord], base_url: str) -> List[SitemapEntry]:
    """Build sitemap entries from records that have a canonical URL.

    Home is ``daily``/1.0, blog and post routes ``weekly``/0.8, everything
    else ``monthly``/0.6. The result is sorted by priority (highest first),
    then by URL.
    """
    entries: List[SitemapEntry] = []
    for record in records:
        if not record.canonical_url or not record.canonical_url.strip():
            continue
        changefreq, priority = _frequency_for_route(record.route_path)
        entries.append(SitemapEntry(
            loc=record.canonical_url,
            lastmod=_lastmod(record),
            changefreq=changefreq,
            priority=priority,
        ))

    entries.sort(key=lambda e: (-(e.priority or 0.0), e.loc))
    logger.debug("Sitemap: %d entr(y/ies) from records (base %s)", len(entries), base_url)
    return entries


def generate_sitemap_from_records(records: Iterable[SEORecord], base_url: str) -> str:
    """Shortcut for :func:`seo_records_to_sitemap_entries` + :func:`generate_sitemap_xml`."""
    return generate_sitemap_xml(base_url, seo_records_to_sitemap_entries(records, base_url))


# ============================================================================
# VALIDATION
# ============================================================================

def _is_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        try:
            datetime.fromisoformat(value)
        except ValueError:
            return False
    return True


def validate_sitemap_entry(entry: SitemapEntry) -> Tuple[bool, List[str]]:
    """Check an entry before it is published.

    Returns:
        ``(valid, errors)``; ``errors`` is empty when ``valid`` is True.
    """
    errors: List[str] = []

    if not entry.loc:
        errors.append("Location (loc) is required")
    elif not is_absolute_http_url(entry.loc):
        errors.append("Location must be a valid URL")

    if entry.priority is not None and not 0.0 <= entry.priority <= 1.0:
        errors.append("Priority must be between 0.0 and 1.0")

    if entry.lastmod and not _is_date(entry.lastmod):
        errors.append("Lastmod must be a valid date (YYYY-MM-DD)")

    return not errors, errors
