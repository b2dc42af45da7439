"""
Metadata extraction from HTML pages.

Parses a document once with BeautifulSoup and reads the SEO-relevant tags:
``<title>``, ``<meta name=...>``, ``<meta property="og:...">`` and
``<link rel="canonical">``. The tag lookups are shared with the HTML
validator, which needs to tell an absent tag from an empty one; the
extractor itself collapses both to ``None``.
"""

from __future__ import annotations

import time
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from seo_console.core.http import http_get, is_success, require_http_url
from seo_console.core.logging_config import get_logger
from seo_console.core.models import (
    ExtractedMetadata,
    OGType,
    SEORecordCreate,
    ValidatorConfig,
    is_absolute_http_url,
)

logger = get_logger(__name__)

_ROBOTS_DIRECTIVES: frozenset[str] = frozenset({
    "index", "noindex", "follow", "nofollow", "all", "none",
    "noarchive", "nosnippet", "noimageindex", "notranslate",
})


# ============================================================================
# DOM HELPERS
# ============================================================================

def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML document.

    Args:
        html: Raw HTML string.

    Returns:
        Parsed :class:`BeautifulSoup` tree.

    Raises:
        TypeError: If ``html`` is not a string.
    """
    if not isinstance(html, str):
        raise TypeError(f"HTML must be a str, got {type(html).__name__}.")
    return BeautifulSoup(html, "html.parser")


def find_title(soup: BeautifulSoup) -> str | None:
    """Text of the first ``<title>``: ``None`` if absent, ``""`` if empty."""
    tag = soup.find("title")
    if tag is None:
        return None
    return tag.get_text().strip()


def find_meta(soup: BeautifulSoup, *, name: str | None = None, prop: str | None = None) -> str | None:
    """``content`` of the first matching ``<meta>``.

    Match on ``name=`` or ``property=`` (case-insensitive value). Returns
    ``None`` when no tag matches and ``""`` when the tag has no content.
    """
    attr, wanted = ("name", name) if name is not None else ("property", prop)
    wanted = (wanted or "").lower()
    for tag in soup.find_all("meta"):
        value = tag.get(attr)
        if value is not None and value.strip().lower() == wanted:
            return (tag.get("content") or "").strip()
    return None


def find_canonical(soup: BeautifulSoup) -> str | None:
    """``href`` of ``<link rel="canonical">``: ``None`` if absent."""
    tag = soup.find("link", rel="canonical")
    if tag is None:
        return None
    return (tag.get("href") or "").strip()


def _or_none(value: str | None) -> str | None:
    return value if value else None


# ============================================================================
# EXTRACTION
# ============================================================================

def extract_metadata_from_html(html: str, base_url: str | None = None) -> ExtractedMetadata:
    """Extract SEO metadata from an HTML string.

    Missing and empty tags both yield ``None``; this never fails on absent
    tags. When ``base_url`` is given, a relative ``og:image`` or canonical
    URL is resolved to an absolute one.

    Args:
        html:     Raw HTML string.
        base_url: Optional page URL for resolving relative links.

    Returns:
        :class:`ExtractedMetadata` with every field optional.
    """
    soup = parse_html(html)

    keywords_raw = find_meta(soup, name="keywords")
    keywords = None
    if keywords_raw:
        keywords = [k.strip() for k in keywords_raw.split(",") if k.strip()] or None

    og_image_url = _or_none(find_meta(soup, prop="og:image"))
    canonical_url = _or_none(find_canonical(soup))

    if base_url:
        if og_image_url and not is_absolute_http_url(og_image_url):
            og_image_url = urljoin(base_url, og_image_url)
        if canonical_url and not is_absolute_http_url(canonical_url):
            canonical_url = urljoin(base_url, canonical_url)

    return ExtractedMetadata(
        title=_or_none(find_title(soup)),
        description=_or_none(find_meta(soup, name="description")),
        robots=_or_none(find_meta(soup, name="robots")),
        keywords=keywords,
        og_title=_or_none(find_meta(soup, prop="og:title")),
        og_description=_or_none(find_meta(soup, prop="og:description")),
        og_image_url=og_image_url,
        og_type=_or_none(find_meta(soup, prop="og:type")),
        og_url=_or_none(find_meta(soup, prop="og:url")),
        canonical_url=canonical_url,
    )


def extract_metadata_from_url(url: str, config: ValidatorConfig | None = None) -> ExtractedMetadata:
    """Fetch a live page and extract its metadata.

    Fetch failures (timeout, connection error, non-2xx status) are logged
    and yield an empty :class:`ExtractedMetadata`; they are not raised.

    Raises:
        ValueError: If ``url`` is not an absolute http(s) URL.
    """
    url = require_http_url(url)
    config = config or ValidatorConfig()
    try:
        resp = http_get(url, config)
    except requests.RequestException as exc:
        logger.warning("Metadata extraction failed for '%s': %s", url, exc)
        return ExtractedMetadata()

    if not is_success(resp):
        logger.warning(
            "Metadata extraction failed for '%s': HTTP %d %s",
            url, resp.status_code, resp.reason,
        )
        return ExtractedMetadata()

    return extract_metadata_from_html(resp.text, url)


# ============================================================================
# CONVERSION & CRAWL
# ============================================================================

def _known_robots(value: str | None) -> str | None:
    if value is None:
        return None
    tokens = [t.strip().lower() for t in value.split(",") if t.strip()]
    if tokens and all(t in _ROBOTS_DIRECTIVES for t in tokens):
        return ", ".join(tokens)
    logger.warning("Dropping unrecognised robots directive %r", value)
    return None


def _known_og_type(value: str | None) -> OGType | None:
    if value is None:
        return None
    try:
        return OGType(value.strip().lower())
    except ValueError:
        logger.warning("Dropping unsupported og:type %r", value)
        return None


def metadata_to_seo_record(
    metadata: ExtractedMetadata,
    route_path: str,
    user_id: str = "extracted",
) -> SEORecordCreate:
    """Turn extracted metadata into a create payload for ``route_path``.

    ``og:type`` and ``robots`` values outside the known vocabularies are
    dropped with a warning. URL fields that are still relative (no base
    URL was available) are dropped as well.

    Raises:
        pydantic.ValidationError: If ``route_path`` does not start with ``/``.
    """
    def _absolute(value: str | None) -> str | None:
        return value if value and is_absolute_http_url(value) else None

    return SEORecordCreate(
        user_id=user_id,
        route_path=route_path,
        title=metadata.title,
        description=metadata.description,
        keywords=metadata.keywords,
        og_title=metadata.og_title,
        og_description=metadata.og_description,
        og_image_url=_absolute(metadata.og_image_url),
        og_type=_known_og_type(metadata.og_type),
        og_url=_absolute(metadata.og_url),
        canonical_url=_absolute(metadata.canonical_url),
        robots=_known_robots(metadata.robots),
    )


def crawl_site_for_seo(
    base_url: str,
    routes: list[str],
    config: ValidatorConfig | None = None,
) -> dict[str, ExtractedMetadata]:
    """Extract metadata for each route of a site, one request at a time.

    Args:
        base_url: Site root, e.g. ``https://example.com``.
        routes:   Route paths, e.g. ``["/", "/about"]``.
        config:   HTTP settings; ``crawl_delay`` spaces out requests.

    Returns:
        Mapping route → extracted metadata, in ``routes`` order.
    """
    require_http_url(base_url)
    config = config or ValidatorConfig()
    logger.info("crawl_site_for_seo('%s', %d routes)", base_url, len(routes))

    results: dict[str, ExtractedMetadata] = {}
    for idx, route in enumerate(routes, start=1):
        url = urljoin(base_url, route)
        logger.debug("[%d/%d] Extracting: %s", idx, len(routes), url)
        try:
            results[route] = extract_metadata_from_url(url, config)
        except ValueError as exc:
            logger.error("  Failed to crawl '%s': %s", url, exc)
        time.sleep(config.crawl_delay)

    return results
