"""
Crawlability and indexability checks for a single page.

These are coarse reachability checks, independent from the metadata
comparison of :mod:`seo_console.html_validator`: can a crawler fetch the
page, may it index it, and does robots.txt let it in.
"""

from __future__ import annotations

from urllib.parse import urljoin

import requests

from seo_console.core.http import http_get, http_head, is_success, require_http_url
from seo_console.core.logging_config import get_logger
from seo_console.core.models import (
    CrawlabilityIssue,
    CrawlabilityIssueType,
    CrawlabilityResult,
    PublicAccessResult,
    RobotsTxtResult,
    Severity,
    ValidatorConfig,
)
from seo_console.metadata_extractor import extract_metadata_from_html

logger = get_logger(__name__)

_AUTH_STATUSES = (401, 403)
_ROBOTS_AGENTS = ("*", "googlebot")


# ============================================================================
# PAGE CRAWLABILITY
# ============================================================================

def _issue(
    kind: CrawlabilityIssueType,
    severity: Severity,
    message: str,
    page: str,
) -> CrawlabilityIssue:
    return CrawlabilityIssue(type=kind, severity=severity, message=message, page=page)


def validate_crawlability(
    url: str,
    html: str | None = None,
    config: ValidatorConfig | None = None,
) -> CrawlabilityResult:
    """Check that a page can be crawled and indexed.

    The page is fetched (following redirects) unless ``html`` is supplied.

    Rules:
      * 404: not crawlable, not indexable; nothing else is checked.
      * any other non-200: critical ``404``-type issue with the status.
      * 401/403: additional critical ``auth_wall`` issue.
      * ``noindex`` robots meta: critical, page is not indexable.
      * ``nofollow`` robots meta: warning.
      * no canonical link: warning.

    ``crawlable`` ignores the ``noindex`` issue (a page can be crawlable
    yet not indexable); ``indexable`` requires the page to be crawlable
    and free of ``noindex``.

    Raises:
        ValueError: If ``url`` is not an absolute http(s) URL.
    """
    url = require_http_url(url)
    config = config or ValidatorConfig()
    logger.info("validate_crawlability('%s')", url)

    issues: list[CrawlabilityIssue] = []
    warnings: list[CrawlabilityIssue] = []

    if html is None:
        try:
            resp = http_get(url, config)
        except requests.RequestException as exc:
            logger.warning("  Fetch failed for '%s': %s", url, exc)
            issues.append(_issue(
                CrawlabilityIssueType.NOT_FOUND, Severity.CRITICAL,
                f"Failed to fetch page: {exc}", url,
            ))
            return CrawlabilityResult(crawlable=False, indexable=False, issues=issues)

        if resp.status_code == 404:
            issues.append(_issue(
                CrawlabilityIssueType.NOT_FOUND, Severity.CRITICAL,
                "Page returns 404 Not Found", url,
            ))
            return CrawlabilityResult(crawlable=False, indexable=False, issues=issues)

        if resp.status_code != 200:
            issues.append(_issue(
                CrawlabilityIssueType.NOT_FOUND, Severity.CRITICAL,
                f"Page returns HTTP {resp.status_code}", url,
            ))
        if resp.status_code in _AUTH_STATUSES:
            issues.append(_issue(
                CrawlabilityIssueType.AUTH_WALL, Severity.CRITICAL,
                f"Page requires authentication ({resp.status_code})", url,
            ))
        html = resp.text

    metadata = extract_metadata_from_html(html, url)

    # ── Robots meta ───────────────────────────────────────────────────────────
    robots = (metadata.robots or "").lower()
    if "noindex" in robots:
        issues.append(_issue(
            CrawlabilityIssueType.NOINDEX, Severity.CRITICAL,
            "Page has noindex meta tag and will not be indexed", url,
        ))
    if "nofollow" in robots:
        warnings.append(_issue(
            CrawlabilityIssueType.NOFOLLOW, Severity.WARNING,
            "Page has nofollow meta tag; links won't be followed", url,
        ))

    # ── Canonical ─────────────────────────────────────────────────────────────
    if not metadata.canonical_url:
        warnings.append(_issue(
            CrawlabilityIssueType.CANONICAL_MISSING, Severity.WARNING,
            "Page missing canonical URL", url,
        ))

    noindex = any(i.type == CrawlabilityIssueType.NOINDEX for i in issues)
    crawlable = all(i.type == CrawlabilityIssueType.NOINDEX for i in issues)
    result = CrawlabilityResult(
        crawlable=crawlable,
        indexable=crawlable and not noindex,
        issues=issues,
        warnings=warnings,
    )
    logger.debug(
        "  crawlable=%s indexable=%s (%d issue(s), %d warning(s))",
        result.crawlable, result.indexable, len(issues), len(warnings),
    )
    return result


# ============================================================================
# ROBOTS.TXT
# ============================================================================

def _parse_directive(line: str) -> tuple[str, str] | None:
    """Split ``Directive: value`` (inline comments removed) or return None."""
    line = line.split("#", 1)[0].strip()
    if not line or ":" not in line:
        return None
    directive, value = line.split(":", 1)
    return directive.strip().lower(), value.strip()


def evaluate_robots_txt(content: str, route_path: str) -> RobotsTxtResult:
    """Decide whether ``route_path`` is allowed by a robots.txt body.

    Only groups addressed to ``*`` or ``googlebot`` apply. Directives are
    read top to bottom and each matching rule overwrites the verdict, so a
    later ``Allow`` re-permits a prefix disallowed earlier (and vice versa).
    This is last-match-wins, not the longest-match precedence real
    crawlers use. An empty ``Disallow:`` value disallows nothing.
    """
    group_agents: list[str] = ["*"]
    in_agent_lines = False
    allowed = True
    reason: str | None = None

    for raw in content.splitlines():
        parsed = _parse_directive(raw)
        if parsed is None:
            continue
        directive, value = parsed

        if directive == "user-agent":
            # Consecutive User-agent lines share one group.
            if not in_agent_lines:
                group_agents = []
            group_agents.append(value.lower())
            in_agent_lines = True
            continue
        in_agent_lines = False

        if directive not in ("allow", "disallow") or not value:
            continue
        if not any(agent in _ROBOTS_AGENTS for agent in group_agents):
            continue

        matches = value == "/" or route_path.startswith(value)
        if not matches:
            continue
        if directive == "disallow":
            allowed = False
            reason = (
                "robots.txt disallows all pages" if value == "/"
                else f"robots.txt disallows {route_path}"
            )
        else:
            allowed = True
            reason = None

    return RobotsTxtResult(allowed=allowed, reason=None if allowed else reason)


def validate_robots_txt(
    base_url: str,
    route_path: str,
    config: ValidatorConfig | None = None,
) -> RobotsTxtResult:
    """Check whether the site's robots.txt lets crawlers reach ``route_path``.

    A missing robots.txt (non-2xx) or one that cannot be fetched means
    "allow all"; the reason says which fallback applied.

    Raises:
        ValueError: If ``base_url`` is not an absolute http(s) URL.
    """
    base_url = require_http_url(base_url)
    config = config or ValidatorConfig()
    robots_url = urljoin(base_url, "/robots.txt")
    logger.info("validate_robots_txt('%s', '%s')", robots_url, route_path)

    try:
        resp = http_get(robots_url, config, accept="text/plain,*/*;q=0.8")
    except requests.RequestException as exc:
        logger.debug("  robots.txt unreachable (%s), assuming allow-all", exc)
        return RobotsTxtResult(allowed=True, reason="Could not fetch robots.txt")

    if not is_success(resp):
        logger.debug("  robots.txt returned HTTP %d, assuming allow-all", resp.status_code)
        return RobotsTxtResult(allowed=True, reason="robots.txt not found (default: allow all)")

    return evaluate_robots_txt(resp.text, route_path)


# ============================================================================
# PUBLIC ACCESS
# ============================================================================

def validate_public_access(url: str, config: ValidatorConfig | None = None) -> PublicAccessResult:
    """HEAD the page: 401/403 means an auth wall, otherwise accessible iff 2xx.

    Raises:
        ValueError: If ``url`` is not an absolute http(s) URL.
    """
    url = require_http_url(url)
    config = config or ValidatorConfig()
    try:
        resp = http_head(url, config)
    except requests.RequestException as exc:
        logger.debug("  HEAD %s failed: %s", url, exc)
        return PublicAccessResult(accessible=False, requires_auth=False)

    requires_auth = resp.status_code in _AUTH_STATUSES
    return PublicAccessResult(
        accessible=is_success(resp) and not requires_auth,
        requires_auth=requires_auth,
    )
