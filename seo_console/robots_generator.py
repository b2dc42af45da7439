"""robots.txt generation and Sitemap-line maintenance."""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, Field

_SITEMAP_LINE_RE = re.compile(r"^Sitemap:[ \t]*(.+)$", re.MULTILINE)


class UserAgentRule(BaseModel):
    """One ``User-agent`` group with its Allow/Disallow paths."""

    agent: str = Field(min_length=1)
    allow: List[str] = Field(default_factory=list)
    disallow: List[str] = Field(default_factory=list)


def _format_delay(crawl_delay: float) -> str:
    return str(int(crawl_delay)) if float(crawl_delay).is_integer() else str(crawl_delay)


def generate_robots_txt(
    user_agents: Optional[List[UserAgentRule]] = None,
    sitemap_url: Optional[str] = None,
    crawl_delay: Optional[float] = None,
) -> str:
    """Render a robots.txt file.

    With no rules, every crawler is allowed everywhere
    (``User-agent: *`` / ``Allow: /``). ``Crawl-delay`` is repeated in each
    group when given; the ``Sitemap`` line comes last.
    """
    groups = user_agents or [UserAgentRule(agent="*", allow=["/"])]

    lines: List[str] = []
    for rule in groups:
        lines.append(f"User-agent: {rule.agent}")
        if crawl_delay:
            lines.append(f"Crawl-delay: {_format_delay(crawl_delay)}")
        lines.extend(f"Allow: {path}" for path in rule.allow)
        lines.extend(f"Disallow: {path}" for path in rule.disallow)
        lines.append("")

    if sitemap_url:
        lines.append(f"Sitemap: {sitemap_url}")

    return "\n".join(lines).strip()


def update_robots_txt_with_sitemap(existing_content: str, sitemap_url: str) -> str:
    """Point robots.txt at ``sitemap_url``, keeping everything else.

    The first ``Sitemap:`` line is replaced; if there is none, one is
    appended after a blank line.
    """
    if _SITEMAP_LINE_RE.search(existing_content):
        return _SITEMAP_LINE_RE.sub(lambda _m: f"Sitemap: {sitemap_url}", existing_content, count=1)

    trimmed = existing_content.strip()
    return f"{trimmed}\n\nSitemap: {sitemap_url}" if trimmed else f"Sitemap: {sitemap_url}"


def extract_sitemap_from_robots_txt(content: str) -> Optional[str]:
    """URL of the first ``Sitemap:`` line, or ``None``."""
    match = _SITEMAP_LINE_RE.search(content)
    return match.group(1).strip() if match else None
