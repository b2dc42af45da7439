"""
Shared HTTP helpers for the extractor and validators.

Unlike a fire-and-forget crawler, the validators need the underlying error
text to report it as an issue, so these helpers let ``requests`` exceptions
propagate and leave the conversion to the caller.
"""

from __future__ import annotations

import requests

from seo_console.core.logging_config import get_logger
from seo_console.core.models import ValidatorConfig, is_absolute_http_url

logger = get_logger(__name__)

ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_IMAGE = "image/avif,image/webp,image/*,*/*;q=0.8"


def build_headers(config: ValidatorConfig, accept: str = ACCEPT_HTML) -> dict[str, str]:
    """Request headers identifying the console bot."""
    return {
        "User-Agent": config.user_agent,
        "Accept": accept,
    }


def require_http_url(url: str) -> str:
    """Reject anything that is not an absolute http(s) URL.

    Raises:
        ValueError: If ``url`` is empty, relative or uses another scheme.
    """
    if not isinstance(url, str) or not is_absolute_http_url(url.strip()):
        raise ValueError(f"Expected an absolute http(s) URL, got {url!r}.")
    return url.strip()


def is_success(resp: requests.Response) -> bool:
    """True for 2xx responses (``Response.ok`` also accepts 3xx)."""
    return 200 <= resp.status_code < 300


def http_get(
    url: str,
    config: ValidatorConfig,
    timeout: float | None = None,
    accept: str = ACCEPT_HTML,
) -> requests.Response:
    """GET ``url`` following redirects.

    Args:
        url:     Target URL.
        config:  Supplies the User-Agent and the default (HTML) timeout.
        timeout: Override in seconds, e.g. the image timeout.
        accept:  ``Accept`` header value.

    Returns:
        The :class:`requests.Response`, whatever its status code.

    Raises:
        requests.RequestException: On timeout or connection failure.
    """
    resp = requests.get(
        url,
        headers=build_headers(config, accept),
        timeout=timeout if timeout is not None else config.html_timeout,
        allow_redirects=True,
    )
    logger.debug("GET %s → %d", url, resp.status_code)
    return resp


def http_head(
    url: str,
    config: ValidatorConfig,
    timeout: float | None = None,
) -> requests.Response:
    """HEAD ``url`` following redirects. Same contract as :func:`http_get`."""
    resp = requests.head(
        url,
        headers=build_headers(config, "*/*"),
        timeout=timeout if timeout is not None else config.html_timeout,
        allow_redirects=True,
    )
    logger.debug("HEAD %s → %d", url, resp.status_code)
    return resp
