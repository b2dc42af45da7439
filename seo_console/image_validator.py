"""
Open Graph image checks.

Fetches an image, reads its dimensions and format with Pillow (only the
header is decoded) and compares them with the social-sharing
recommendations: 1200x630 pixels, a 1200:630 aspect ratio, a web-friendly
format and a file under 1 MB.
"""

from __future__ import annotations

import io

import requests
from PIL import Image, UnidentifiedImageError

from seo_console.core.http import ACCEPT_IMAGE, http_get, http_head, is_success, require_http_url
from seo_console.core.logging_config import get_logger
from seo_console.core.models import (
    ImageMetadata,
    ImageValidationResult,
    Severity,
    ValidationIssue,
    ValidatorConfig,
)

logger = get_logger(__name__)

RECOMMENDED_WIDTH = 1200
RECOMMENDED_HEIGHT = 630
# Exact 1200/630 (≈ 1.9048), not the rounded 1.91 used in marketing copy.
RECOMMENDED_ASPECT_RATIO = RECOMMENDED_WIDTH / RECOMMENDED_HEIGHT
ASPECT_RATIO_TOLERANCE = 0.1
MAX_FILE_SIZE_BYTES = 1024 * 1024
SUPPORTED_FORMATS: frozenset[str] = frozenset({"jpeg", "jpg", "png", "webp", "avif", "gif"})
# Pillow names multi-picture JPEGs (most phone and camera photos) MPO.
_FORMAT_ALIASES = {"mpo": "jpeg"}


def _critical(message: str, image_url: str) -> ImageValidationResult:
    return ImageValidationResult.from_issues([
        ValidationIssue(field="image", severity=Severity.CRITICAL, message=message, actual=image_url)
    ])


def _read_image_header(data: bytes) -> tuple[int, int, str] | None:
    """Return ``(width, height, format)`` or ``None`` if Pillow cannot tell.

    Pillow reads only the header on ``open``; pixel data is never decoded.
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            width, height = im.size
            fmt = (im.format or "unknown").lower()
            fmt = _FORMAT_ALIASES.get(fmt, fmt)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.debug("  Image header unreadable: %s", exc)
        return None
    if not width or not height:
        return None
    return width, height, fmt


def check_image_bytes(
    data: bytes,
    image_url: str,
    expected_width: int | None = None,
    expected_height: int | None = None,
) -> ImageValidationResult:
    """Evaluate already-downloaded image bytes. See :func:`validate_og_image`."""
    header = _read_image_header(data)
    if header is None:
        return _critical("Could not determine image dimensions", image_url)

    width, height, fmt = header
    size = len(data)
    issues: list[ValidationIssue] = []

    # ── File size ─────────────────────────────────────────────────────────────
    if size > MAX_FILE_SIZE_BYTES:
        issues.append(ValidationIssue(
            field="image",
            severity=Severity.WARNING,
            message="Image file size exceeds 1MB recommendation",
            expected="<= 1.00MB",
            actual=f"{size / MAX_FILE_SIZE_BYTES:.2f}MB",
        ))

    # ── Recommended dimensions ────────────────────────────────────────────────
    if width < RECOMMENDED_WIDTH or height < RECOMMENDED_HEIGHT:
        issues.append(ValidationIssue(
            field="image",
            severity=Severity.WARNING,
            message=(
                f"Image dimensions below recommended size "
                f"({RECOMMENDED_WIDTH}x{RECOMMENDED_HEIGHT})"
            ),
            expected=f"{RECOMMENDED_WIDTH}x{RECOMMENDED_HEIGHT}",
            actual=f"{width}x{height}",
        ))

    # ── Aspect ratio ──────────────────────────────────────────────────────────
    aspect_ratio = width / height
    if abs(aspect_ratio - RECOMMENDED_ASPECT_RATIO) > ASPECT_RATIO_TOLERANCE:
        issues.append(ValidationIssue(
            field="image",
            severity=Severity.INFO,
            message="Image aspect ratio differs from recommended 1.91:1",
            expected="1.91:1",
            actual=f"{aspect_ratio:.2f}:1",
        ))

    # ── Format ────────────────────────────────────────────────────────────────
    if fmt not in SUPPORTED_FORMATS:
        issues.append(ValidationIssue(
            field="image",
            severity=Severity.WARNING,
            message="Image format may not be optimal for social sharing",
            expected="JPEG, PNG, WebP, AVIF or GIF",
            actual=fmt,
        ))

    # ── Caller-supplied dimensions ────────────────────────────────────────────
    if expected_width is not None and width != expected_width:
        issues.append(ValidationIssue(
            field="image",
            severity=Severity.WARNING,
            message="Image width does not match expected value",
            expected=f"{expected_width}px",
            actual=f"{width}px",
        ))
    if expected_height is not None and height != expected_height:
        issues.append(ValidationIssue(
            field="image",
            severity=Severity.WARNING,
            message="Image height does not match expected value",
            expected=f"{expected_height}px",
            actual=f"{height}px",
        ))

    return ImageValidationResult.from_issues(
        issues,
        metadata=ImageMetadata(width=width, height=height, format=fmt, size=size),
    )


def validate_og_image(
    image_url: str,
    expected_width: int | None = None,
    expected_height: int | None = None,
    config: ValidatorConfig | None = None,
) -> ImageValidationResult:
    """Fetch an OG image and check it against the sharing recommendations.

    Args:
        image_url:       Absolute URL of the image.
        expected_width:  Width the record declares (``og:image:width``), if any.
        expected_height: Height the record declares, if any.
        config:          HTTP settings; ``image_timeout`` bounds the fetch.

    Returns:
        :class:`ImageValidationResult`. A failed fetch or an undecodable
        image yields one critical issue and no metadata.

    Raises:
        ValueError: If ``image_url`` is not an absolute http(s) URL.
    """
    image_url = require_http_url(image_url)
    config = config or ValidatorConfig()
    logger.info("validate_og_image('%s')", image_url)

    try:
        resp = http_get(image_url, config, timeout=config.image_timeout, accept=ACCEPT_IMAGE)
    except requests.RequestException as exc:
        logger.warning("  Image fetch failed for '%s': %s", image_url, exc)
        return _critical(f"Failed to fetch image: {exc}", image_url)

    if not is_success(resp):
        logger.warning("  Image fetch failed for '%s': HTTP %d", image_url, resp.status_code)
        return _critical(
            f"Failed to fetch image: {resp.status_code} {resp.reason or ''}".rstrip(),
            image_url,
        )

    result = check_image_bytes(resp.content, image_url, expected_width, expected_height)
    logger.debug(
        "  validate_og_image → valid=%s, %d issue(s)", result.is_valid, len(result.issues),
    )
    return result


def validate_image_accessibility(image_url: str, config: ValidatorConfig | None = None) -> bool:
    """True when a HEAD request answers 2xx with an ``image/*`` content type."""
    image_url = require_http_url(image_url)
    config = config or ValidatorConfig()
    try:
        resp = http_head(image_url, config)
    except requests.RequestException as exc:
        logger.debug("  HEAD %s failed: %s", image_url, exc)
        return False
    content_type = resp.headers.get("Content-Type", "")
    return is_success(resp) and content_type.lower().startswith("image/")
