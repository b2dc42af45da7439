"""
Shared pytest fixtures for the seo_console test suite.
"""

from __future__ import annotations

import io
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from seo_console.core.logging_config import reset_logging
from seo_console.core.models import ValidatorConfig
from seo_console.storage.file_storage import FileStorage
from seo_console.storage.sql_storage import SqlStorage


# ── Logging isolation ─────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _reset_logging():
    """Tear down seo_console logging handlers between tests.

    Prevents handler accumulation when multiple tests call setup_logging().
    """
    yield
    reset_logging()


# ── HTTP ──────────────────────────────────────────────────────────────────────

def make_response(
    status_code: int = 200,
    text: str = "",
    content: bytes = b"",
    reason: str = "OK",
    headers: dict | None = None,
) -> MagicMock:
    """A stand-in for :class:`requests.Response` with the attributes we read."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.text = text
    resp.content = content
    resp.reason = reason
    resp.headers = headers or {}
    return resp


@pytest.fixture
def fast_config():
    """Validator config with no pauses between requests."""
    return ValidatorConfig(crawl_delay=0, import_delay=0)


# ── HTML ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def full_page_html():
    """A page carrying every tag the validator checks."""
    return """<!DOCTYPE html>
<html>
<head>
  <title>Boat Company | Sailing boats</title>
  <meta name="description" content="Hand-built sailing boats since 1982.">
  <meta name="keywords" content="boats, sailing , yachts">
  <meta name="robots" content="index, follow">
  <meta property="og:title" content="Boat Company">
  <meta property="og:description" content="Sailing boats built to last.">
  <meta property="og:image" content="https://boats.example/og.jpg">
  <meta property="og:type" content="website">
  <meta property="og:url" content="https://boats.example/">
  <meta name="twitter:card" content="summary_large_image">
  <meta name="twitter:title" content="Boat Company">
  <meta name="twitter:image" content="https://boats.example/og.jpg">
  <link rel="canonical" href="https://boats.example/">
</head>
<body><h1>Boat Company</h1></body>
</html>"""


@pytest.fixture
def full_record_data():
    """Record fields matching :func:`full_page_html` exactly."""
    return {
        "route_path": "/",
        "title": "Boat Company | Sailing boats",
        "description": "Hand-built sailing boats since 1982.",
        "og_title": "Boat Company",
        "og_description": "Sailing boats built to last.",
        "og_image_url": "https://boats.example/og.jpg",
        "og_type": "website",
        "og_url": "https://boats.example/",
        "twitter_card": "summary_large_image",
        "twitter_title": "Boat Company",
        "twitter_image_url": "https://boats.example/og.jpg",
        "canonical_url": "https://boats.example/",
    }


# ── Images ────────────────────────────────────────────────────────────────────

def make_image_bytes(width: int = 1200, height: int = 630, fmt: str = "JPEG") -> bytes:
    """Encode a blank image of the given size with Pillow."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(20, 90, 160)).save(buf, format=fmt)
    return buf.getvalue()


# ── Storage ───────────────────────────────────────────────────────────────────

@pytest.fixture
def file_store(tmp_path):
    return FileStorage(tmp_path / "records.json")


@pytest.fixture
def sql_store(tmp_path):
    return SqlStorage(f"sqlite:///{tmp_path / 'records.db'}")


@pytest.fixture(params=["file", "sql"])
def store(request, tmp_path):
    """Each storage backend in turn."""
    if request.param == "file":
        return FileStorage(tmp_path / "records.json")
    return SqlStorage(f"sqlite:///{tmp_path / 'records.db'}")
