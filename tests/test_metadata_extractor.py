"""
Unit tests for seo_console/metadata_extractor.py.

All network calls are mocked; no actual HTTP requests are made.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import requests

from conftest import make_response
from seo_console.core.models import ExtractedMetadata, OGType
from seo_console.metadata_extractor import (
    crawl_site_for_seo,
    extract_metadata_from_html,
    extract_metadata_from_url,
    find_canonical,
    find_meta,
    find_title,
    metadata_to_seo_record,
    parse_html,
)


# ============================================================================
# DOM helpers
# ============================================================================

class TestFindTitle:
    def test_absent_is_none(self):
        assert find_title(parse_html("<html><head></head></html>")) is None

    def test_empty_is_empty_string(self):
        assert find_title(parse_html("<title></title>")) == ""

    def test_text_is_stripped(self):
        assert find_title(parse_html("<title>  Hello  </title>")) == "Hello"


class TestFindMeta:
    def test_by_name(self):
        soup = parse_html('<meta name="description" content="Desc">')
        assert find_meta(soup, name="description") == "Desc"

    def test_by_property(self):
        soup = parse_html('<meta property="og:title" content="T">')
        assert find_meta(soup, prop="og:title") == "T"

    def test_name_is_case_insensitive(self):
        soup = parse_html('<meta name="Description" content="Desc">')
        assert find_meta(soup, name="description") == "Desc"

    def test_missing_content_is_empty_string(self):
        soup = parse_html('<meta name="description">')
        assert find_meta(soup, name="description") == ""

    def test_absent_is_none(self):
        assert find_meta(parse_html("<p>x</p>"), name="description") is None

    def test_property_not_matched_by_name(self):
        soup = parse_html('<meta property="description" content="x">')
        assert find_meta(soup, name="description") is None


class TestFindCanonical:
    def test_present(self):
        soup = parse_html('<link rel="canonical" href="https://x.com/a">')
        assert find_canonical(soup) == "https://x.com/a"

    def test_absent(self):
        assert find_canonical(parse_html('<link rel="stylesheet" href="/s.css">')) is None


class TestParseHtml:
    def test_non_string_raises(self):
        with pytest.raises(TypeError):
            parse_html(b"<html></html>")


# ============================================================================
# extract_metadata_from_html
# ============================================================================

class TestExtractMetadataFromHtml:
    def test_full_page(self, full_page_html):
        meta = extract_metadata_from_html(full_page_html)
        assert meta.title == "Boat Company | Sailing boats"
        assert meta.description == "Hand-built sailing boats since 1982."
        assert meta.robots == "index, follow"
        assert meta.keywords == ["boats", "sailing", "yachts"]
        assert meta.og_title == "Boat Company"
        assert meta.og_image_url == "https://boats.example/og.jpg"
        assert meta.og_type == "website"
        assert meta.canonical_url == "https://boats.example/"

    def test_og_title_recovered(self):
        meta = extract_metadata_from_html('<meta property="og:title" content="Foo">')
        assert meta.og_title == "Foo"

    def test_empty_document(self):
        assert extract_metadata_from_html("").is_empty()

    def test_empty_tags_collapse_to_none(self):
        meta = extract_metadata_from_html('<title></title><meta name="description" content="">')
        assert meta.title is None
        assert meta.description is None

    def test_relative_urls_resolved_with_base(self):
        html = (
            '<meta property="og:image" content="/img/og.png">'
            '<link rel="canonical" href="/about">'
        )
        meta = extract_metadata_from_html(html, "https://x.com/about")
        assert meta.og_image_url == "https://x.com/img/og.png"
        assert meta.canonical_url == "https://x.com/about"

    def test_relative_urls_kept_without_base(self):
        meta = extract_metadata_from_html('<link rel="canonical" href="/about">')
        assert meta.canonical_url == "/about"

    def test_absolute_urls_untouched_with_base(self):
        meta = extract_metadata_from_html(
            '<meta property="og:image" content="https://cdn.x.com/a.png">', "https://x.com/",
        )
        assert meta.og_image_url == "https://cdn.x.com/a.png"


# ============================================================================
# extract_metadata_from_url
# ============================================================================

class TestExtractMetadataFromUrl:
    def test_success(self):
        resp = make_response(200, text="<title>Live</title>")
        with patch("seo_console.metadata_extractor.http_get", return_value=resp):
            meta = extract_metadata_from_url("https://x.com/")
        assert meta.title == "Live"

    def test_non_2xx_returns_empty(self):
        resp = make_response(500, text="<title>Error page</title>", reason="Server Error")
        with patch("seo_console.metadata_extractor.http_get", return_value=resp):
            meta = extract_metadata_from_url("https://x.com/")
        assert meta.is_empty()

    def test_timeout_returns_empty(self):
        with patch(
            "seo_console.metadata_extractor.http_get",
            side_effect=requests.Timeout("timed out"),
        ):
            assert extract_metadata_from_url("https://x.com/").is_empty()

    def test_relative_url_raises(self):
        with pytest.raises(ValueError):
            extract_metadata_from_url("/about")


# ============================================================================
# metadata_to_seo_record
# ============================================================================

class TestMetadataToSeoRecord:
    def test_maps_fields(self):
        meta = ExtractedMetadata(title="T", og_type="Article", canonical_url="https://x.com/a")
        rec = metadata_to_seo_record(meta, "/a")
        assert rec.route_path == "/a"
        assert rec.user_id == "extracted"
        assert rec.og_type == OGType.ARTICLE
        assert rec.canonical_url == "https://x.com/a"

    def test_unknown_og_type_dropped(self):
        rec = metadata_to_seo_record(ExtractedMetadata(og_type="blogpost"), "/")
        assert rec.og_type is None

    def test_unknown_robots_dropped(self):
        rec = metadata_to_seo_record(ExtractedMetadata(robots="index, sometimes"), "/")
        assert rec.robots is None

    def test_known_robots_normalised(self):
        rec = metadata_to_seo_record(ExtractedMetadata(robots="NOINDEX,nofollow"), "/")
        assert rec.robots == "noindex, nofollow"

    def test_relative_urls_dropped(self):
        rec = metadata_to_seo_record(ExtractedMetadata(canonical_url="/a"), "/a")
        assert rec.canonical_url is None


# ============================================================================
# crawl_site_for_seo
# ============================================================================

class TestCrawlSiteForSeo:
    def test_crawls_each_route_in_order(self, fast_config):
        def fake_get(url, config, **kw):
            return make_response(200, text=f"<title>{url}</title>")

        with patch("seo_console.metadata_extractor.http_get", side_effect=fake_get), \
             patch("seo_console.metadata_extractor.time.sleep") as sleep:
            results = crawl_site_for_seo("https://x.com", ["/", "/about"], fast_config)

        assert list(results) == ["/", "/about"]
        assert results["/about"].title == "https://x.com/about"
        assert sleep.call_count == 2

    def test_failed_route_yields_empty_metadata(self, fast_config):
        with patch(
            "seo_console.metadata_extractor.http_get",
            side_effect=requests.ConnectionError("refused"),
        ), patch("seo_console.metadata_extractor.time.sleep"):
            results = crawl_site_for_seo("https://x.com", ["/"], fast_config)
        assert results["/"].is_empty()
