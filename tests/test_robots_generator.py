"""
Unit tests for seo_console/robots_generator.py.
"""

from __future__ import annotations

from seo_console.robots_generator import (
    UserAgentRule,
    extract_sitemap_from_robots_txt,
    generate_robots_txt,
    update_robots_txt_with_sitemap,
)


class TestGenerateRobotsTxt:
    def test_default_allows_all(self):
        assert generate_robots_txt() == "User-agent: *\nAllow: /"

    def test_sitemap_and_crawl_delay(self):
        content = generate_robots_txt(sitemap_url="https://x.com/sitemap.xml", crawl_delay=2)
        assert content == (
            "User-agent: *\n"
            "Crawl-delay: 2\n"
            "Allow: /\n"
            "\n"
            "Sitemap: https://x.com/sitemap.xml"
        )

    def test_custom_groups(self):
        rules = [
            UserAgentRule(agent="Googlebot", disallow=["/admin"]),
            UserAgentRule(agent="*", allow=["/"], disallow=["/tmp", "/private"]),
        ]
        content = generate_robots_txt(rules)
        assert content.split("\n\n") == [
            "User-agent: Googlebot\nDisallow: /admin",
            "User-agent: *\nAllow: /\nDisallow: /tmp\nDisallow: /private",
        ]

    def test_fractional_crawl_delay(self):
        assert "Crawl-delay: 0.5" in generate_robots_txt(crawl_delay=0.5)


class TestUpdateRobotsTxtWithSitemap:
    def test_replaces_existing_line(self):
        existing = "User-agent: *\nAllow: /\n\nSitemap: https://old.example/sitemap.xml\n"
        updated = update_robots_txt_with_sitemap(existing, "https://x.com/sitemap.xml")
        assert "old.example" not in updated
        assert "Sitemap: https://x.com/sitemap.xml" in updated
        assert updated.startswith("User-agent: *\nAllow: /")

    def test_appends_when_absent(self):
        updated = update_robots_txt_with_sitemap("User-agent: *\nAllow: /\n", "https://x.com/s.xml")
        assert updated == "User-agent: *\nAllow: /\n\nSitemap: https://x.com/s.xml"

    def test_empty_content(self):
        assert update_robots_txt_with_sitemap("  ", "https://x.com/s.xml") == "Sitemap: https://x.com/s.xml"


class TestExtractSitemapFromRobotsTxt:
    def test_found(self):
        content = "User-agent: *\nSitemap:   https://x.com/sitemap.xml  \n"
        assert extract_sitemap_from_robots_txt(content) == "https://x.com/sitemap.xml"

    def test_not_found(self):
        assert extract_sitemap_from_robots_txt("User-agent: *\nAllow: /") is None

    def test_round_trip_with_generator(self):
        content = generate_robots_txt(sitemap_url="https://x.com/sitemap.xml")
        assert extract_sitemap_from_robots_txt(content) == "https://x.com/sitemap.xml"
