"""
Unit tests for seo_console/route_discovery.py.
"""

from __future__ import annotations

import pytest

from seo_console.route_discovery import (
    DiscoveredRoute,
    discover_nextjs_routes,
    generate_example_paths,
)


@pytest.fixture
def app_tree(tmp_path):
    """A small Next.js app directory."""
    pages = [
        "app/page.tsx",
        "app/about/page.tsx",
        "app/blog/[slug]/page.tsx",
        "app/docs/[...path]/page.jsx",
        "app/shop/[[...filters]]/page.js",
        "app/(marketing)/pricing/page.tsx",
        "app/api/example/route.ts",
        "app/node_modules/pkg/page.tsx",
    ]
    for rel in pages:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("export default function Page() {}", encoding="utf-8")
    return tmp_path


class TestDiscoverNextjsRoutes:
    def test_route_paths(self, app_tree):
        routes = discover_nextjs_routes(root_dir=app_tree)
        assert [r.route_path for r in routes] == [
            "/",
            "/about",
            "/blog/[slug]",
            "/docs/[...path]",
            "/pricing",
            "/shop/[[...filters]]",
        ]

    def test_dynamic_route(self, app_tree):
        routes = {r.route_path: r for r in discover_nextjs_routes(root_dir=app_tree)}
        blog = routes["/blog/[slug]"]
        assert blog.is_dynamic is True
        assert blog.is_catch_all is False
        assert blog.params == ["slug"]
        assert blog.file_path == "app/blog/[slug]/page.tsx"

    def test_catch_all_routes(self, app_tree):
        routes = {r.route_path: r for r in discover_nextjs_routes(root_dir=app_tree)}
        assert routes["/docs/[...path]"].is_catch_all is True
        assert routes["/docs/[...path]"].params == ["path"]
        assert routes["/shop/[[...filters]]"].params == ["filters"]

    def test_group_segment_dropped(self, app_tree):
        routes = {r.route_path: r for r in discover_nextjs_routes(root_dir=app_tree)}
        assert routes["/pricing"].file_path == "app/(marketing)/pricing/page.tsx"
        assert routes["/pricing"].is_dynamic is False

    def test_missing_app_dir(self, tmp_path):
        assert discover_nextjs_routes(root_dir=tmp_path) == []

    def test_camel_case_json(self, app_tree):
        data = discover_nextjs_routes(root_dir=app_tree)[0].model_dump(by_alias=True)
        assert set(data) == {"routePath", "filePath", "isDynamic", "isCatchAll", "params"}


class TestGenerateExamplePaths:
    def test_static_route(self):
        route = DiscoveredRoute(route_path="/about", file_path="app/about/page.tsx")
        assert generate_example_paths(route) == ["/about"]

    def test_dynamic_route(self):
        route = DiscoveredRoute(
            route_path="/blog/[slug]", file_path="x", is_dynamic=True, params=["slug"],
        )
        assert generate_example_paths(route, count=2) == ["/blog/example-0", "/blog/example-1"]

    def test_catch_all_route(self):
        route = DiscoveredRoute(
            route_path="/docs/[...path]", file_path="x",
            is_dynamic=True, is_catch_all=True, params=["path"],
        )
        assert generate_example_paths(route, count=1) == ["/docs/example-0-part-1/example-0-part-2"]
