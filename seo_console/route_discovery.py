"""
Next.js App Router route discovery.

Walks an ``app/`` directory for ``page.*`` files and turns each file
location into a route path, keeping dynamic segments in their bracket form
(``/blog/[slug]``). Route groups such as ``(marketing)`` do not appear in
URLs and are dropped.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from seo_console.core.logging_config import get_logger

logger = get_logger(__name__)

PAGE_FILENAMES = ("page.tsx", "page.ts", "page.jsx", "page.js")
_IGNORED_DIRS = {"node_modules", ".next"}


class DiscoveredRoute(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    route_path: str
    file_path: str
    is_dynamic: bool = False
    is_catch_all: bool = False
    params: List[str] = Field(default_factory=list)


# ── Segment helpers ───────────────────────────────────────────────────────────

def _is_group(segment: str) -> bool:
    return segment.startswith("(") and segment.endswith(")")


def _catch_all_param(segment: str) -> Optional[str]:
    """``[...slug]`` / ``[[...slug]]`` → ``slug``; anything else → None."""
    if segment.startswith("[[...") and segment.endswith("]]"):
        return segment[5:-2]
    if segment.startswith("[...") and segment.endswith("]"):
        return segment[4:-1]
    return None


def _dynamic_param(segment: str) -> Optional[str]:
    if segment.startswith("[") and segment.endswith("]") and not segment.startswith("[["):
        return segment[1:-1]
    return None


def page_file_to_route(relative_file: Path, app_dir: str = "app") -> DiscoveredRoute:
    """Map a page file path (relative to the app directory) to its route."""
    segments = [s for s in relative_file.parent.parts if s not in ("", ".") and not _is_group(s)]

    params: List[str] = []
    is_dynamic = False
    is_catch_all = False
    for segment in segments:
        catch_all = _catch_all_param(segment)
        if catch_all is not None:
            params.append(catch_all)
            is_dynamic = is_catch_all = True
            continue
        dynamic = _dynamic_param(segment)
        if dynamic is not None:
            params.append(dynamic)
            is_dynamic = True

    return DiscoveredRoute(
        route_path="/" + "/".join(segments),
        file_path=(Path(app_dir) / relative_file).as_posix(),
        is_dynamic=is_dynamic,
        is_catch_all=is_catch_all,
        params=params,
    )


# ── Public API ────────────────────────────────────────────────────────────────

def discover_nextjs_routes(app_dir: str = "app", root_dir: str | Path | None = None) -> List[DiscoveredRoute]:
    """Find every page route under ``root_dir/app_dir``.

    Args:
        app_dir:  App Router directory, relative to ``root_dir``.
        root_dir: Project root; defaults to the current working directory.

    Returns:
        Routes sorted by route path. A missing app directory yields an
        empty list (logged as a warning).
    """
    app_path = Path(root_dir or Path.cwd()) / app_dir
    if not app_path.is_dir():
        logger.warning("App directory '%s' not found, no routes discovered", app_path)
        return []

    routes: dict[str, DiscoveredRoute] = {}
    for filename in PAGE_FILENAMES:
        for page in app_path.rglob(filename):
            relative = page.relative_to(app_path)
            if _IGNORED_DIRS.intersection(relative.parts):
                continue
            route = page_file_to_route(relative, app_dir)
            # page.tsx wins over page.js when both exist for one route.
            routes.setdefault(route.route_path, route)

    logger.info("Discovered %d route(s) in '%s'", len(routes), app_path)
    return sorted(routes.values(), key=lambda r: r.route_path)


def generate_example_paths(route: DiscoveredRoute, count: int = 3) -> List[str]:
    """Concrete sample paths for a route, for seeding records.

    Static routes return just their own path. Dynamic segments become
    ``example-<i>``; catch-all segments expand to two parts.
    """
    if not route.is_dynamic:
        return [route.route_path]

    segments = [s for s in route.route_path.split("/") if s]
    examples: List[str] = []
    for i in range(count):
        parts: List[str] = []
        for segment in segments:
            if _catch_all_param(segment) is not None:
                parts.extend([f"example-{i}-part-1", f"example-{i}-part-2"])
            elif _dynamic_param(segment) is not None:
                parts.append(f"example-{i}")
            else:
                parts.append(segment)
        examples.append("/" + "/".join(parts))
    return examples
