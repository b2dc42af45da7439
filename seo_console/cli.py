#!/usr/bin/env python3
"""
seo-console: command-line front end for the SEO console.

Every command prints its result as JSON on stdout; logs go to stderr (and
to a timestamped file with ``--log-dir``).

Usage:
  seo-console extract https://example.com/about
  seo-console check-image https://example.com/og.png --width 1200 --height 630
  seo-console import-site https://example.com / /about /blog
  seo-console validate-all --base-url https://example.com
  seo-console --dsn sqlite:///seo.db export --format csv -o report.csv
  seo-console sitemap --base-url https://example.com -o public/sitemap.xml
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from pydantic import BaseModel, ValidationError

from seo_console.core.logging_config import get_logger, setup_logging
from seo_console.core.models import StorageConfig, ValidatorConfig
from seo_console.crawlability_validator import (
    validate_crawlability,
    validate_public_access,
    validate_robots_txt,
)
from seo_console.image_validator import validate_og_image
from seo_console.metadata_extractor import extract_metadata_from_url, metadata_to_seo_record
from seo_console.records_io import (
    export_records_csv,
    export_records_json,
    import_records,
    summarize_record_issues,
)
from seo_console.robots_generator import (
    UserAgentRule,
    generate_robots_txt,
    update_robots_txt_with_sitemap,
)
from seo_console.route_discovery import discover_nextjs_routes, generate_example_paths
from seo_console.sitemap_generator import generate_sitemap_from_records
from seo_console.storage.adapter import DuplicateRouteError, RecordNotFoundError, StorageAdapter
from seo_console.storage.factory import create_storage_adapter
from seo_console.validation_runner import (
    bulk_create_records,
    bulk_validate,
    import_from_site,
    validate_record,
)

logger = get_logger(__name__)


# ============================================================================
# HELPERS
# ============================================================================

def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(_jsonable(value), indent=2, ensure_ascii=False))


def _abort(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _store(ctx: click.Context) -> StorageAdapter:
    if "store" not in ctx.obj:
        ctx.obj["store"] = create_storage_adapter(ctx.obj["storage_config"])
    return ctx.obj["store"]


def _write_or_echo(content: str, output: Optional[str]) -> None:
    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        Path(output).write_text(content + ("" if content.endswith("\n") else "\n"), encoding="utf-8")
        logger.info("Written to '%s'", output)
    else:
        click.echo(content)


# ============================================================================
# GROUP
# ============================================================================

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--storage-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON file for the file store (env: SEO_CONSOLE_STORAGE_PATH).",
)
@click.option(
    "--dsn",
    default=None,
    help="SQLAlchemy URL; selects the SQL store (env: SEO_CONSOLE_DB_DSN).",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Also write a DEBUG log file in this directory.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show DEBUG logs on stderr.")
@click.pass_context
def main(
    ctx: click.Context,
    storage_path: Optional[str],
    dsn: Optional[str],
    log_dir: Optional[str],
    verbose: bool,
) -> None:
    """Manage SEO records and validate live pages against them."""
    setup_logging(
        log_dir=log_dir,
        run_name=ctx.invoked_subcommand or "seo_console",
        level=logging.DEBUG if verbose else logging.INFO,
    )

    try:
        values = StorageConfig.from_env().model_dump(exclude_unset=True)
        if storage_path:
            values["file_path"] = Path(storage_path)
        if dsn:
            values["dsn"] = dsn
        storage_config = StorageConfig(**values)
    except ValidationError as exc:
        click.echo(f"Configuration error:\n{exc}", err=True)
        raise SystemExit(1)

    ctx.obj = {"storage_config": storage_config, "validator_config": ValidatorConfig()}


# ============================================================================
# PAGE CHECKS
# ============================================================================

@main.command()
@click.argument("url")
@click.option("--route", default=None, help="Also save the extraction as a record for this route.")
@click.pass_context
def extract(ctx: click.Context, url: str, route: Optional[str]) -> None:
    """Extract the SEO metadata a live page serves."""
    try:
        metadata = extract_metadata_from_url(url, ctx.obj["validator_config"])
        if route is None:
            _echo_json(metadata)
            return
        record = _store(ctx).create_record(metadata_to_seo_record(metadata, route))
    except (ValueError, DuplicateRouteError) as exc:
        _abort(str(exc))
    _echo_json(record)


@main.command()
@click.argument("record_id")
@click.option("--base-url", required=True, help="Site root the record's route lives under.")
@click.pass_context
def validate(ctx: click.Context, record_id: str, base_url: str) -> None:
    """Validate one stored record against its live page and save the outcome."""
    try:
        result = validate_record(_store(ctx), record_id, base_url, ctx.obj["validator_config"])
    except (RecordNotFoundError, ValueError) as exc:
        _abort(str(exc))
    _echo_json(result)


@main.command("validate-all")
@click.option("--base-url", required=True, help="Site root the records' routes live under.")
@click.option("--user-id", default=None, help="Only validate this owner's records.")
@click.pass_context
def validate_all(ctx: click.Context, base_url: str, user_id: Optional[str]) -> None:
    """Validate every stored record and print a summary."""
    store = _store(ctx)
    results = bulk_validate(store, base_url, ctx.obj["validator_config"], user_id=user_id)
    _echo_json({
        "results": results,
        "summary": summarize_record_issues(store.get_records(user_id)),
    })


@main.command("check-image")
@click.argument("image_url")
@click.option("--width", type=int, default=None, help="Expected width in pixels.")
@click.option("--height", type=int, default=None, help="Expected height in pixels.")
@click.pass_context
def check_image(ctx: click.Context, image_url: str, width: Optional[int], height: Optional[int]) -> None:
    """Check an Open Graph image (size, ratio, format, weight)."""
    try:
        result = validate_og_image(image_url, width, height, ctx.obj["validator_config"])
    except ValueError as exc:
        _abort(str(exc))
    _echo_json(result)


@main.command()
@click.argument("url")
@click.pass_context
def crawlability(ctx: click.Context, url: str) -> None:
    """Check that a page can be crawled and indexed."""
    try:
        result = validate_crawlability(url, config=ctx.obj["validator_config"])
    except ValueError as exc:
        _abort(str(exc))
    _echo_json(result)


@main.command("robots-check")
@click.argument("base_url")
@click.argument("route_path")
@click.pass_context
def robots_check(ctx: click.Context, base_url: str, route_path: str) -> None:
    """Check whether the site's robots.txt allows ROUTE_PATH."""
    try:
        result = validate_robots_txt(base_url, route_path, ctx.obj["validator_config"])
    except ValueError as exc:
        _abort(str(exc))
    _echo_json(result)


@main.command("public-access")
@click.argument("url")
@click.pass_context
def public_access(ctx: click.Context, url: str) -> None:
    """Check that a page is reachable without authentication."""
    try:
        result = validate_public_access(url, ctx.obj["validator_config"])
    except ValueError as exc:
        _abort(str(exc))
    _echo_json(result)


# ============================================================================
# SITE FILES
# ============================================================================

@main.command()
@click.option("--base-url", required=True, help="Site root for relative locations.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write to this file.")
@click.pass_context
def sitemap(ctx: click.Context, base_url: str, output: Optional[str]) -> None:
    """Generate sitemap.xml from the stored records."""
    xml = generate_sitemap_from_records(_store(ctx).get_records(), base_url)
    _write_or_echo(xml, output)


@main.command()
@click.option("--sitemap-url", default=None, help="Sitemap URL to reference.")
@click.option("--crawl-delay", type=float, default=None, help="Crawl-delay in seconds.")
@click.option("--disallow", multiple=True, help="Path to disallow for all agents (repeatable).")
@click.option(
    "--update",
    "existing",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Existing robots.txt whose Sitemap line should be set instead.",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write to this file.")
def robots(
    sitemap_url: Optional[str],
    crawl_delay: Optional[float],
    disallow: tuple[str, ...],
    existing: Optional[str],
    output: Optional[str],
) -> None:
    """Generate robots.txt, or point an existing one at a sitemap."""
    if existing:
        if not sitemap_url:
            _abort("--update requires --sitemap-url")
        content = update_robots_txt_with_sitemap(Path(existing).read_text(encoding="utf-8"), sitemap_url)
    else:
        rules = [UserAgentRule(agent="*", allow=["/"], disallow=list(disallow))] if disallow else None
        content = generate_robots_txt(rules, sitemap_url=sitemap_url, crawl_delay=crawl_delay)
    _write_or_echo(content, output)


@main.command()
@click.option("--app-dir", default="app", show_default=True, help="Next.js app directory.")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project root (default: current directory).",
)
@click.option("--create", is_flag=True, help="Create a record for each discovered route.")
@click.pass_context
def discover(ctx: click.Context, app_dir: str, root: Optional[str], create: bool) -> None:
    """Discover Next.js routes; dynamic routes expand to example paths."""
    routes = discover_nextjs_routes(app_dir, root)
    if not create:
        _echo_json(routes)
        return
    payloads = [
        {"routePath": path}
        for route in routes
        for path in generate_example_paths(route, count=1)
    ]
    _echo_json(bulk_create_records(_store(ctx), payloads))


# ============================================================================
# RECORDS
# ============================================================================

@main.command("import-site")
@click.argument("base_url")
@click.argument("routes", nargs=-1)
@click.pass_context
def import_site(ctx: click.Context, base_url: str, routes: tuple[str, ...]) -> None:
    """Create records from the metadata BASE_URL serves for ROUTES (default: /)."""
    results = import_from_site(_store(ctx), base_url, list(routes) or None, ctx.obj["validator_config"])
    _echo_json(results)


@main.command()
@click.option(
    "--format", "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    show_default=True,
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write to this file.")
@click.pass_context
def export(ctx: click.Context, fmt: str, output: Optional[str]) -> None:
    """Export stored records as a CSV report or complete JSON."""
    records = _store(ctx).get_records()
    content = export_records_csv(records) if fmt == "csv" else export_records_json(records)
    _write_or_echo(content.rstrip("\n"), output)


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--user-id", default=None, help="Owner of the imported records.")
@click.pass_context
def import_cmd(ctx: click.Context, path: str, user_id: Optional[str]) -> None:
    """Create records from a CSV or JSON export."""
    try:
        results = import_records(_store(ctx), path, user_id=user_id)
    except ValueError as exc:
        _abort(str(exc))
    _echo_json(results)


if __name__ == "__main__":
    main()
