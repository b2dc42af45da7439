"""
Logging for seo-console.

Library modules only ever ask for a logger:
    from seo_console.core.logging_config import get_logger
    logger = get_logger(__name__)

Handlers are installed once, by the ``seo-console`` command group, named
after the subcommand being run:
    setup_logging(log_dir=None, run_name="validate-all")
    setup_logging(log_dir="Logs", run_name="import-site", level=logging.DEBUG)

Stdout carries the JSON a command prints, so console logs go to stderr.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

# ── Constants ────────────────────────────────────────────────────────────────
_ROOT_LOGGER = "seo_console"
_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ── Public API ────────────────────────────────────────────────────────────────

def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the ``seo_console`` hierarchy.

    ``seo_console.html_validator`` is returned as-is; a name from outside the
    package (a test module, a script) is prefixed so the handlers installed
    by :func:`setup_logging` still see its records.
    """
    qualified = name if name.startswith(_ROOT_LOGGER) else f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(qualified)


def setup_logging(
    log_dir: str | Path | None = None,
    run_name: str = "seo_console",
    level: int = logging.INFO,
) -> logging.Logger:
    """Attach the stderr handler and, with ``log_dir``, a per-run log file.

    A second call is a no-op, so commands invoked programmatically after the
    group callback do not duplicate output.

    Args:
        log_dir:  Directory for ``<run_name>_<YYYYmmdd_HHMMSS>.log``; created
                  if absent. ``None`` (the CLI default) logs to stderr only.
        run_name: Subcommand name, e.g. ``validate-all`` or ``import-site``.
        level:    Stderr level; ``--verbose`` passes DEBUG. The file always
                  records DEBUG so every fetch and status is kept.

    Returns:
        The ``seo_console`` logger.
    """
    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(logging.DEBUG)

    if root.handlers:
        return root

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    root.addHandler(stderr_handler)

    if log_dir is None:
        return root

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"{run_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    root.info("seo-console %s: logging to %s", run_name, log_file)
    return root


def reset_logging() -> None:
    """Close and detach every handler on the ``seo_console`` logger (test teardown)."""
    root = logging.getLogger(_ROOT_LOGGER)
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
