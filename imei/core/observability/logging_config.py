"""
Logging configuration — central setup for the CLI.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console levels are resolved in precedence order:
    --debug  >  --verbose  >  IMEI_LOG_LEVEL env var  >  WARNING (default)

The run log file (``/var/log/imei.log`` by default) is attached only
for the duration of an install run, always at full detail, next to
the command output the subprocess runner appends to the same file.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from imei.core.errors import PreconditionFailed

# ── Format strings ──────────────────────────────────────────────

# WARNING level — minimal, no noise
_FMT_MINIMAL = "%(message)s"

# INFO level — timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level — full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output — always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_ENV = "IMEI_LOG_LEVEL"


def resolve_level(*, debug: bool = False, verbose: bool = False) -> str:
    """Console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def setup_logging(level: str = "WARNING") -> None:
    """Configure console logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = _parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(numeric_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def reset_log_file(path: Path) -> None:
    """Delete the previous run's log file.

    Raises:
        PreconditionFailed: If the file exists but cannot be removed.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        raise PreconditionFailed(f"Cannot reset log file {path}: {exc}") from exc


@contextmanager
def run_log(path: Path, level: str = "DEBUG") -> Iterator[Path]:
    """Start a fresh run log at ``path`` and route log records into it.

    The handler is detached and closed on exit; the file itself stays
    behind for the user to inspect.

    Raises:
        PreconditionFailed: If the log file cannot be reset or opened.
    """
    reset_log_file(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        raise PreconditionFailed(f"Cannot open log file {path}: {exc}") from exc

    file_level = _parse_level(level)
    handler.setLevel(file_level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))

    root = logging.getLogger()
    previous_level = root.level
    root.addHandler(handler)
    # Effective root level = minimum of console and file levels
    root.setLevel(min(previous_level or logging.WARNING, file_level))
    try:
        yield path
    finally:
        root.removeHandler(handler)
        handler.close()
        root.setLevel(previous_level)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
