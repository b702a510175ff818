"""
L4 Execution — Scoped working directory.

The work directory holds downloaded archives and build trees.  It is
wiped before use and removed again on every exit path — normal
completion, a fatal error, or a termination signal (converted into
``SystemExit`` so ``finally`` blocks run).
"""

from __future__ import annotations

import logging
import shutil
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from imei.core.errors import PreconditionFailed

logger = logging.getLogger(__name__)

_TERMINATING_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def _remove_tree(path: Path) -> None:
    if path.is_dir():
        shutil.rmtree(path, ignore_errors=True)


@contextmanager
def workspace(work_dir: Path) -> Iterator[Path]:
    """Create a clean ``work_dir`` for the run and remove it afterwards.

    Raises:
        PreconditionFailed: If the directory cannot be created.
    """
    _remove_tree(work_dir)
    try:
        work_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PreconditionFailed(
            f"Could not create temp directory {work_dir}: {exc}"
        ) from exc

    logger.debug("Work dir ready: %s", work_dir)
    try:
        yield work_dir
    finally:
        _remove_tree(work_dir)
        logger.debug("Work dir removed: %s", work_dir)


@contextmanager
def exit_on_signals() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP into ``SystemExit(1)`` for the duration.

    Ctrl-C already raises ``KeyboardInterrupt``; this extends the same
    unwinding to external termination.
    """

    def _handler(signum, frame):  # noqa: ARG001
        raise SystemExit(1)

    previous = {}
    for sig in _TERMINATING_SIGNALS:
        try:
            previous[sig] = signal.signal(sig, _handler)
        except ValueError:
            # Not in the main thread — leave handlers alone
            pass
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
