"""
L5 Orchestration — Post-install verification.

Runs the freshly installed ``magick`` and checks that it reports the
version we meant to install.  The answer only feeds the summary:
no retry, no rollback, no change to the exit status.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from imei.core.models.command import CommandResult
from imei.core.services.install.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)


def magick_binary(build_dir: Path) -> Path:
    """Location of ``magick`` under the install prefix."""
    return build_dir / "bin" / "magick"


def verify_installation(
    build_dir: Path,
    target_version: str,
    *,
    log_file: Path | None = None,
    run: Callable[..., CommandResult] = run_command,
) -> bool:
    """Whether ``<build_dir>/bin/magick -version`` mentions ``target_version``."""
    result = run([str(magick_binary(build_dir)), "-version"], log_file=log_file)
    if not result.ok:
        logger.warning("Verification failed: %s", result.describe_failure())
        return False
    if target_version not in result.output:
        logger.warning(
            "Verification failed: ImageMagick %s not found in version output",
            target_version,
        )
        return False
    return True
