"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for build and
install operations.  Every invocation returns a ``CommandResult``
and appends the command line plus its full captured output to the
run log file.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path

from imei.core.models.command import CommandResult

logger = logging.getLogger(__name__)

# Tail kept in the result object; the log file gets everything.
_OUTPUT_TAIL = 4000


def append_to_log(log_file: Path | None, text: str) -> None:
    """Append raw text to the run log.  No-op without a log file."""
    if log_file is None or not text:
        return
    with open(log_file, "a", encoding="utf-8", errors="replace") as fh:
        fh.write(text if text.endswith("\n") else text + "\n")


def run_command(
    cmd: list[str],
    *,
    cwd: str | Path | None = None,
    env_overrides: dict[str, str] | None = None,
    log_file: Path | None = None,
    timeout: int | None = None,
) -> CommandResult:
    """Run a command synchronously and capture its output.

    Builds are not time-limited by default: the call blocks until
    the tool returns.

    Args:
        cmd: Command list for ``subprocess.run()``.
        cwd: Working directory for the command.
        env_overrides: Extra env vars (e.g. ``CC``, ``MAKEFLAGS``).
        log_file: Run log receiving the command and its output.
        timeout: Optional seconds before ``TimeoutExpired``.

    Returns:
        ``CommandResult`` — never raises for a failing command.
    """
    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    where = f" (cwd={cwd})" if cwd else ""
    append_to_log(log_file, f"$ {' '.join(cmd)}{where}")
    logger.debug("Executing: %s%s", cmd, where)

    start = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            env=env,
            cwd=str(cwd) if cwd else None,
            timeout=timeout,
        )
    except FileNotFoundError:
        result = CommandResult(
            command=list(cmd), returncode=127,
            error=f"Command not found: {cmd[0]}",
        )
        append_to_log(log_file, result.error or "")
        return result
    except subprocess.TimeoutExpired:
        result = CommandResult(
            command=list(cmd), returncode=-1,
            error=f"Command timed out ({timeout}s)",
        )
        append_to_log(log_file, result.error or "")
        return result
    except OSError as exc:
        logger.exception("Subprocess error: %s", cmd)
        result = CommandResult(command=list(cmd), returncode=-1, error=str(exc))
        append_to_log(log_file, result.error or "")
        return result

    elapsed_ms = int((time.monotonic() - start) * 1000)
    append_to_log(log_file, proc.stdout or "")
    append_to_log(log_file, proc.stderr or "")

    if proc.returncode != 0:
        append_to_log(log_file, f"[exit {proc.returncode}]")
        logger.debug("Command failed (exit %d): %s", proc.returncode, cmd)

    return CommandResult(
        command=list(cmd),
        returncode=proc.returncode,
        stdout=(proc.stdout or "")[-_OUTPUT_TAIL:],
        stderr=(proc.stderr or "")[-_OUTPUT_TAIL:],
        elapsed_ms=elapsed_ms,
    )
