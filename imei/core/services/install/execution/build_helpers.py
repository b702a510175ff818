"""
L4 Execution — Build-from-source helpers.

Turns a recipe from ``data.recipes`` into concrete command steps and
runs them fail-fast, followed by a linker cache refresh.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from imei.core.models.command import CommandResult
from imei.core.models.host import HostInfo
from imei.core.services.install.data.recipes import BUILD_RECIPES, LDCONFIG_COMMAND
from imei.core.services.install.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]


def _substitute_build_vars(
    command: list[str],
    variables: dict[str, str],
) -> list[str]:
    """Replace ``{var}`` placeholders in a command array.

    Args:
        command: Command array with possible ``{var}`` tokens.
        variables: Mapping of variable names to their values.

    Returns:
        New list with all ``{key}`` tokens substituted.
    """
    result: list[str] = []
    for token in command:
        for key, value in variables.items():
            token = token.replace(f"{{{key}}}", str(value))
        result.append(token)
    return result


def recipe_steps(
    component: str,
    *,
    source_dir: Path,
    work_dir: Path,
    prefix: Path,
    host: HostInfo,
) -> list[dict]:
    """Resolve a component's recipe into runnable steps.

    Args:
        component: Component name (key of ``BUILD_RECIPES``).
        source_dir: Absolute path of the extracted sources.
        work_dir: Run work directory (base for relative build dirs).
        prefix: Install prefix for ``--prefix`` style arguments.
        host: Host info (Raspbian gets extra compiler flags).

    Returns:
        Ordered ``{"label", "command", "cwd"}`` dicts.
    """
    recipe = BUILD_RECIPES[component]
    variables = {"source_dir": str(source_dir), "prefix": str(prefix)}

    build_subdir = recipe.get("build_subdir")
    build_dir = source_dir
    if build_subdir:
        build_dir = work_dir / _substitute_build_vars([build_subdir], variables)[0]
    variables["build_dir"] = str(build_dir)

    steps: list[dict] = []
    for raw in recipe["steps"]:
        cmd = list(raw["command"])
        if host.is_raspbian:
            cmd += raw.get("raspbian_args", [])
        steps.append({
            "label": raw["label"],
            "command": _substitute_build_vars(cmd, variables),
            "cwd": build_dir if raw.get("cwd") == "build" else source_dir,
        })
    return steps


def run_recipe(
    steps: list[dict],
    *,
    env_overrides: dict[str, str] | None = None,
    log_file: Path | None = None,
    run: Runner = run_command,
) -> CommandResult:
    """Run recipe steps in order, then ``ldconfig``.  Stops at the first failure.

    Returns:
        The failing ``CommandResult``, or the ``ldconfig`` result on success.
    """
    for step in steps:
        cwd: Path = step["cwd"]
        try:
            cwd.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return CommandResult(
                command=step["command"], returncode=-1,
                error=f"Cannot create {cwd}: {exc}",
            )
        logger.info("%s: %s", step["label"], " ".join(step["command"]))
        result = run(
            step["command"], cwd=cwd, env_overrides=env_overrides, log_file=log_file,
        )
        if not result.ok:
            return result

    return run(LDCONFIG_COMMAND, log_file=log_file)
