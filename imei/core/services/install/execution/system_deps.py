"""
L4 Execution — System prerequisites (apt).

Writes a temporary apt source list enabling ``deb-src`` entries,
refreshes the package index, satisfies ImageMagick's build
dependencies, and installs the extra packages the codecs need.
Everything here WRITES to the system.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from imei.core.models.command import CommandResult
from imei.core.models.host import HostInfo
from imei.core.services.install.data.constants import (
    APT_SOURCES,
    BUILD_PACKAGES,
    RAQM_PACKAGES,
    RAQM_UNSUPPORTED_CODENAMES,
    SOURCE_LIST,
)
from imei.core.services.install.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def _distro_family(host: HostInfo) -> str | None:
    """Pick the APT_SOURCES key for this host, or None if unknown."""
    haystack = f"{host.distro_id} {host.pretty_name}".lower()
    # raspbian before debian: Raspbian describes itself as Debian-based
    for family in ("ubuntu", "raspbian", "debian"):
        if family in haystack:
            return family
    return None


def source_lines(host: HostInfo) -> list[str]:
    """deb/deb-src lines for the host's distro (empty if unknown)."""
    family = _distro_family(host)
    if family is None or not host.codename:
        return []
    return [line.format(codename=host.codename) for line in APT_SOURCES[family]]


def package_list(host: HostInfo) -> list[str]:
    """Packages to install on this host."""
    packages = list(BUILD_PACKAGES)
    codename = host.codename.lower()
    if not any(old in codename for old in RAQM_UNSUPPORTED_CODENAMES):
        packages += list(RAQM_PACKAGES)
    return packages


@contextmanager
def apt_source_list(lines: list[str], path: Path = Path(SOURCE_LIST)) -> Iterator[bool]:
    """Install a temporary apt source list, removed on exit.

    Yields:
        True if a source list was written, False if ``lines`` was empty.
    """
    if path.exists():
        path.unlink()
    if not lines:
        yield False
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    try:
        yield True
    finally:
        if path.exists():
            path.unlink()


def ensure_system_prerequisites(
    host: HostInfo,
    *,
    ci: bool = False,
    log_file: Path | None = None,
    source_list: Path = Path(SOURCE_LIST),
    run: Runner = run_command,
) -> CommandResult:
    """Install everything the four builds need.

    With a known distro, ``deb-src`` entries are enabled and
    ``apt-get build-dep imagemagick`` pulls in ImageMagick's own build
    dependencies.  On unknown distros only the package index is
    refreshed — and in CI mode not even that.

    Returns:
        The first failing ``CommandResult``, or the last successful one.
    """
    lines = source_lines(host)
    steps: list[list[str]] = []

    with apt_source_list(lines, source_list) as has_sources:
        if has_sources:
            steps.append(["apt-get", "update", "-qq"])
            steps.append(["apt-get", "build-dep", "-qq", "-y", "imagemagick"])
        elif not ci:
            steps.append(["apt-get", "update", "-qq"])
        steps.append(["apt-get", "install", "-y"] + package_list(host))

        result = CommandResult()
        for cmd in steps:
            result = run(cmd, env_overrides=_APT_ENV, log_file=log_file)
            if not result.ok:
                logger.error("Prerequisite step failed: %s", result.describe_failure())
                return result

    return result
