"""
L3 Detection — Host preconditions and capabilities.

Read-only probes: effective user, package manager, HTTPS support,
distro, architecture, CPU count, and the installed cmake version.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import platform
import re
import shutil
import subprocess
from collections.abc import Callable

from imei.core.errors import PreconditionFailed
from imei.core.models.host import HostInfo

logger = logging.getLogger(__name__)

_CMAKE_VERSION_RE = re.compile(r"cmake version\s+(\d+(?:\.\d+)*)")


def check_preconditions(
    *,
    euid: int | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    """Fail early when the installer cannot possibly succeed.

    Raises:
        PreconditionFailed: Not root, not a Debian-family system, or
            this Python lacks TLS support for HTTPS downloads.
    """
    if euid is None:
        euid = os.geteuid()
    if euid != 0:
        raise PreconditionFailed(
            "You must be root or use sudo to run this installer"
        )

    if not which("apt-get"):
        raise PreconditionFailed(
            "This installer cannot run on any other system than Debian or Ubuntu"
        )

    if importlib.util.find_spec("ssl") is None:
        raise PreconditionFailed(
            "This installer requires a Python built with SSL support"
        )


def _read_os_release() -> dict[str, str]:
    try:
        return platform.freedesktop_os_release()
    except OSError:
        return {}


def _lsb_release(flag: str) -> str:
    if not shutil.which("lsb_release"):
        return ""
    try:
        r = subprocess.run(
            ["lsb_release", flag], capture_output=True, text=True, timeout=10,
        )
        return r.stdout.strip() if r.returncode == 0 else ""
    except (subprocess.TimeoutExpired, OSError):
        return ""


def detect_cmake_version() -> str | None:
    """Installed cmake version (``"3.25.1"``), or None if unavailable."""
    if not shutil.which("cmake"):
        return None
    try:
        r = subprocess.run(
            ["cmake", "--version"], capture_output=True, text=True, timeout=10,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("cmake --version failed: %s", exc)
        return None
    match = _CMAKE_VERSION_RE.search(r.stdout or "")
    return match.group(1) if match else None


def detect_host() -> HostInfo:
    """Collect distro, architecture, cores, and cmake version.

    Prefers ``/etc/os-release``; falls back to ``lsb_release``.
    """
    release = _read_os_release()
    pretty = release.get("PRETTY_NAME") or _lsb_release("-ds")
    codename = (
        release.get("VERSION_CODENAME")
        or release.get("UBUNTU_CODENAME")
        or _lsb_release("-sc")
    )
    return HostInfo(
        distro_id=release.get("ID", ""),
        codename=codename or "",
        pretty_name=pretty or "",
        arch=platform.machine(),
        cpu_count=os.cpu_count() or 1,
        cmake_version=detect_cmake_version(),
    )
