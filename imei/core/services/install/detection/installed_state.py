"""
L3 Detection — Installed component versions.

Read-only probes.  Libraries are detected through the unversioned
``.so`` symlink under ``<lib_dir>/lib`` — its target carries the
full version (``libaom.so → libaom.so.3.6.0``).  ImageMagick is
detected by asking ``magick -version``.

Nothing here is cached: later stages re-probe to see what earlier
stages installed.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path

from imei.core.models.component import Component
from imei.core.services.install.data.components import COMPONENTS, get_component
from imei.core.services.install.data.constants import MAGICK_VERSION_PATTERN

logger = logging.getLogger(__name__)


def library_link(lib_dir: Path, library: str) -> Path:
    """Path of the unversioned shared-library symlink."""
    return lib_dir / "lib" / f"{library}.so"


def probe_library_version(lib_dir: Path, library: str) -> str | None:
    """Version of a shared library from its symlink target.

    Returns:
        ``"3.6.0"`` for ``libaom.so → libaom.so.3.6.0``, or None if the
        symlink is missing or its target carries no version.
    """
    link = library_link(lib_dir, library)
    if not link.is_symlink():
        return None
    try:
        target = Path(os.path.realpath(link)).name
    except OSError as exc:
        logger.warning("Cannot resolve %s: %s", link, exc)
        return None
    match = re.search(rf"{re.escape(library)}\.so\.(\d+(?:\.\d+)*)", target)
    return match.group(1) if match else None


def probe_magick_version(binary: str | None = None) -> str | None:
    """ImageMagick version reported by ``magick -version``.

    Args:
        binary: Explicit path to ``magick``; defaults to the one on PATH.

    Returns:
        Version string such as ``"7.1.0-15"``, or None.
    """
    magick = binary or shutil.which("magick")
    if not magick or (binary and not Path(binary).is_file()):
        return None
    try:
        r = subprocess.run(
            [magick, "-version"], capture_output=True, text=True, timeout=30,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("%s -version failed: %s", magick, exc)
        return None
    output = (r.stdout or "") + (r.stderr or "")
    match = re.search(MAGICK_VERSION_PATTERN, output)
    return match.group(1) if match else None


def probe_installed_version(component: Component, lib_dir: Path) -> str | None:
    """Currently installed version of ``component`` (None = not installed)."""
    if component.library:
        return probe_library_version(lib_dir, component.library)
    return probe_magick_version()


def is_installed(name: str, lib_dir: Path) -> bool:
    """Whether a component is present on the host.

    For libraries this is the existence of the symlink — enough for a
    dependent build to link against, even if the version is unreadable.
    """
    component = get_component(name)
    if component.library:
        return library_link(lib_dir, component.library).is_symlink()
    return probe_magick_version() is not None


def probe_all(lib_dir: Path) -> dict[str, str | None]:
    """Installed versions of every component, in build order."""
    return {c.name: probe_installed_version(c, lib_dir) for c in COMPONENTS}
