"""
L3 Detection — ``__init__.py`` re-exports all read-only probes.

Probes read host state (filesystem, subprocess ``--version`` calls)
and never write.
"""

from imei.core.services.install.detection.host import (  # noqa: F401
    check_preconditions,
    detect_cmake_version,
    detect_host,
)
from imei.core.services.install.detection.installed_state import (  # noqa: F401
    is_installed,
    probe_all,
    probe_installed_version,
    probe_library_version,
    probe_magick_version,
)
