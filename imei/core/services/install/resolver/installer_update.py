"""
L2 Resolver — Newer-installer notice.

Reads the version header of the latest published installer and
compares it with the running one.  Purely informational: any
failure just means no notice.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from imei.core.errors import FetchError, MalformedVersion
from imei.core.models.run_config import RunConfig
from imei.core.services.install.data.constants import INSTALLER_VERSION_PATTERN
from imei.core.services.install.domain.version_compare import compare_versions
from imei.core.services.install.execution.download import http_get_text

logger = logging.getLogger(__name__)


def latest_installer_version(
    config: RunConfig,
    *,
    fetch_text: Callable[..., str] = http_get_text,
) -> str | None:
    """Version published in the latest installer's header, or None."""
    try:
        text = fetch_text(config.installer_url, headers=config.http_headers())
    except FetchError as exc:
        logger.debug("Cannot check for installer updates: %s", exc)
        return None
    match = re.search(INSTALLER_VERSION_PATTERN, text)
    return match.group(1) if match else None


def newer_installer_available(current: str, latest: str | None) -> bool:
    """Whether ``latest`` is strictly newer than ``current``."""
    if not latest:
        return False
    try:
        return compare_versions(current, latest) < 0
    except MalformedVersion:
        return False
