"""
RunConfig — immutable snapshot of every resolved flag and override.

Built once at startup by ``imei.core.config.loader.load_run_config``
and passed explicitly to every component.  Nothing mutates it after
construction; stage decisions are pure functions of this value plus
freshly probed host state.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from imei.core.services.install.data.constants import (
    DEFAULT_BUILD_DIR,
    DEFAULT_LIB_DIR,
    DEFAULT_LOG_FILE,
    DEFAULT_WORK_DIR,
    INSTALLER_URL,
    MANIFEST_BASE_URL,
    PUBLIC_KEY_URL,
    SIGNATURE_URL,
)


def running_installer() -> Path | None:
    """The installer file this process was started from.

    None when there is no such file, e.g. ``curl … | python -``.
    """
    script = sys.argv[0] if sys.argv else ""
    if not script or not Path(script).is_file():
        return None
    return Path(script).resolve()


class RunConfig(BaseModel):
    """Resolved configuration for one installer run."""

    model_config = ConfigDict(frozen=True)

    # ── Build selection ─────────────────────────────────────────
    force: bool = False
    version_overrides: dict[str, str] = Field(default_factory=dict)
    skip: frozenset[str] = frozenset()
    skip_dependencies: bool = False

    # ── Paths ───────────────────────────────────────────────────
    log_file: Path = Path(DEFAULT_LOG_FILE)
    work_dir: Path = Path(DEFAULT_WORK_DIR)
    build_dir: Path = Path(DEFAULT_BUILD_DIR)      # ImageMagick install prefix
    lib_dir: Path = Path(DEFAULT_LIB_DIR)          # where codec libraries land

    # ── Modes ───────────────────────────────────────────────────
    ci: bool = False
    verify_signature: bool = True

    # ── Remote resources ────────────────────────────────────────
    manifest_base_url: str = MANIFEST_BASE_URL
    signature_url: str = SIGNATURE_URL
    public_key_url: str = PUBLIC_KEY_URL
    installer_url: str = INSTALLER_URL
    github_token: str | None = Field(default=None, repr=False)

    # Bytes covered by the detached signature (None = piped, nothing on disk)
    installer_path: Path | None = Field(default_factory=running_installer)

    def override_for(self, component: str) -> str | None:
        """User-pinned target version for ``component``, if any."""
        value = self.version_overrides.get(component)
        return value.strip() if value and value.strip() else None

    def is_skipped(self, component: str) -> bool:
        """Whether the user disabled ``component``."""
        return component in self.skip

    def http_headers(self) -> dict[str, str]:
        """Headers sent with every remote request."""
        headers = {"User-Agent": "curl"}
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers
