"""
Shared test fixtures and configuration.

Every path lives under ``tmp_path``; see ``tests/fakes.py`` for the
runner and download doubles.
"""

from pathlib import Path

import pytest

from imei.core.models.host import HostInfo
from imei.core.models.run_config import RunConfig


@pytest.fixture
def host() -> HostInfo:
    return HostInfo(
        distro_id="debian",
        codename="bookworm",
        pretty_name="Debian GNU/Linux 12 (bookworm)",
        arch="x86_64",
        cpu_count=4,
        cmake_version="3.25.1",
    )


@pytest.fixture
def run_config(tmp_path: Path) -> RunConfig:
    """RunConfig rooted entirely in tmp_path, signature check off."""
    return RunConfig(
        log_file=tmp_path / "imei.log",
        work_dir=tmp_path / "work",
        build_dir=tmp_path / "prefix",
        lib_dir=tmp_path / "prefix",
        verify_signature=False,
        skip_dependencies=True,
    )


@pytest.fixture
def versions() -> dict[str, str]:
    return {
        "aom": "3.6.0",
        "libheif": "1.16.2",
        "jpeg-xl": "0.8.2",
        "imagemagick": "7.1.1-15",
    }
