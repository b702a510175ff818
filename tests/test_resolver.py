"""
Tests for target version resolution and the installer update notice.
"""

import pytest

from imei.core.errors import VersionUnresolved
from imei.core.models.run_config import RunConfig
from imei.core.services.install.data.components import AOM, IMAGEMAGICK
from imei.core.services.install.resolver.installer_update import (
    latest_installer_version,
    newer_installer_available,
)
from imei.core.services.install.resolver.version_oracle import (
    manifest_url,
    resolve_all,
    resolve_version,
)

from tests.fakes import FakeRemote

BASE = "https://example.test/versions"


def _config(**kwargs) -> RunConfig:
    return RunConfig(manifest_base_url=BASE, **kwargs)


class TestResolveVersion:
    """Tests for resolve_version()."""

    def test_manifest_version_and_hash(self):
        fetch = FakeRemote({
            f"{BASE}/aom.version": "3.6.0\n",
            f"{BASE}/aom.hash": "ABCDEF0123\n",
        })
        spec = resolve_version(AOM, _config(), fetch_text=fetch)
        assert spec.target_version == "3.6.0"
        assert spec.expected_hash == "abcdef0123"
        assert spec.installed_version is None

    def test_hash_is_optional(self):
        fetch = FakeRemote({f"{BASE}/aom.version": "3.6.0"})
        spec = resolve_version(AOM, _config(), fetch_text=fetch)
        assert spec.target_version == "3.6.0"
        assert spec.expected_hash is None

    def test_override_skips_manifest(self):
        fetch = FakeRemote({})
        config = _config(version_overrides={"imagemagick": "7.1.0-50"})
        spec = resolve_version(IMAGEMAGICK, config, fetch_text=fetch)
        assert spec.target_version == "7.1.0-50"
        assert spec.expected_hash is None
        assert fetch.requests == []

    def test_unreachable_manifest(self):
        with pytest.raises(VersionUnresolved, match="aom"):
            resolve_version(AOM, _config(), fetch_text=FakeRemote({}))

    def test_empty_manifest(self):
        fetch = FakeRemote({f"{BASE}/aom.version": "   "})
        with pytest.raises(VersionUnresolved):
            resolve_version(AOM, _config(), fetch_text=fetch)

    def test_error_page_is_not_a_version(self):
        fetch = FakeRemote({f"{BASE}/aom.version": "404: Not Found"})
        with pytest.raises(VersionUnresolved):
            resolve_version(AOM, _config(), fetch_text=fetch)

    def test_malformed_override(self):
        config = _config(version_overrides={"aom": "latest"})
        with pytest.raises(VersionUnresolved):
            resolve_version(AOM, config, fetch_text=FakeRemote({}))

    def test_token_sent_as_bearer(self):
        fetch = FakeRemote({f"{BASE}/aom.version": "3.6.0"})
        resolve_version(AOM, _config(github_token="s3cret"), fetch_text=fetch)
        _, headers = fetch.requests[0]
        assert headers["Authorization"] == "Bearer s3cret"
        assert headers["User-Agent"] == "curl"


class TestResolveAll:
    """Tests for resolve_all()."""

    def test_build_order(self, versions):
        fetch = FakeRemote({
            manifest_url(BASE, name, "version"): v for name, v in versions.items()
        })
        specs = resolve_all(_config(), fetch_text=fetch)
        assert list(specs) == ["aom", "libheif", "jpeg-xl", "imagemagick"]
        assert specs["jpeg-xl"].target_version == "0.8.2"

    def test_one_missing_is_fatal(self, versions):
        entries = {manifest_url(BASE, n, "version"): v for n, v in versions.items()}
        del entries[manifest_url(BASE, "libheif", "version")]
        with pytest.raises(VersionUnresolved, match="libheif"):
            resolve_all(_config(), fetch_text=FakeRemote(entries))


class TestInstallerUpdate:
    """Tests for the newer-installer notice."""

    def test_reads_version_header(self):
        config = _config()
        fetch = FakeRemote({config.installer_url: "#!/bin/bash\n# Version : 6.2.0\n"})
        assert latest_installer_version(config, fetch_text=fetch) == "6.2.0"

    def test_unreachable_means_no_notice(self):
        assert latest_installer_version(_config(), fetch_text=FakeRemote({})) is None

    def test_newer(self):
        assert newer_installer_available("6.1.1", "6.2.0")
        assert not newer_installer_available("6.1.1", "6.1.1")
        assert not newer_installer_available("6.1.1", None)
        assert not newer_installer_available("6.1.1", "garbage")
