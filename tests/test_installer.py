"""
End-to-end tests for run_install() with every host interaction faked.
"""

import sys
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from imei.core.errors import IntegrityCheckFailed, StageFailed, VersionUnresolved
from imei.core.models.command import CommandResult
from imei.core.models.run_config import RunConfig
from imei.core.services.install.data.components import AOM
from imei.core.services.install.orchestration.installer import (
    collect_status,
    run_install,
)
from imei.core.services.install.orchestration.pipeline import PipelineFailed
from imei.core.services.install.resolver.version_oracle import manifest_url

from tests.fakes import FakeArchiveServer, FakeRemote, FakeRunner

MAGICK_OK = "Version: ImageMagick 7.1.1-15 Q16-HDRI x86_64\n"


class HostState:
    def __init__(self, installed=None):
        self.versions = dict(installed or {})

    def probe(self, component, lib_dir):
        return self.versions.get(component.name)

    def installed(self, name, lib_dir):
        return name in self.versions


def _manifest(config, versions, extra=None):
    resources = {
        manifest_url(config.manifest_base_url, name, "version"): v
        for name, v in versions.items()
    }
    resources.update(extra or {})
    return FakeRemote(resources)


def _install(config, host, versions, *, state=None, runner=None, fetch=None,
             fetch_text=None, server=None, events=None, plans=None):
    state = state or HostState()
    return run_install(
        config,
        on_progress=(lambda *e: events.append(e)) if events is not None else None,
        on_prepared=plans.append if plans is not None else None,
        preconditions=lambda: None,
        host_detector=lambda: host,
        cmake_detector=lambda: host.cmake_version,
        fetch=fetch or FakeRemote(),
        fetch_text=fetch_text or _manifest(config, versions),
        download=server or FakeArchiveServer(versions),
        run=runner or FakeRunner(outputs={"magick": MAGICK_OK}),
        probe=state.probe,
        installed=state.installed,
    )


class TestRunInstall:
    """Tests for the full install flow."""

    def test_imagemagick_behind(self, run_config, host, versions):
        installed = dict(versions)
        installed["imagemagick"] = "7.1.0"
        events = []
        report = _install(run_config, host, versions,
                          state=HostState(installed), events=events)
        assert report.built == ["imagemagick"]
        assert report.verified
        assert [r.component for r in report.results] == [
            "aom", "libheif", "jpeg-xl", "imagemagick",
        ]
        assert events[0] == ("dependencies", "skipped", "user-forced-skip")
        assert events[-1] == ("verification", "ok", "")

    def test_work_dir_removed(self, run_config, host, versions):
        _install(run_config, host, versions)
        assert not run_config.work_dir.exists()

    def test_log_file_written(self, run_config, host, versions):
        run_config.log_file.write_text("previous run\n")
        _install(run_config, host, versions)
        text = run_config.log_file.read_text()
        assert "previous run" not in text
        assert "imagemagick" in text

    def test_verification_mismatch_is_not_fatal(self, run_config, host, versions):
        runner = FakeRunner(outputs={"magick": "Version: ImageMagick 6.9.12-98\n"})
        events = []
        report = _install(run_config, host, versions, runner=runner, events=events)
        assert not report.verified
        assert events[-1] == ("verification", "failed", "")

    def test_unresolved_version_builds_nothing(self, run_config, host, versions):
        server = FakeArchiveServer(versions)
        fetch_text = _manifest(run_config, {"aom": "3.6.0"})
        with pytest.raises(VersionUnresolved, match="libheif"):
            _install(run_config, host, versions, fetch_text=fetch_text, server=server)
        assert server.requested == []

    def test_stage_failure_halts(self, run_config, host, versions):
        runner = FakeRunner(fail_on=lambda cmd: cmd[0] == "cmake")
        server = FakeArchiveServer(versions)
        with pytest.raises(PipelineFailed) as exc:
            _install(run_config, host, versions, runner=runner, server=server)
        assert exc.value.component == "aom"
        assert server.requested == [AOM.archive_url("3.6.0")]
        assert not run_config.work_dir.exists()

    def test_newer_installer_notice(self, run_config, host, versions):
        plans = []
        fetch_text = _manifest(run_config, versions, {
            run_config.installer_url: "#!/bin/bash\n# Version : 99.0.0\n",
        })
        _install(run_config, host, versions, fetch_text=fetch_text, plans=plans)
        assert plans[0].newer_installer == "99.0.0"
        assert plans[0].specs["aom"].target_version == "3.6.0"

    def test_ci_hides_newer_installer_notice(self, run_config, host, versions):
        plans = []
        config = run_config.model_copy(update={"ci": True})
        fetch_text = _manifest(config, versions, {
            config.installer_url: "#!/bin/bash\n# Version : 99.0.0\n",
        })
        _install(config, host, versions, fetch_text=fetch_text, plans=plans)
        assert plans[0].newer_installer is None
        assert config.installer_url not in [url for url, _ in fetch_text.requests]

    def test_prerequisite_failure(self, run_config, host, versions):
        config = run_config.model_copy(update={"skip_dependencies": False})
        server = FakeArchiveServer(versions)
        failed = CommandResult(command=["apt-get", "install"], returncode=100)
        with patch(
            "imei.core.services.install.orchestration.installer.ensure_system_prerequisites",
            return_value=failed,
        ):
            with pytest.raises(StageFailed, match="dependencies"):
                _install(config, host, versions, server=server)
        assert server.requested == []


class TestIntegrityGate:
    """A failed signature check means nothing gets built."""

    def test_bad_signature(self, run_config, host, versions, tmp_path):
        installer = tmp_path / "imei.sh"
        installer.write_bytes(b"#!/bin/bash\n")
        key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        pem = key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        fetch = FakeRemote({
            run_config.signature_url: key.sign(b"other", padding.PKCS1v15(), hashes.SHA512()),
            run_config.public_key_url: pem,
        })
        config = run_config.model_copy(update={
            "verify_signature": True,
            "installer_path": installer,
        })
        runner = FakeRunner()
        server = FakeArchiveServer(versions)
        events = []
        with pytest.raises(IntegrityCheckFailed):
            _install(config, host, versions, fetch=fetch, runner=runner,
                     server=server, events=events)
        assert runner.calls == []
        assert server.requested == []
        assert events == [("signature", "failed", "")]
        assert not run_config.work_dir.exists()

    def test_running_installer_checked_by_default(self, run_config, host, versions,
                                                  tmp_path, monkeypatch):
        installer = tmp_path / "imei.sh"
        installer.write_bytes(b"#!/bin/bash\n")
        monkeypatch.setattr(sys, "argv", [str(installer)])
        config = RunConfig(**run_config.model_dump(
            exclude={"installer_path", "verify_signature"},
        ))
        fetch = FakeRemote({})
        server = FakeArchiveServer(versions)
        with pytest.raises(IntegrityCheckFailed):
            _install(config, host, versions, fetch=fetch, server=server)
        assert [url for url, _ in fetch.requests] == [config.signature_url]
        assert server.requested == []

    def test_missing_installer_file(self, run_config, host, versions, tmp_path):
        config = run_config.model_copy(update={
            "verify_signature": True,
            "installer_path": tmp_path / "typo.sh",
        })
        server = FakeArchiveServer(versions)
        with pytest.raises(IntegrityCheckFailed, match="not found"):
            _install(config, host, versions, server=server)
        assert server.requested == []


class TestCollectStatus:
    """Tests for collect_status()."""

    def test_merges_installed(self, run_config, versions):
        state = HostState({"aom": "3.5.0"})
        specs = collect_status(
            run_config,
            fetch_text=_manifest(run_config, versions),
            probe=state.probe,
        )
        assert specs["aom"].installed_version == "3.5.0"
        assert specs["aom"].target_version == "3.6.0"
        assert specs["imagemagick"].installed_version is None
