"""
L5 Orchestration — The complete install run.

    preconditions → fresh run log → integrity gate → resolve versions → probe host
        → (banner) → system prerequisites → pipeline → verification

Everything after the preconditions happens inside the scoped work
directory with termination signals turned into ``SystemExit``, so the
work directory is removed on every exit path.

Fatal conditions propagate as ``ImeiError`` subclasses; the CLI turns
them into a red message and exit status 1.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from imei import __version__
from imei.core.errors import IntegrityCheckFailed, StageFailed
from imei.core.models.build import StageResult, VersionSpec
from imei.core.models.command import CommandResult
from imei.core.models.host import HostInfo
from imei.core.models.run_config import RunConfig
from imei.core.observability.logging_config import run_log
from imei.core.services.install.data.components import COMPONENTS_BY_NAME
from imei.core.services.install.detection.host import (
    check_preconditions,
    detect_cmake_version,
    detect_host,
)
from imei.core.services.install.detection.installed_state import (
    is_installed,
    probe_installed_version,
)
from imei.core.services.install.execution.download import (
    download_file,
    http_get,
    http_get_text,
)
from imei.core.services.install.execution.script_verify import verify_installer
from imei.core.services.install.execution.subprocess_runner import run_command
from imei.core.services.install.execution.system_deps import ensure_system_prerequisites
from imei.core.services.install.execution.workspace import exit_on_signals, workspace
from imei.core.services.install.orchestration.pipeline import Pipeline
from imei.core.services.install.orchestration.stage import (
    ProgressCallback,
    StageContext,
)
from imei.core.services.install.orchestration.verification import verify_installation
from imei.core.services.install.resolver.installer_update import (
    latest_installer_version,
    newer_installer_available,
)
from imei.core.services.install.resolver.version_oracle import resolve_all

logger = logging.getLogger(__name__)


class InstallPlan(BaseModel):
    """What the run is about to do — handed to the banner before building."""

    model_config = ConfigDict(frozen=True)

    host: HostInfo
    specs: dict[str, VersionSpec]
    signature_verified: bool = False
    newer_installer: str | None = None


class InstallReport(BaseModel):
    """Outcome of a completed run."""

    model_config = ConfigDict(frozen=True)

    plan: InstallPlan
    results: list[StageResult]
    verified: bool
    elapsed_s: float

    @property
    def built(self) -> list[str]:
        return [r.component for r in self.results if r.succeeded]


def _emit(on_progress: ProgressCallback | None, name: str, status: str, detail: str = "") -> None:
    if on_progress:
        on_progress(name, status, detail)


def install_prerequisites(
    config: RunConfig,
    host: HostInfo,
    *,
    on_progress: ProgressCallback | None = None,
    run: Callable[..., CommandResult] = run_command,
) -> None:
    """Install system build dependencies unless the user opted out.

    Raises:
        StageFailed: If any apt step fails.
    """
    if config.skip_dependencies:
        _emit(on_progress, "dependencies", "skipped", "user-forced-skip")
        return

    _emit(on_progress, "dependencies", "started")
    result = ensure_system_prerequisites(
        host, ci=config.ci, log_file=config.log_file, run=run,
    )
    if not result.ok:
        detail = result.describe_failure()
        _emit(on_progress, "dependencies", "failed", detail)
        raise StageFailed("dependencies", detail)
    _emit(on_progress, "dependencies", "ok")


def run_install(
    config: RunConfig,
    *,
    on_progress: ProgressCallback | None = None,
    on_prepared: Callable[[InstallPlan], None] | None = None,
    preconditions: Callable[[], None] = check_preconditions,
    host_detector: Callable[[], HostInfo] = detect_host,
    cmake_detector: Callable[[], str | None] = detect_cmake_version,
    fetch: Callable[..., bytes] = http_get,
    fetch_text: Callable[..., str] = http_get_text,
    download: Callable[..., Path] = download_file,
    run: Callable[..., CommandResult] = run_command,
    probe: Callable = probe_installed_version,
    installed: Callable[[str, Path], bool] = is_installed,
) -> InstallReport:
    """Run the whole installation.

    The keyword collaborators default to the real probes and I/O; the
    tests swap them out.

    Raises:
        PreconditionFailed: Host cannot run the installer.
        IntegrityCheckFailed: Installer signature did not verify.
        VersionUnresolved: A component has no target version.
        StageFailed: Prerequisites or a build stage failed.
    """
    started = time.monotonic()
    preconditions()

    with (
        run_log(config.log_file),
        exit_on_signals(),
        workspace(config.work_dir) as work_dir,
    ):
        # Gate: nothing gets built from an installer that fails its signature
        try:
            signature_verified = verify_installer(config, fetch=fetch)
        except IntegrityCheckFailed:
            _emit(on_progress, "signature", "failed")
            raise
        if signature_verified:
            _emit(on_progress, "signature", "ok")

        specs = resolve_all(config, fetch_text=fetch_text)
        host = host_detector()

        # CI runs are unattended: no update notice
        latest = None if config.ci else latest_installer_version(config, fetch_text=fetch_text)
        plan = InstallPlan(
            host=host,
            specs=specs,
            signature_verified=signature_verified,
            newer_installer=latest if newer_installer_available(__version__, latest) else None,
        )
        if on_prepared:
            on_prepared(plan)

        install_prerequisites(config, host, on_progress=on_progress, run=run)

        # Prerequisites may have installed or upgraded cmake
        host = host.model_copy(update={"cmake_version": cmake_detector()})

        ctx = StageContext(
            config=config,
            host=host,
            work_dir=work_dir,
            run=run,
            download=download,
            probe=probe,
            installed=installed,
            on_progress=on_progress,
        )
        results = Pipeline(specs).run(ctx)

        verified = verify_installation(
            config.build_dir,
            specs["imagemagick"].target_version,
            log_file=config.log_file,
            run=run,
        )
        _emit(on_progress, "verification", "ok" if verified else "failed")

    elapsed = time.monotonic() - started
    logger.info("Install finished in %.1fs (verified=%s)", elapsed, verified)
    return InstallReport(
        plan=plan,
        results=results,
        verified=verified,
        elapsed_s=elapsed,
    )


def collect_status(
    config: RunConfig,
    *,
    fetch_text: Callable[..., str] = http_get_text,
    probe: Callable = probe_installed_version,
) -> dict[str, VersionSpec]:
    """Resolved target plus installed version of every component.

    Read-only: no root needed, nothing is built.
    """
    specs = resolve_all(config, fetch_text=fetch_text)
    return {
        name: spec.with_installed(probe(COMPONENTS_BY_NAME[name], config.lib_dir))
        for name, spec in specs.items()
    }
