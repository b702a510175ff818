"""
L5 Orchestration — One component's build-or-skip unit of work.

State machine::

    pending ──▶ skipped
       │
       └────▶ building ──▶ succeeded
                    └────▶ failed

Building is a single fail-fast sequence:
fetch → verify hash → extract → recipe (configure/compile/install) → ldconfig.
A hash mismatch is reported as a warning and the build continues.
"""

from __future__ import annotations

import logging
import tarfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from imei.core.errors import FetchError, HashMismatch, MalformedVersion
from imei.core.models.build import (
    BuildDecision,
    StageOutcome,
    StageResult,
    VersionSpec,
)
from imei.core.models.command import CommandResult
from imei.core.models.component import Component
from imei.core.models.host import HostInfo
from imei.core.models.run_config import RunConfig
from imei.core.services.install.detection.installed_state import (
    is_installed,
    probe_installed_version,
)
from imei.core.services.install.domain.decision import DecisionInputs, decide_build
from imei.core.services.install.domain.version_compare import parse_version
from imei.core.services.install.execution.build_helpers import recipe_steps, run_recipe
from imei.core.services.install.execution.download import (
    download_file,
    extract_archive,
    verify_checksum,
)
from imei.core.services.install.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, str], None]


@dataclass
class StageContext:
    """Per-run collaborators shared by every stage.

    The I/O callables default to the real implementations; tests
    replace them to drive the pipeline without touching the host.
    """

    config: RunConfig
    host: HostInfo
    work_dir: Path
    run: Callable[..., CommandResult] = run_command
    download: Callable[..., Path] = download_file
    probe: Callable[[Component, Path], str | None] = probe_installed_version
    installed: Callable[[str, Path], bool] = is_installed
    on_progress: ProgressCallback | None = None
    # Every component entered, in order
    visited: list[str] = field(default_factory=list)

    def emit(self, component: str, status: str, detail: str = "") -> None:
        if self.on_progress:
            self.on_progress(component, status, detail)


class BuildStage:
    """Decides and, if needed, builds one component."""

    def __init__(self, component: Component, spec: VersionSpec) -> None:
        self.component = component
        self.spec = spec
        self.state = "pending"

    @property
    def name(self) -> str:
        return self.component.name

    # ── Decision ────────────────────────────────────────────────

    def _probe_installed(self, ctx: StageContext) -> str | None:
        installed = ctx.probe(self.component, ctx.config.lib_dir)
        if installed is None:
            return None
        try:
            parse_version(installed)
        except MalformedVersion:
            logger.warning(
                "%s: unreadable installed version %r — treating as not installed",
                self.name, installed,
            )
            return None
        return installed

    def decide(
        self,
        ctx: StageContext,
        upstream: Sequence[StageResult] = (),
    ) -> BuildDecision:
        """Probe host state and decide skip-vs-build."""
        self.spec = self.spec.with_installed(self._probe_installed(ctx))

        lib_dir = ctx.config.lib_dir
        dependency_satisfied = all(
            ctx.installed(dep, lib_dir) for dep in self.component.hard_dependencies
        )
        upstream_changed = any(
            r.succeeded for r in upstream
            if r.component in self.component.rebuild_triggers
        )

        decision = decide_build(DecisionInputs(
            target_version=self.spec.target_version,
            installed_version=self.spec.installed_version,
            force=ctx.config.force,
            skip=ctx.config.is_skipped(self.name),
            dependency_satisfied=dependency_satisfied,
            upstream_changed=upstream_changed,
            toolchain_version=ctx.host.cmake_version,
            min_toolchain_version=self.component.min_cmake_version,
        ))
        logger.info(
            "%s: installed=%s target=%s upstream_changed=%s → %s",
            self.name, self.spec.installed_version, self.spec.target_version,
            upstream_changed, decision.describe(),
        )
        return decision

    # ── Execution ───────────────────────────────────────────────

    def run(
        self,
        ctx: StageContext,
        upstream: Sequence[StageResult] = (),
    ) -> StageResult:
        """Take the stage to a terminal state and report the outcome."""
        ctx.visited.append(self.name)
        ctx.emit(self.name, "started")

        decision = self.decide(ctx, upstream)
        if not decision.should_build:
            self.state = "skipped"
            reason = decision.reason.value if decision.reason else ""
            ctx.emit(self.name, "skipped", reason)
            return StageResult(
                component=self.name,
                decision=decision,
                outcome=StageOutcome.SKIPPED,
                detail=reason,
            )

        self.state = "building"
        warnings: list[str] = []
        error = self._build(ctx, warnings)

        if error:
            self.state = "failed"
            logger.error("%s: %s", self.name, error)
            ctx.emit(self.name, "failed", error)
            return StageResult(
                component=self.name,
                decision=decision,
                outcome=StageOutcome.FAILED,
                detail=error,
                warnings=tuple(warnings),
            )

        self.state = "succeeded"
        ctx.emit(self.name, "ok")
        return StageResult(
            component=self.name,
            decision=decision,
            outcome=StageOutcome.SUCCEEDED,
            warnings=tuple(warnings),
        )

    def _build(self, ctx: StageContext, warnings: list[str]) -> str | None:
        """Run the build sequence.  Returns an error detail, or None."""
        version = self.spec.target_version
        url = self.component.archive_url(version)
        archive = ctx.work_dir / self.component.archive_name(version)

        try:
            ctx.download(url, archive, headers=ctx.config.http_headers())
        except FetchError as exc:
            return str(exc)

        if self.spec.expected_hash:
            try:
                verify_checksum(archive, self.spec.expected_hash)
            except HashMismatch as exc:
                # Reported, not fatal
                logger.warning("%s: %s", self.name, exc)
                warnings.append(str(exc))
                ctx.emit(self.name, "warning", str(exc))
            except (OSError, ValueError) as exc:
                return f"Cannot checksum {archive}: {exc}"

        try:
            top_level = extract_archive(archive, ctx.work_dir)
        except (tarfile.TarError, OSError) as exc:
            return f"Cannot extract {archive.name}: {exc}"

        source_dir = self._locate_sources(ctx.work_dir, version, top_level)
        if source_dir is None:
            return (
                f"Expected source directory {self.component.source_dir(version)} "
                f"not found after extracting {archive.name}"
            )

        steps = recipe_steps(
            self.name,
            source_dir=source_dir,
            work_dir=ctx.work_dir,
            prefix=ctx.config.build_dir,
            host=ctx.host,
        )
        result = run_recipe(
            steps,
            env_overrides=ctx.host.make_env(),
            log_file=ctx.config.log_file,
            run=ctx.run,
        )
        if not result.ok:
            return result.describe_failure()
        return None

    def _locate_sources(
        self,
        work_dir: Path,
        version: str,
        top_level: list[str],
    ) -> Path | None:
        expected = work_dir / self.component.source_dir(version)
        if expected.is_dir():
            return expected
        # Hosting sites occasionally rename the top-level directory
        if len(top_level) == 1 and (work_dir / top_level[0]).is_dir():
            return work_dir / top_level[0]
        return None
