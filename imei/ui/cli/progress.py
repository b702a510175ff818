"""
Console output for install runs — banner, per-stage markers, summary.

``ProgressPrinter`` is passed as the ``on_progress`` callback of
``run_install``; everything else is plain rendering of result models.
"""

from __future__ import annotations

from pathlib import Path

import click

from imei import __version__
from imei.core.models.build import VersionSpec
from imei.core.models.run_config import RunConfig
from imei.core.services.install.data.components import COMPONENTS_BY_NAME
from imei.core.services.install.domain.display import format_duration
from imei.core.services.install.domain.version_compare import is_up_to_date
from imei.core.services.install.orchestration.installer import (
    InstallPlan,
    InstallReport,
)

_STEP_LABELS = {
    "signature": "Signature",
    "dependencies": "Dependencies",
    "verification": "Verification",
}

_LABEL_WIDTH = 16


def step_label(name: str) -> str:
    component = COMPONENTS_BY_NAME.get(name)
    if component is not None:
        return component.label
    return _STEP_LABELS.get(name, name)


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _signature_state(plan: InstallPlan, config: RunConfig) -> str:
    if not config.verify_signature:
        return "disabled"
    return "yes" if plan.signature_verified else "skipped (no installer file)"


class ProgressPrinter:
    """Prints one line per step: ``<label>  ✓ OK`` and friends."""

    def __init__(self) -> None:
        self._open: str | None = None
        self.failed: list[str] = []

    def _prefix(self, name: str) -> None:
        click.echo(f"  {step_label(name):<{_LABEL_WIDTH}}", nl=False)
        self._open = name

    def __call__(self, name: str, status: str, detail: str = "") -> None:
        if status == "started":
            self._prefix(name)
            return

        if status == "warning":
            if self._open:
                click.echo()
            click.secho(f"  ⚠ {step_label(name)}: {detail}", fg="yellow")
            self._prefix(name)
            return

        if self._open != name:
            self._prefix(name)
        self._open = None

        if status == "ok":
            click.secho("✓ OK", fg="green")
        elif status == "skipped":
            suffix = f" ({detail})" if detail else ""
            click.secho(f"⊘ SKIPPED{suffix}", fg="yellow")
        elif status == "failed":
            self.failed.append(name)
            click.secho("✗ FAILURE", fg="red", bold=True)
        else:
            click.echo(status)


# ── Banner ──────────────────────────────────────────────────────


def print_banner(plan: InstallPlan, config: RunConfig) -> None:
    """Host, directories, flags and the resolved versions."""
    host = plan.host
    click.echo()
    click.secho(f"ImageMagick Easy Install v{__version__}", fg="cyan", bold=True)
    click.echo()
    click.echo(f"   Detected OS:   {host.pretty_name or host.distro_id or 'unknown'}")
    click.echo(f"   Detected Arch: {host.arch or 'unknown'}")
    click.echo(f"   CPU cores:     {host.cpu_count}")
    click.echo(f"   cmake:         {host.cmake_version or 'not installed'}")
    click.echo()
    click.echo(f"   Work Dir:      {config.work_dir}")
    click.echo(f"   Build Dir:     {config.build_dir}")
    click.echo(f"   Log File:      {config.log_file}")
    click.echo()
    click.echo(f"   Force build:   {_yes_no(config.force)}")
    click.echo(f"   Skip deps:     {_yes_no(config.skip_dependencies)}")
    click.echo(f"   CI Build:      {_yes_no(config.ci)}")
    click.echo(f"   Signature:     {_signature_state(plan, config)}")
    if config.skip:
        click.echo(f"   Skipping:      {', '.join(sorted(config.skip))}")
    click.echo()
    for name, spec in plan.specs.items():
        click.echo(f"   {step_label(name):<{_LABEL_WIDTH - 2}} {spec.target_version}")
    if plan.newer_installer:
        click.echo()
        click.secho(
            f"   A newer installer is available: {plan.newer_installer} "
            f"(running {__version__})",
            fg="yellow",
        )
    click.echo()


# ── Summary ─────────────────────────────────────────────────────


def print_summary(report: InstallReport) -> None:
    """Elapsed time and the installed ImageMagick version."""
    click.echo()
    target = report.plan.specs["imagemagick"].target_version
    if report.verified:
        click.secho(f"✓ ImageMagick {target} is installed", fg="green", bold=True)
    else:
        click.secho(
            f"✗ Could not confirm ImageMagick {target} is installed",
            fg="red", bold=True,
        )
    built = report.built
    click.echo(f"   Built: {', '.join(built) if built else 'nothing (all up to date)'}")
    click.echo(f"   Process finished in {format_duration(report.elapsed_s)}")
    click.echo()


def print_failure(message: str, log_file: Path | None = None) -> None:
    """Red error line plus a pointer to the log file."""
    click.secho(f"✗ {message}", fg="red", err=True)
    if log_file is not None:
        click.echo(f"   Check the log file for details: {log_file}", err=True)


# ── Status ──────────────────────────────────────────────────────


def print_status(specs: dict[str, VersionSpec]) -> None:
    """One row per component: installed → target, and what a run would do."""
    click.secho("Components", fg="cyan", bold=True)
    for name, spec in specs.items():
        installed = spec.installed_version
        label = f"   {step_label(name):<{_LABEL_WIDTH - 2}}"
        if installed is None:
            click.echo(f"{label} not installed → {spec.target_version}  ", nl=False)
            click.secho("missing", fg="red")
        elif is_up_to_date(installed, spec.target_version):
            click.echo(f"{label} {installed}  ", nl=False)
            click.secho("✓ up to date", fg="green")
        else:
            click.echo(f"{label} {installed} → {spec.target_version}  ", nl=False)
            click.secho("update available", fg="yellow")
