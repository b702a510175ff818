"""
ImageMagick Easy Install — CLI entrypoint.

Usage:
    imei --help
    sudo imei install --force
    imei status
    imei verify
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from imei.core.errors import ImeiError
from imei.core.observability.logging_config import resolve_level, setup_logging

from imei import __version__


@click.group()
@click.version_option(version=__version__, prog_name="imei")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to imei.yml (default: $IMEI_CONFIG, if set).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ImageMagick Easy Install — build ImageMagick 7 with AVIF, HEIC and JPEG XL."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug=debug, verbose=verbose))


def _load_config(ctx: click.Context, cli_values: dict[str, Any] | None = None):
    """Merge CLI values with env and config file; exit 1 on ConfigError."""
    from imei.core.config.loader import load_run_config
    from imei.ui.cli.progress import print_failure

    try:
        return load_run_config(cli_values, ctx.obj.get("config_path"))
    except ImeiError as e:
        print_failure(str(e))
        sys.exit(1)


# ── Install ─────────────────────────────────────────────────────


@cli.command()
@click.option("--force", is_flag=True, help="Rebuild every component, even if up to date.")
@click.option("--imagemagick-version", "--im-version", "im_version", default=None,
              help="Build this ImageMagick version instead of the latest.")
@click.option("--aom-version", default=None, help="Build this aom version.")
@click.option("--libheif-version", "--heif-version", "heif_version", default=None,
              help="Build this libheif version.")
@click.option("--jpeg-xl-version", "--jxl-version", "jxl_version", default=None,
              help="Build this jpeg-xl version.")
@click.option("--skip-aom", is_flag=True, help="Do not build aom.")
@click.option("--skip-libheif", "--skip-heif", "skip_heif", is_flag=True,
              help="Do not build libheif.")
@click.option("--skip-jpeg-xl", "--skip-jxl", "skip_jxl", is_flag=True,
              help="Do not build jpeg-xl.")
@click.option("--skip-imagemagick", "--skip-im", "skip_im", is_flag=True,
              help="Do not build ImageMagick.")
@click.option("--skip-dependencies", "--skip-deps", "skip_deps", is_flag=True,
              help="Do not install system build dependencies.")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None,
              help="Run log (default: /var/log/imei.log).")
@click.option("--work-dir", type=click.Path(file_okay=False), default=None,
              help="Scratch directory for sources (default: /usr/local/src/imei).")
@click.option("--build-dir", type=click.Path(file_okay=False), default=None,
              help="ImageMagick install prefix (default: /usr/local).")
@click.option("--ci", is_flag=True,
              help="CI mode: no update notice, no package index refresh on unknown distros.")
@click.option("--no-sig-verify", "--dev", "no_sig_verify", is_flag=True,
              help="Skip the installer signature check.")
@click.option("--installer", "installer_path", type=click.Path(dir_okay=False), default=None,
              help="Installer file whose signature is checked (default: this program).")
@click.pass_context
def install(
    ctx: click.Context,
    force: bool,
    im_version: str | None,
    aom_version: str | None,
    heif_version: str | None,
    jxl_version: str | None,
    skip_aom: bool,
    skip_heif: bool,
    skip_jxl: bool,
    skip_im: bool,
    skip_deps: bool,
    log_file: str | None,
    work_dir: str | None,
    build_dir: str | None,
    ci: bool,
    no_sig_verify: bool,
    installer_path: str | None,
) -> None:
    """Build and install aom, libheif, jpeg-xl and ImageMagick."""
    from imei.core.services.install.orchestration.installer import run_install
    from imei.ui.cli.progress import (
        ProgressPrinter,
        print_banner,
        print_failure,
        print_summary,
    )

    skip = [
        name for name, flag in (
            ("aom", skip_aom),
            ("libheif", skip_heif),
            ("jpeg-xl", skip_jxl),
            ("imagemagick", skip_im),
        ) if flag
    ]
    # Unset flags are None so env vars and the config file can fill them
    config = _load_config(ctx, {
        "force": force or None,
        "skip": skip,
        "skip_dependencies": skip_deps or None,
        "ci": ci or None,
        "verify_signature": False if no_sig_verify else None,
        "version_overrides": {
            "imagemagick": im_version,
            "aom": aom_version,
            "libheif": heif_version,
            "jpeg-xl": jxl_version,
        },
        "log_file": log_file,
        "work_dir": work_dir,
        "build_dir": build_dir,
        "installer_path": installer_path,
    })

    printer = ProgressPrinter()
    try:
        report = run_install(
            config,
            on_progress=printer,
            on_prepared=lambda plan: print_banner(plan, config),
        )
    except ImeiError as e:
        click.echo()
        print_failure(str(e), config.log_file)
        sys.exit(1)

    print_summary(report)


# ── Status / verify ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show installed and latest version of each component."""
    from imei.core.services.install.orchestration.installer import collect_status
    from imei.ui.cli.progress import print_failure, print_status

    config = _load_config(ctx)
    try:
        specs = collect_status(config)
    except ImeiError as e:
        print_failure(str(e))
        sys.exit(1)

    print_status(specs)


@cli.command()
@click.option("--imagemagick-version", "--im-version", "im_version", default=None,
              help="Version to expect (default: latest).")
@click.option("--build-dir", type=click.Path(file_okay=False), default=None,
              help="ImageMagick install prefix (default: /usr/local).")
@click.pass_context
def verify(ctx: click.Context, im_version: str | None, build_dir: str | None) -> None:
    """Check that the installed magick binary reports the expected version."""
    from imei.core.services.install.data.components import IMAGEMAGICK
    from imei.core.services.install.orchestration.verification import (
        magick_binary,
        verify_installation,
    )
    from imei.core.services.install.resolver.version_oracle import resolve_version
    from imei.ui.cli.progress import print_failure

    config = _load_config(ctx, {
        "version_overrides": {"imagemagick": im_version},
        "build_dir": build_dir,
    })
    try:
        spec = resolve_version(IMAGEMAGICK, config)
    except ImeiError as e:
        print_failure(str(e))
        sys.exit(1)

    binary = magick_binary(config.build_dir)
    if verify_installation(config.build_dir, spec.target_version):
        click.secho(f"✓ {binary} reports ImageMagick {spec.target_version}", fg="green")
        return

    print_failure(f"{binary} does not report ImageMagick {spec.target_version}")
    sys.exit(1)


if __name__ == "__main__":
    cli()
