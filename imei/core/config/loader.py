"""
Configuration loader — merges every config source into a RunConfig.

Sources, highest precedence first:

    1. CLI options                (``cli_values``; None = not given)
    2. ``IMEI_*`` environment variables
    3. YAML config file           (``--config`` or ``IMEI_CONFIG``)
    4. RunConfig defaults

Version overrides merge per component under the same precedence.
Skip sets are additive: a component skipped by any source is skipped.

Example ``imei.yml``::

    force: false
    skip: [jpeg-xl]
    versions:
      imagemagick: 7.1.1-15
    build_dir: /opt/imagemagick
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from imei.core.errors import ConfigError
from imei.core.models.run_config import RunConfig
from imei.core.services.install.data.components import COMPONENT_NAMES

logger = logging.getLogger(__name__)

CONFIG_ENV = "IMEI_CONFIG"

# RunConfig fields a config file may set directly
_FILE_KEYS = {
    "force", "skip_dependencies", "ci", "verify_signature",
    "log_file", "work_dir", "build_dir", "lib_dir",
    "manifest_base_url", "signature_url", "public_key_url", "installer_url",
    "installer_path", "github_token",
}

# env var → RunConfig field
_ENV_KEYS = {
    "IMEI_FORCE": "force",
    "IMEI_SKIP_DEPENDENCIES": "skip_dependencies",
    "IMEI_CI": "ci",
    "IMEI_VERIFY_SIGNATURE": "verify_signature",
    "IMEI_LOG_FILE": "log_file",
    "IMEI_WORK_DIR": "work_dir",
    "IMEI_BUILD_DIR": "build_dir",
    "IMEI_LIB_DIR": "lib_dir",
    "IMEI_MANIFEST_URL": "manifest_base_url",
    "IMEI_INSTALLER_PATH": "installer_path",
    "GITHUB_TOKEN": "github_token",
}

_BOOL_FIELDS = {"force", "skip_dependencies", "ci", "verify_signature"}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_version_key(component: str) -> str:
    """``jpeg-xl`` → ``IMEI_JPEG_XL_VERSION``."""
    return f"IMEI_{component.upper().replace('-', '_')}_VERSION"


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


def _parse_skip(source: str, value: Any) -> set[str]:
    if isinstance(value, str):
        items = [v.strip() for v in value.split(",") if v.strip()]
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = [str(v).strip() for v in value]
    else:
        raise ConfigError(f"{source}: 'skip' must be a list of component names")
    unknown = sorted(set(items) - set(COMPONENT_NAMES))
    if unknown:
        raise ConfigError(
            f"{source}: unknown component(s) {', '.join(unknown)} "
            f"(expected one of {', '.join(COMPONENT_NAMES)})"
        )
    return set(items)


def _parse_versions(source: str, value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError(f"{source}: 'versions' must be a mapping")
    unknown = sorted(set(value) - set(COMPONENT_NAMES))
    if unknown:
        raise ConfigError(f"{source}: unknown component(s) {', '.join(unknown)}")
    return {name: str(v).strip() for name, v in value.items() if v is not None}


# ── Sources ─────────────────────────────────────────────────────


def read_config_file(path: Path) -> dict[str, Any]:
    """Read and shape-check a YAML config file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    unknown = sorted(set(data) - _FILE_KEYS - {"skip", "versions"})
    if unknown:
        raise ConfigError(f"Unknown key(s) in {path}: {', '.join(unknown)}")
    return data


def _from_file(data: dict[str, Any], source: str) -> tuple[dict, set[str], dict[str, str]]:
    values = {k: v for k, v in data.items() if k in _FILE_KEYS and v is not None}
    skip = _parse_skip(source, data["skip"]) if data.get("skip") else set()
    versions = _parse_versions(source, data["versions"]) if data.get("versions") else {}
    return values, skip, versions


def _from_env(env: Mapping[str, str]) -> tuple[dict, set[str], dict[str, str]]:
    values: dict[str, Any] = {}
    for name, field in _ENV_KEYS.items():
        if name not in env:
            continue
        raw = env[name]
        if field in _BOOL_FIELDS:
            values[field] = _parse_bool(name, raw)
        elif raw.strip():
            values[field] = raw.strip()

    skip = _parse_skip("IMEI_SKIP", env["IMEI_SKIP"]) if env.get("IMEI_SKIP") else set()
    versions = {
        name: env[_env_version_key(name)].strip()
        for name in COMPONENT_NAMES
        if env.get(_env_version_key(name), "").strip()
    }
    return values, skip, versions


# ── Public entry point ──────────────────────────────────────────


def load_run_config(
    cli_values: Mapping[str, Any] | None = None,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> RunConfig:
    """Build the frozen RunConfig for this run.

    Args:
        cli_values: Options given on the command line.  ``None`` values
            mean "not given".  ``skip`` is an iterable of component
            names and ``version_overrides`` a name → version mapping.
        config_path: Explicit YAML file; falls back to ``$IMEI_CONFIG``.
        env: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: If any source is invalid.
    """
    env = os.environ if env is None else env
    cli_values = dict(cli_values or {})

    if config_path is None and env.get(CONFIG_ENV):
        config_path = Path(env[CONFIG_ENV])

    file_values: dict[str, Any] = {}
    file_skip: set[str] = set()
    file_versions: dict[str, str] = {}
    if config_path is not None:
        file_values, file_skip, file_versions = _from_file(
            read_config_file(config_path), str(config_path),
        )

    env_values, env_skip, env_versions = _from_env(env)

    cli_skip = _parse_skip("command line", list(cli_values.pop("skip", None) or []))
    cli_versions = {
        k: v for k, v in (cli_values.pop("version_overrides", None) or {}).items() if v
    }
    cli_plain = {k: v for k, v in cli_values.items() if v is not None}

    merged: dict[str, Any] = {**file_values, **env_values, **cli_plain}
    merged["skip"] = frozenset(file_skip | env_skip | cli_skip)
    merged["version_overrides"] = {**file_versions, **env_versions, **cli_versions}

    try:
        config = RunConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug(
        "Run config: force=%s skip=%s overrides=%s build_dir=%s",
        config.force, sorted(config.skip), config.version_overrides, config.build_dir,
    )
    return config
