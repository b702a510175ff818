"""
L2 Resolver — Target versions and expected hashes.

For each component, in order:

    1. an explicit user override (CLI flag, env var, config file)
    2. the remote manifest: ``<base>/<name>.version`` + ``<base>/<name>.hash``

The hash is optional; the version is not.  A component without a
resolvable version raises ``VersionUnresolved`` and the run stops
before any build starts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from imei.core.errors import FetchError, MalformedVersion, VersionUnresolved
from imei.core.models.build import VersionSpec
from imei.core.models.component import Component
from imei.core.models.run_config import RunConfig
from imei.core.services.install.data.components import COMPONENTS
from imei.core.services.install.domain.version_compare import parse_version
from imei.core.services.install.execution.download import http_get_text

logger = logging.getLogger(__name__)

TextFetcher = Callable[..., str]


def manifest_url(base: str, component: str, kind: str) -> str:
    """URL of a manifest resource (``kind`` is ``version`` or ``hash``)."""
    return f"{base.rstrip('/')}/{component}.{kind}"


def _validated(component: str, version: str, source: str) -> str:
    token = version.strip()
    if not token or len(token.split()) != 1:
        raise VersionUnresolved(component, f"unexpected {source} value {version[:40]!r}")
    try:
        parse_version(token)
    except MalformedVersion as exc:
        raise VersionUnresolved(component, str(exc)) from exc
    return token


def _fetch_hash(
    component: Component,
    config: RunConfig,
    fetch_text: TextFetcher,
) -> str | None:
    url = manifest_url(config.manifest_base_url, component.name, "hash")
    try:
        token = fetch_text(url, headers=config.http_headers())
    except FetchError as exc:
        logger.warning("No hash for %s: %s", component.name, exc)
        return None
    token = token.strip()
    if not token or len(token.split()) != 1:
        logger.warning("Ignoring malformed hash for %s: %r", component.name, token[:60])
        return None
    return token.lower()


def resolve_version(
    component: Component,
    config: RunConfig,
    *,
    fetch_text: TextFetcher = http_get_text,
) -> VersionSpec:
    """Resolve the target version (and hash) of one component.

    A pinned version comes without a hash: the manifest hash belongs
    to the manifest version.

    Raises:
        VersionUnresolved: If neither an override nor the manifest
            yields a usable version.
    """
    override = config.override_for(component.name)
    if override:
        version = _validated(component.name, override, "override")
        logger.info("%s: using pinned version %s", component.name, version)
        return VersionSpec(component=component.name, target_version=version)

    url = manifest_url(config.manifest_base_url, component.name, "version")
    try:
        raw = fetch_text(url, headers=config.http_headers())
    except FetchError as exc:
        raise VersionUnresolved(component.name, str(exc)) from exc

    version = _validated(component.name, raw, "manifest")
    expected_hash = _fetch_hash(component, config, fetch_text)
    logger.info(
        "%s: manifest version %s (hash %s)",
        component.name, version, expected_hash or "none",
    )
    return VersionSpec(
        component=component.name,
        target_version=version,
        expected_hash=expected_hash,
    )


def resolve_all(
    config: RunConfig,
    *,
    fetch_text: TextFetcher = http_get_text,
) -> dict[str, VersionSpec]:
    """Resolve every component, in build order.

    Raises:
        VersionUnresolved: On the first component that cannot be resolved.
    """
    return {
        c.name: resolve_version(c, config, fetch_text=fetch_text)
        for c in COMPONENTS
    }
