"""
L1 Domain — Skip-or-build decision (pure).

The decision for a stage depends only on its inputs: no probes,
no config lookups, no globals.  Rules, first match wins:

    1. user skip flag (unless forced)        → Skip(user-forced-skip)
    2. cmake missing / below the minimum      → Skip(insufficient-toolchain-version)
    3. hard dependency not installed          → Skip(missing-hard-dependency)
    4. force                                  → Build
    5. an upstream trigger was rebuilt        → Build
    6. installed >= target                    → Skip(already-up-to-date)
    7. otherwise                              → Build

The toolchain and dependency gates win over ``force``: a build
that cannot link or configure is pointless, and the run would only
fail later.
"""

from __future__ import annotations

from dataclasses import dataclass

from imei.core.models.build import BuildDecision, SkipReason
from imei.core.services.install.domain.version_compare import (
    is_up_to_date,
    meets_minimum,
)


@dataclass(frozen=True)
class DecisionInputs:
    """Everything a stage decision is allowed to look at."""

    target_version: str
    installed_version: str | None = None
    force: bool = False
    skip: bool = False
    dependency_satisfied: bool = True
    upstream_changed: bool = False
    toolchain_version: str | None = None
    min_toolchain_version: str | None = None


def decide_build(inputs: DecisionInputs) -> BuildDecision:
    """Decide whether a stage builds or skips.

    Raises:
        MalformedVersion: If the installed or target version cannot
            be parsed when a version comparison is needed.
    """
    if inputs.skip and not inputs.force:
        return BuildDecision.skip(SkipReason.USER_FORCED_SKIP)

    if inputs.min_toolchain_version and not meets_minimum(
        inputs.toolchain_version, inputs.min_toolchain_version,
    ):
        return BuildDecision.skip(SkipReason.INSUFFICIENT_TOOLCHAIN_VERSION)

    if not inputs.dependency_satisfied:
        return BuildDecision.skip(SkipReason.MISSING_HARD_DEPENDENCY)

    if inputs.force or inputs.upstream_changed:
        return BuildDecision.build()

    if is_up_to_date(inputs.installed_version, inputs.target_version):
        return BuildDecision.skip(SkipReason.ALREADY_UP_TO_DATE)

    return BuildDecision.build()
