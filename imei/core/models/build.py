"""
Build models — the per-run contract between stages.

VersionSpec says what we want, BuildDecision says what we will do
about it, StageResult says what happened.  All three are created
fresh on every run and never persisted: the only durable state is
what ends up installed on the host.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator


class SkipReason(str, Enum):
    """Why a stage was not built."""

    USER_FORCED_SKIP = "user-forced-skip"
    ALREADY_UP_TO_DATE = "already-up-to-date"
    MISSING_HARD_DEPENDENCY = "missing-hard-dependency"
    INSUFFICIENT_TOOLCHAIN_VERSION = "insufficient-toolchain-version"


class StageOutcome(str, Enum):
    """Terminal state of a stage."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class VersionSpec(BaseModel):
    """Target and installed version of one component."""

    model_config = ConfigDict(frozen=True)

    component: str
    target_version: str
    expected_hash: str | None = None
    installed_version: str | None = None

    @field_validator("target_version")
    @classmethod
    def _target_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("target_version must not be empty")
        return value

    @field_validator("expected_hash", "installed_version")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def with_installed(self, installed_version: str | None) -> VersionSpec:
        """Copy of this spec with a freshly probed installed version."""
        return self.model_copy(update={"installed_version": installed_version})


class BuildDecision(BaseModel):
    """Skip-or-build verdict for a stage."""

    model_config = ConfigDict(frozen=True)

    action: Literal["build", "skip"]
    reason: SkipReason | None = None

    @classmethod
    def build(cls) -> BuildDecision:
        return cls(action="build")

    @classmethod
    def skip(cls, reason: SkipReason) -> BuildDecision:
        return cls(action="skip", reason=reason)

    @property
    def should_build(self) -> bool:
        return self.action == "build"

    def describe(self) -> str:
        """Short label for progress output."""
        if self.should_build:
            return "build"
        return f"skip ({self.reason.value})" if self.reason else "skip"


class StageResult(BaseModel):
    """Outcome of one stage, threaded into the following stages."""

    model_config = ConfigDict(frozen=True)

    component: str
    decision: BuildDecision
    outcome: StageOutcome
    detail: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.outcome == StageOutcome.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.outcome == StageOutcome.FAILED

    @property
    def skipped(self) -> bool:
        return self.outcome == StageOutcome.SKIPPED
