"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from imei.core.models import Component, RunConfig, StageResult
"""

from imei.core.models.build import (
    BuildDecision,
    SkipReason,
    StageOutcome,
    StageResult,
    VersionSpec,
)
from imei.core.models.command import CommandResult
from imei.core.models.component import Component
from imei.core.models.host import HostInfo
from imei.core.models.run_config import RunConfig

__all__ = [
    # build.py
    "BuildDecision",
    # command.py
    "CommandResult",
    # component.py
    "Component",
    # host.py
    "HostInfo",
    # run_config.py
    "RunConfig",
    "SkipReason",
    "StageOutcome",
    "StageResult",
    "VersionSpec",
]
