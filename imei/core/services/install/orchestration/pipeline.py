"""
L5 Orchestration — The fixed, strictly sequential build pipeline.

    aom → libheif → jpeg-xl → imagemagick

No two stages ever run at once: later stages probe the libraries
earlier stages just installed.  Each stage receives the results of
all earlier stages so that a rebuilt dependency forces a rebuild
downstream.  The first failed stage halts the run.
"""

from __future__ import annotations

import logging

from imei.core.errors import StageFailed, VersionUnresolved
from imei.core.models.build import StageResult, VersionSpec
from imei.core.models.component import Component
from imei.core.services.install.data.components import COMPONENTS
from imei.core.services.install.orchestration.stage import BuildStage, StageContext

logger = logging.getLogger(__name__)


class PipelineFailed(StageFailed):
    """A stage failed; carries the results collected up to and including it."""

    def __init__(self, result: StageResult, results: list[StageResult]) -> None:
        super().__init__(result.component, result.detail)
        self.result = result
        self.results = results


class Pipeline:
    """Runs the four build stages in order with fail-fast semantics."""

    def __init__(
        self,
        specs: dict[str, VersionSpec],
        components: tuple[Component, ...] = COMPONENTS,
    ) -> None:
        # Every stage needs a target version before anything runs
        for component in components:
            if component.name not in specs:
                raise VersionUnresolved(component.name, "no version resolved")
        self.stages = [BuildStage(c, specs[c.name]) for c in components]

    def run(self, ctx: StageContext) -> list[StageResult]:
        """Run every stage.

        Returns:
            One ``StageResult`` per stage, in build order.

        Raises:
            PipelineFailed: On the first stage that fails.  No later
                stage is entered.
        """
        results: list[StageResult] = []
        for stage in self.stages:
            result = stage.run(ctx, tuple(results))
            results.append(result)
            if result.failed:
                logger.error("Pipeline halted at %s", stage.name)
                raise PipelineFailed(result, results)
        return results
