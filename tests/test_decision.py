"""
Tests for the pure skip-or-build decision.
"""

from imei.core.models.build import BuildDecision, SkipReason
from imei.core.services.install.domain.decision import DecisionInputs, decide_build


def _decide(**kwargs) -> BuildDecision:
    kwargs.setdefault("target_version", "3.6.0")
    return decide_build(DecisionInputs(**kwargs))


class TestDecideBuild:
    """Rules of decide_build(), in precedence order."""

    def test_not_installed_builds(self):
        assert _decide().should_build

    def test_up_to_date_skips(self):
        decision = _decide(installed_version="3.6.0")
        assert decision == BuildDecision.skip(SkipReason.ALREADY_UP_TO_DATE)

    def test_older_installed_builds(self):
        assert _decide(installed_version="3.5.0").should_build

    def test_newer_imagemagick_patch_builds(self):
        assert _decide(target_version="7.1.1-16", installed_version="7.1.1-15").should_build
        decision = _decide(target_version="7.1.1-15", installed_version="7.1.1-15")
        assert decision.reason == SkipReason.ALREADY_UP_TO_DATE

    def test_user_skip(self):
        decision = _decide(skip=True)
        assert decision.reason == SkipReason.USER_FORCED_SKIP

    def test_force_beats_skip(self):
        assert _decide(skip=True, force=True).should_build

    def test_force_ignores_version_ordering(self):
        assert _decide(installed_version="9.9.9", force=True).should_build

    def test_upstream_change_rebuilds_up_to_date(self):
        assert _decide(installed_version="3.6.0", upstream_changed=True).should_build

    def test_missing_dependency(self):
        decision = _decide(dependency_satisfied=False, force=True)
        assert decision.reason == SkipReason.MISSING_HARD_DEPENDENCY

    def test_toolchain_too_old(self):
        decision = _decide(toolchain_version="3.5", min_toolchain_version="3.6")
        assert decision.reason == SkipReason.INSUFFICIENT_TOOLCHAIN_VERSION

    def test_toolchain_missing(self):
        decision = _decide(toolchain_version=None, min_toolchain_version="3.10")
        assert decision.reason == SkipReason.INSUFFICIENT_TOOLCHAIN_VERSION

    def test_skip_reported_before_toolchain(self):
        decision = _decide(skip=True, toolchain_version=None, min_toolchain_version="3.6")
        assert decision.reason == SkipReason.USER_FORCED_SKIP

    def test_pure(self):
        inputs = DecisionInputs(target_version="7.1.1", installed_version="7.1.0")
        assert decide_build(inputs) == decide_build(inputs)

    def test_describe(self):
        assert BuildDecision.build().describe() == "build"
        assert _decide(skip=True).describe() == "skip (user-forced-skip)"
