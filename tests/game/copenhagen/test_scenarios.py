"""Tests for the rule scenario list and runner."""

from hnefatafl_ai.game.copenhagen.scenarios import (
    Scenario,
    ScenarioReport,
    regression_scenarios,
    run_scenarios,
)


def _boom() -> bool:
    raise RuntimeError("boom")


class TestRegressionScenarios:
    def test_all_pass(self) -> None:
        report = run_scenarios()
        assert report.failures == []
        assert report.ok
        assert report.count == len(regression_scenarios())

    def test_names_are_unique(self) -> None:
        names = [s.name for s in regression_scenarios()]
        assert len(names) == len(set(names))


class TestRunner:
    def test_reports_failing_names(self) -> None:
        report = run_scenarios([
            Scenario("passes", lambda: True),
            Scenario("fails", lambda: False),
        ])
        assert not report.ok
        assert report.failures == ["fails"]
        assert report.count == 2

    def test_exception_becomes_failure(self) -> None:
        report = run_scenarios([Scenario("raises", _boom)])
        assert report.failures == ["raises: boom"]

    def test_empty(self) -> None:
        assert run_scenarios([]) == ScenarioReport(ok=True, failures=[], count=0)

    def test_to_dict(self) -> None:
        report = run_scenarios([Scenario("fails", lambda: False)])
        assert report.to_dict() == {"ok": False, "failures": ["fails"], "count": 1}
