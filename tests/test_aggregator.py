"""Tests for the concurrent property fan-out."""

import asyncio

import pytest

from soil_analyzer.soil.aggregator import fold_outcomes, gather_property_grid
from soil_analyzer.soil.models import FetchOutcome, PropertyMeasurement

DEPTHS = ["0-5", "5-15", "15-30"]


def _gather(provider, properties, depths=DEPTHS, **kwargs):
    return asyncio.run(
        gather_property_grid(
            provider, "token", -26.2, 28.0, properties, depths, **kwargs
        )
    )


class TestFoldOutcomes:
    def test_keeps_successes_in_requested_depth_order(self):
        measurement = PropertyMeasurement(value=1.0, scaled_value=1.0)
        outcomes = [
            FetchOutcome.ok("clay", "15-30", measurement),
            FetchOutcome.failed("clay", "5-15", "HTTP 500: Server Error"),
            FetchOutcome.ok("clay", "0-5", measurement),
        ]

        grid = fold_outcomes(outcomes, DEPTHS)

        assert list(grid) == ["clay"]
        assert list(grid["clay"]) == ["0-5", "15-30"]

    def test_all_failures_give_empty_grid(self):
        outcomes = [FetchOutcome.failed("clay", "0-5", "No valid data returned")]
        assert fold_outcomes(outcomes, DEPTHS) == {}


class TestGatherPropertyGrid:
    def test_one_call_per_pair(self, scripted_provider):
        provider = scripted_provider(
            {
                "clay": {"0-5": 30, "5-15": 31, "15-30": 33},
                "sand": {"0-5": 40},
            }
        )

        result = _gather(provider, ["clay", "sand"], max_concurrency=2)

        assert sorted(provider.calls) == sorted(
            (prop, depth) for prop in ["clay", "sand"] for depth in DEPTHS
        )
        assert len(result.outcomes) == 6
        assert result.populated_cells == 4
        assert len(result.failed) == 2
        assert set(result.grid["sand"]) == {"0-5"}

    def test_outcomes_follow_request_order(self, scripted_provider):
        provider = scripted_provider({"clay": {"0-5": 30}}, delay_s=0.01)

        result = _gather(provider, ["clay", "sand"])

        assert [(o.property_name, o.depth) for o in result.outcomes] == [
            (prop, depth) for prop in ["clay", "sand"] for depth in DEPTHS
        ]

    def test_conversion_factor_from_metadata(self, scripted_provider):
        provider = scripted_provider({"bdod": {"0-5": 130}})

        result = _gather(
            provider, ["bdod"], depths=["0-5"], metadata={"bdod": {"conversion_factor": 0.01}}
        )

        assert result.grid["bdod"]["0-5"].scaled_value == pytest.approx(1.3)

    def test_raising_provider_is_recorded_as_failure(self, scripted_provider):
        provider = scripted_provider(
            {"clay": {"0-5": 30, "5-15": 31, "15-30": 33}},
            errors={("clay", "5-15")},
        )

        result = _gather(provider, ["clay"])

        failed = result.failed
        assert len(failed) == 1
        assert failed[0].depth == "5-15"
        assert "boom" in failed[0].error
        assert set(result.grid["clay"]) == {"0-5", "15-30"}

    def test_concurrency_cap(self, scripted_provider):
        values = {f"p{i}": {depth: 1.0 for depth in DEPTHS} for i in range(4)}
        provider = scripted_provider(values, delay_s=0.02)

        result = _gather(provider, list(values), max_concurrency=3)

        assert result.populated_cells == 12
        assert provider.max_in_flight <= 3

    def test_unbounded_runs_calls_together(self, scripted_provider):
        values = {f"p{i}": {depth: 1.0 for depth in DEPTHS} for i in range(2)}
        provider = scripted_provider(values, delay_s=0.05)

        _gather(provider, list(values), max_concurrency=None)

        assert provider.max_in_flight > 1

    def test_no_pairs(self, scripted_provider):
        provider = scripted_provider({})

        result = _gather(provider, [])

        assert result.grid == {}
        assert result.outcomes == []
        assert provider.calls == []
