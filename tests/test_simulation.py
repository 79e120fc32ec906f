"""Integration tests for the simulate() orchestrator."""

import math
from dataclasses import replace

import numpy as np
import pytest

from cyclesim.analysis.simulation import simulate
from cyclesim.analysis.sim_models import (
    CycleKey,
    ScenarioKey,
    SimulationInputError,
    SimulationRequest,
)
from cyclesim.analysis.sim_models.params import ScenarioParameters

FLAT_SCENARIOS = {ScenarioKey.BASELINE: ScenarioParameters("Flat", 0.0, 0.0)}


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class TestDeterminism:
    def test_repeated_calls_identical(self, small_request):
        assert simulate(small_request) == simulate(small_request)

    def test_different_subjects_differ(self, small_request):
        other = replace(small_request, subject_key="PROPOSED")
        assert simulate(small_request) != simulate(other)

    def test_string_and_enum_keys_agree(self, small_request):
        as_strings = replace(small_request, cycle_key="market", scenario_key="crisis2008")
        assert simulate(as_strings) == simulate(small_request)

    def test_overshooting_score_matches_clamped_score(self, small_request):
        over = replace(small_request, environment_score=112.0)
        top = replace(small_request, environment_score=100.0)
        assert simulate(over) == simulate(top)


class TestPinnedOutput:
    """Fixed values shared with the dashboard front end for the same inputs."""

    def test_market_crisis_2008(self):
        result = simulate(SimulationRequest("CURRENT", 1.4, 62, "market", "crisis2008"))
        assert result.downside5 == -0.6148961671832986
        assert result.tail_drawdown95 == -0.6640093280838475
        assert result.median == pytest.approx(-0.0930034328379148, rel=1e-12)


class TestParallelism:
    def test_workers_do_not_change_result(self, small_request):
        request = replace(small_request, path_count=600)
        sequential = simulate(request, max_workers=1, chunk_size=100)
        parallel = simulate(request, max_workers=3, chunk_size=100)
        assert sequential == parallel

    def test_chunk_size_does_not_change_result(self, small_request):
        a = simulate(small_request, chunk_size=7)
        b = simulate(small_request, chunk_size=10000)
        assert a == b


class TestInvariants:
    @pytest.mark.parametrize("cycle", list(CycleKey))
    @pytest.mark.parametrize("scenario", list(ScenarioKey))
    def test_ordering_and_drawdown_bounds(self, cycle, scenario):
        request = SimulationRequest(
            subject_key="GRID",
            beta=1.7,
            environment_score=35,
            cycle_key=cycle,
            scenario_key=scenario,
            path_count=300,
        )
        result = simulate(request)
        assert result.downside5 <= result.median <= result.upside95
        assert -1.0 <= result.tail_drawdown95 <= 0.0

    def test_zero_horizon(self, small_request):
        result = simulate(replace(small_request, period_count=0))
        assert result.median == result.upside95 == result.downside5 == 0.0
        assert result.tail_drawdown95 == 0.0

    def test_single_path(self, small_request):
        result = simulate(replace(small_request, path_count=1))
        assert result.median == result.upside95 == result.downside5

    def test_zero_volatility_negative_drift_collapses(self):
        request = SimulationRequest(
            subject_key="FLAT",
            beta=1.0,
            environment_score=0,
            cycle_key=CycleKey.NEUTRAL,
            scenario_key=ScenarioKey.BASELINE,
            path_count=200,
        )
        result = simulate(request, scenario_table=FLAT_SCENARIOS)
        mu_period = math.log(0.9) / 12
        expected = math.exp(mu_period * 12) - 1
        for value in (result.median, result.upside95, result.downside5, result.tail_drawdown95):
            assert value == pytest.approx(expected, rel=1e-9)

    def test_zero_volatility_positive_drift(self):
        request = SimulationRequest(
            subject_key="FLAT",
            beta=1.0,
            environment_score=100,
            cycle_key=CycleKey.NEUTRAL,
            scenario_key=ScenarioKey.BASELINE,
            path_count=200,
        )
        result = simulate(request, scenario_table=FLAT_SCENARIOS)
        assert result.downside5 == result.median == result.upside95
        assert result.median == pytest.approx(0.2, rel=1e-9)
        assert result.tail_drawdown95 == 0.0


class TestReferenceScenario:
    """beta=1, score=50, neutral cycle, 2008 crisis: mu=0, sigma=28.8%."""

    @pytest.fixture
    def request_2008(self):
        return SimulationRequest(
            subject_key="CURRENT",
            beta=1.0,
            environment_score=50,
            cycle_key=CycleKey.NEUTRAL,
            scenario_key=ScenarioKey.CRISIS_2008,
        )

    def test_defaults(self, request_2008):
        assert request_2008.path_count == 10000
        assert request_2008.period_count == 12

    def test_median_near_zero(self, request_2008):
        result = simulate(request_2008)
        # zero arithmetic drift puts the lognormal median at exp(-sigma^2/2) - 1
        assert result.median == pytest.approx(math.exp(-0.5 * 0.288**2) - 1, abs=0.02)
        assert abs(result.median) < 0.1
        assert result.upside95 > result.downside5
        assert result.downside5 < 0 < result.upside95
        assert -1.0 < result.tail_drawdown95 < 0.0

    def test_rerun_identical(self, request_2008):
        first = simulate(request_2008)
        second = simulate(replace(request_2008))
        assert first.as_dict() == second.as_dict()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidation:
    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"beta": -0.5}, "beta"),
            ({"beta": math.nan}, "beta"),
            ({"beta": math.inf}, "beta"),
            ({"environment_score": math.nan}, "environment_score"),
            ({"path_count": 0}, "path_count"),
            ({"path_count": -10}, "path_count"),
            ({"path_count": 10.5}, "path_count"),
            ({"period_count": -1}, "period_count"),
            ({"cycle_key": "winter"}, "cycle_key"),
            ({"scenario_key": "dotcom2000"}, "scenario_key"),
            ({"subject_key": None}, "subject_key"),
        ],
    )
    def test_rejected_fields(self, small_request, changes, field):
        with pytest.raises(SimulationInputError) as exc:
            simulate(replace(small_request, **changes))
        assert exc.value.field == field

    def test_numpy_scalars_accepted(self):
        request = SimulationRequest(
            "P", np.float32(1.2), np.int64(60), "market", "baseline", path_count=np.int64(50),
        )
        plain = SimulationRequest("P", float(np.float32(1.2)), 60.0, "market", "baseline", path_count=50)
        assert simulate(request) == simulate(plain)

    def test_bad_worker_count(self, small_request):
        with pytest.raises(SimulationInputError) as exc:
            simulate(small_request, max_workers=0)
        assert exc.value.field == "max_workers"
