"""Pytest configuration and shared fixtures."""

import pytest

from cyclesim.analysis.alignment import Holding
from cyclesim.analysis.sim_models import CycleKey, ScenarioKey, SimulationRequest


@pytest.fixture
def sample_holdings():
    """Two high-beta growth names, as in the dashboard demo portfolio."""
    return [
        Holding(
            ticker="TSLA",
            name="Tesla",
            shares=500,
            price=245.0,
            sector="Technology",
            bias="Risk-On",
            path="Unknown",
            optionality="High",
            true_beta=2.1,
        ),
        Holding(
            ticker="PLTR",
            name="Palantir",
            shares=3000,
            price=28.5,
            sector="Software",
            bias="Risk-On",
            path="Unknown",
            optionality="High",
            true_beta=1.85,
        ),
    ]


@pytest.fixture
def small_request():
    """A cheap request for property checks."""
    return SimulationRequest(
        subject_key="CURRENT",
        beta=1.4,
        environment_score=62,
        cycle_key=CycleKey.MARKET,
        scenario_key=ScenarioKey.CRISIS_2008,
        path_count=500,
        period_count=12,
    )
