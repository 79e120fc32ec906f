"""Portfolio cycle-alignment scoring.

Turns a holdings list into the two simulation inputs that depend on the
portfolio: a value-weighted beta and a 0-100 alignment score per macro cycle.
Pure computation; holdings are validated by pydantic on the way in.
"""

import logging
from typing import Iterable

from pydantic import BaseModel, Field

from cyclesim.analysis.sim_models import (
    DEFAULT_PATH_COUNT,
    DEFAULT_PERIOD_COUNT,
    CycleKey,
    ScenarioKey,
    SimulationRequest,
)
from cyclesim.analysis.sim_models.params import coerce_cycle_key, coerce_scenario_key
from cyclesim.analysis.sim_models.seed import round_half_up

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TECH_SECTORS = ("Technology", "Semis")
TECH_CYCLE_SECTORS = ("Technology", "Semis", "Software")
DEFENSIVE_SECTORS = ("Healthcare", "Utilities")
HEDGE_SECTOR = "Hedge"

# Maximum points per cycle, used to normalise weighted scores to 0-100
MAX_POINTS = {
    CycleKey.COUNTRY: 30,
    CycleKey.LONG_ECON: 25,
    CycleKey.SHORT_ECON: 28,
    CycleKey.TECHNOLOGY: 28,
    CycleKey.MARKET: 28,
    CycleKey.COMPANY: 25,
}

NEUTRAL_SCORE = 50
FALLBACK_BETA = 1.0


class Holding(BaseModel):
    ticker: str
    name: str = ""
    shares: float = Field(ge=0)
    price: float = Field(ge=0)
    sector: str = Field("", description="Clockwise sector label, e.g. Technology or Hedge")
    bias: str = Field("", description="Risk-On, Risk-Off or other")
    path: str = Field("", description="Known, Neutral or Unknown")
    optionality: str = ""
    true_beta: float = Field(1.0, ge=0)

    @property
    def market_value(self) -> float:
        return self.shares * self.price


def _country_points(h: Holding) -> float:
    if h.sector == HEDGE_SECTOR:
        return 30
    if h.bias == "Risk-Off":
        return 25
    if h.bias == "Risk-On":
        return 15
    return 0


def _long_econ_points(h: Holding) -> float:
    if h.sector in TECH_SECTORS:
        return 25
    if h.sector in DEFENSIVE_SECTORS:
        return 20
    return 15


def _short_econ_points(h: Holding) -> float:
    if h.true_beta > 1.3:
        return 25
    if 0.8 <= h.true_beta <= 1.3:
        return 28
    return 15


def _technology_points(h: Holding) -> float:
    return 28 if h.sector in TECH_CYCLE_SECTORS else 10


def _market_points(h: Holding) -> float:
    if h.path == "Known" and h.bias == "Risk-On":
        return 28
    if h.bias == "Risk-On":
        return 22
    return 18


def _company_points(h: Holding) -> float:
    return 25 if h.path == "Known" else 18


POINT_RULES = {
    CycleKey.COUNTRY: _country_points,
    CycleKey.LONG_ECON: _long_econ_points,
    CycleKey.SHORT_ECON: _short_econ_points,
    CycleKey.TECHNOLOGY: _technology_points,
    CycleKey.MARKET: _market_points,
    CycleKey.COMPANY: _company_points,
}


def portfolio_beta(holdings: Iterable[Holding]) -> float:
    """Market-value-weighted mean of holding betas (0.0 for an empty book)."""
    holdings = list(holdings)
    total = sum(h.market_value for h in holdings)
    if total <= 0:
        return 0.0
    return sum(h.true_beta * h.market_value / total for h in holdings)


def compute_cycle_alignment(holdings: Iterable[Holding]) -> dict[CycleKey, int]:
    """Score how well a portfolio fits each macro cycle (0-100).

    Each holding earns cycle-specific points by sector, bias, path and beta;
    points are value-weighted and normalised by the cycle's maximum.

    Returns:
        {CycleKey: int} covering every cycle. The neutral cycle always
        scores 50 for a non-empty book; an empty or zero-value book scores 0.
    """
    holdings = list(holdings)
    total = sum(h.market_value for h in holdings)
    if not holdings or total <= 0:
        return {cycle: 0 for cycle in CycleKey}

    raw = {cycle: 0.0 for cycle in POINT_RULES}
    for h in holdings:
        weight = h.market_value / total
        for cycle, rule in POINT_RULES.items():
            raw[cycle] += rule(h) * weight

    scores = {
        cycle: round_half_up(raw[cycle] * 100 / MAX_POINTS[cycle])
        for cycle in POINT_RULES
    }
    scores[CycleKey.NEUTRAL] = NEUTRAL_SCORE
    logger.debug("Cycle alignment for %d holdings: %s", len(holdings), scores)
    return scores


def build_request(
    subject_key: str,
    holdings: Iterable[Holding],
    cycle_key: CycleKey | str,
    scenario_key: ScenarioKey | str,
    path_count: int = DEFAULT_PATH_COUNT,
    period_count: int = DEFAULT_PERIOD_COUNT,
) -> SimulationRequest:
    """Assemble a SimulationRequest for a holdings list and a cycle/scenario pick."""
    holdings = list(holdings)
    cycle = coerce_cycle_key(cycle_key)
    scenario = coerce_scenario_key(scenario_key)
    beta = portfolio_beta(holdings) or FALLBACK_BETA
    score = compute_cycle_alignment(holdings)[cycle]
    return SimulationRequest(
        subject_key=subject_key,
        beta=beta,
        environment_score=score,
        cycle_key=cycle,
        scenario_key=scenario,
        path_count=path_count,
        period_count=period_count,
    )
