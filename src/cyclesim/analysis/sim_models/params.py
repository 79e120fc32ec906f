"""Cycle/scenario catalogs and the drift/volatility parameter resolver."""

import logging
import math
import numbers
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from . import CycleKey, ScenarioKey, SimulationInputError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PERIODS_PER_YEAR = 12  # one period == one month
BASE_MEAN_FLOOR = -0.10
BASE_MEAN_SPAN = 0.30
BASE_ANNUAL_VOL = 0.18
MIN_BETA = 0.3
SCORE_MIN = 0.0
SCORE_MAX = 100.0


@dataclass(frozen=True)
class ScenarioParameters:
    label: str
    mean_shift: float
    vol_multiplier: float


@dataclass(frozen=True)
class EnvironmentParameters:
    title: str
    subtitle: str
    mean_multiplier: float
    vol_multiplier: float
    timeline: tuple[tuple[str, str], ...] = ()


SCENARIO_PARAMS: Mapping[ScenarioKey, ScenarioParameters] = MappingProxyType({
    ScenarioKey.CRISIS_2008: ScenarioParameters("2008 Financial Crisis", -0.05, 1.6),
    ScenarioKey.COVID_2020: ScenarioParameters("2020 COVID Crash", 0.0, 1.8),
    ScenarioKey.BASELINE: ScenarioParameters("Baseline", 0.0, 1.0),
})

ENVIRONMENT_PARAMS: Mapping[CycleKey, EnvironmentParameters] = MappingProxyType({
    CycleKey.COUNTRY: EnvironmentParameters(
        "Country Cycle", "Strauss-Howe / Late-Crisis", 0.9, 1.2,
        (
            ("High", "Institutions strong, social trust high."),
            ("Awakening", "Values shift, authority questioned."),
            ("Unraveling", "Institutions weaken, individualism rises."),
            ("Crisis", "Institutional rebuild; decisive action."),
        ),
    ),
    CycleKey.TECHNOLOGY: EnvironmentParameters(
        "Technology Cycle", "AI Cycle: Frenzy to Synergy", 1.05, 1.2,
        (
            ("Discovery", "Breakthroughs and early prototypes."),
            ("Installation", "Capital floods in; platforms form."),
            ("Frenzy", "Hype and bubbles; rapid adoption."),
            ("Synergy", "Real productivity; standards consolidate."),
        ),
    ),
    CycleKey.LONG_ECON: EnvironmentParameters(
        "Economic Cycle", "Kondratiev Wave", 0.95, 1.0,
        (
            ("Spring", "Disinflation, innovation seeds."),
            ("Summer", "Growth broadens; capex returns."),
            ("Autumn", "Financialization; leverage builds."),
            ("Winter", "Deleveraging and reset."),
        ),
    ),
    CycleKey.SHORT_ECON: EnvironmentParameters(
        "Business Cycle", "Expansion to Downturn", 0.95, 1.1,
        (
            ("Early", "Earnings inflect; credit easy."),
            ("Mid", "Growth above trend; breadth strong."),
            ("Late", "Inflationary pressures; margins peak."),
            ("Downturn", "Contraction and policy response."),
        ),
    ),
    CycleKey.MARKET: EnvironmentParameters(
        "S&P 500 Cycle", "Bull/Bear Phase", 1.0, 1.3,
        (
            ("Early Bull", "Recovery, multiple expansion."),
            ("Mid Bull", "Earnings drive returns."),
            ("Late Bull", "Narrow leadership; euphoria risk."),
            ("Bear", "De-risking and base-building."),
        ),
    ),
    CycleKey.COMPANY: EnvironmentParameters(
        "Company Cycle", "Lifecycle / Maturity", 1.0, 0.9,
        (
            ("Startup", "Product/market fit hunt."),
            ("Growth", "Scale-up; reinvestment heavy."),
            ("Maturity", "Cash returns; efficiency focus."),
            ("Renew/Decline", "Reinvent or fade."),
        ),
    ),
    CycleKey.NEUTRAL: EnvironmentParameters("Neutral", "No cycle tilt", 1.0, 1.0),
})


@dataclass(frozen=True)
class ResolvedParameters:
    mu_annual: float
    sigma_annual: float
    mu_period: float
    sigma_period: float
    cycle: CycleKey
    scenario: ScenarioKey
    environment_score: float  # clamped


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def coerce_cycle_key(value: CycleKey | str) -> CycleKey:
    try:
        return CycleKey(value)
    except ValueError:
        raise SimulationInputError("cycle_key", f"unknown cycle {value!r}") from None


def coerce_scenario_key(value: ScenarioKey | str) -> ScenarioKey:
    try:
        return ScenarioKey(value)
    except ValueError:
        raise SimulationInputError("scenario_key", f"unknown scenario {value!r}") from None


def validate_beta(beta: float) -> float:
    if isinstance(beta, bool) or not isinstance(beta, numbers.Real):
        raise SimulationInputError("beta", f"must be a number, got {beta!r}")
    if not math.isfinite(beta):
        raise SimulationInputError("beta", f"must be finite, got {beta!r}")
    if beta < 0:
        raise SimulationInputError("beta", f"must be non-negative, got {beta!r}")
    return float(beta)


def clamp_environment_score(score: float) -> float:
    """Clamp a finite score into [0, 100]; NaN/inf are rejected."""
    if isinstance(score, bool) or not isinstance(score, numbers.Real):
        raise SimulationInputError("environment_score", f"must be a number, got {score!r}")
    if not math.isfinite(score):
        raise SimulationInputError("environment_score", f"must be finite, got {score!r}")
    return float(min(SCORE_MAX, max(SCORE_MIN, score)))


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


def resolve_parameters(
    beta: float,
    environment_score: float,
    cycle_key: CycleKey | str,
    scenario_key: ScenarioKey | str,
    scenario_table: Mapping[ScenarioKey, ScenarioParameters] | None = None,
    environment_table: Mapping[CycleKey, EnvironmentParameters] | None = None,
) -> ResolvedParameters:
    """Turn beta + alignment score + cycle/scenario into per-period drift/vol.

    baseMean maps the 0-100 score linearly onto [-10%, +20%] annual drift;
    baseVol scales an 18% annual vol by beta (floored at 0.3). Scenario and
    cycle multipliers are then applied and the annual figures are converted
    to monthly log-return parameters.

    Raises:
        SimulationInputError: on NaN/inf/negative beta, NaN/inf score, an
            unknown cycle or scenario key, or an annual drift <= -100%.
    """
    beta = validate_beta(beta)
    score = clamp_environment_score(environment_score)
    cycle = coerce_cycle_key(cycle_key)
    scenario = coerce_scenario_key(scenario_key)

    scenarios = SCENARIO_PARAMS if scenario_table is None else scenario_table
    environments = ENVIRONMENT_PARAMS if environment_table is None else environment_table
    if scenario not in scenarios:
        raise SimulationInputError("scenario_key", f"no parameters for {scenario.value!r}")
    if cycle not in environments:
        raise SimulationInputError("cycle_key", f"no parameters for {cycle.value!r}")
    sp = scenarios[scenario]
    ep = environments[cycle]

    base_mean = BASE_MEAN_FLOOR + (score / 100) * BASE_MEAN_SPAN
    base_vol = BASE_ANNUAL_VOL * max(MIN_BETA, beta)

    mu_annual = (base_mean + sp.mean_shift) * ep.mean_multiplier
    sigma_annual = base_vol * sp.vol_multiplier * ep.vol_multiplier

    if mu_annual <= -1.0:
        raise SimulationInputError(
            "scenario_key",
            f"annual drift {mu_annual:.4f} is at or below -100%",
        )
    if sigma_annual < 0 or not math.isfinite(sigma_annual):
        raise SimulationInputError("scenario_key", f"invalid annual volatility {sigma_annual!r}")

    mu_period = math.log(1 + mu_annual) / PERIODS_PER_YEAR
    sigma_period = sigma_annual / math.sqrt(PERIODS_PER_YEAR)

    logger.debug(
        "Resolved %s/%s: mu=%.6f sigma=%.6f (monthly mu=%.6f sigma=%.6f)",
        cycle.value, scenario.value, mu_annual, sigma_annual, mu_period, sigma_period,
    )
    return ResolvedParameters(
        mu_annual=mu_annual,
        sigma_annual=sigma_annual,
        mu_period=mu_period,
        sigma_period=sigma_period,
        cycle=cycle,
        scenario=scenario,
        environment_score=score,
    )
