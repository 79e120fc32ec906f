"""Portfolio scenario simulation engine.

Components, leaves first:
- stream: Mulberry32 uniform stream + Box-Muller normal sampler
- seed: FNV-1a seed derivation and per-path substream seeds
- params: cycle/scenario catalogs and the drift/volatility resolver
- gbm: single-path geometric multiplicative step with drawdown tracking
- aggregate: nearest-rank percentile extraction
"""

from dataclasses import dataclass
from enum import Enum


class CycleKey(str, Enum):
    COUNTRY = "country"
    TECHNOLOGY = "technology"
    LONG_ECON = "longEcon"
    SHORT_ECON = "shortEcon"
    MARKET = "market"
    COMPANY = "company"
    NEUTRAL = "neutral"


class ScenarioKey(str, Enum):
    CRISIS_2008 = "crisis2008"
    COVID_2020 = "covid2020"
    BASELINE = "baseline"


class SimulationInputError(ValueError):
    """Caller-contract violation on a simulation request field."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


DEFAULT_PATH_COUNT = 10000
DEFAULT_PERIOD_COUNT = 12


@dataclass(frozen=True)
class SimulationRequest:
    """Inputs to one simulate() call."""

    subject_key: str
    beta: float
    environment_score: float
    cycle_key: CycleKey | str
    scenario_key: ScenarioKey | str
    path_count: int = DEFAULT_PATH_COUNT
    period_count: int = DEFAULT_PERIOD_COUNT


@dataclass(frozen=True)
class PathOutcome:
    final_return: float   # cumulative multiplicative return - 1
    worst_drawdown: float  # most negative peak-to-trough decline, in [-1, 0]


@dataclass(frozen=True)
class SimulationResult:
    median: float
    upside95: float
    downside5: float
    tail_drawdown95: float  # negated 95th percentile of |worst_drawdown|

    def as_dict(self) -> dict[str, float]:
        return {
            "median": self.median,
            "upside95": self.upside95,
            "downside5": self.downside5,
            "tail_drawdown95": self.tail_drawdown95,
        }


__all__ = [
    "CycleKey",
    "ScenarioKey",
    "SimulationInputError",
    "SimulationRequest",
    "PathOutcome",
    "SimulationResult",
    "DEFAULT_PATH_COUNT",
    "DEFAULT_PERIOD_COUNT",
]
