"""Portfolio scenario simulation orchestrator.

Validates a SimulationRequest, resolves drift/volatility once, runs every
path against its own deterministic substream (optionally across worker
processes) and reduces the outcomes to nearest-rank percentiles.
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Mapping

import numpy as np

from cyclesim.analysis.sim_models import (
    CycleKey,
    ScenarioKey,
    SimulationInputError,
    SimulationRequest,
    SimulationResult,
)
from cyclesim.analysis.sim_models.aggregate import aggregate_outcomes
from cyclesim.analysis.sim_models.gbm import simulate_paths
from cyclesim.analysis.sim_models.params import (
    EnvironmentParameters,
    ScenarioParameters,
    resolve_parameters,
)
from cyclesim.analysis.sim_models.seed import derive_seed

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2500


def _validate_count(field: str, value: int, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise SimulationInputError(field, f"must be an integer, got {value!r}")
    if value < minimum:
        raise SimulationInputError(field, f"must be >= {minimum}, got {value}")
    return int(value)


def _chunk_bounds(path_count: int, chunk_size: int) -> list[tuple[int, int]]:
    return [
        (start, min(start + chunk_size, path_count))
        for start in range(0, path_count, chunk_size)
    ]


def simulate(
    request: SimulationRequest,
    max_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    scenario_table: Mapping[ScenarioKey, ScenarioParameters] | None = None,
    environment_table: Mapping[CycleKey, EnvironmentParameters] | None = None,
) -> SimulationResult:
    """Run the Monte Carlo simulation for one request.

    Args:
        request: Portfolio sensitivity, alignment score, cycle/scenario
            selection and path/period counts.
        max_workers: Worker processes for path generation; 1 runs inline.
            The result does not depend on this value.
        chunk_size: Paths per worker task.
        scenario_table: Replacement scenario catalog (defaults to the built-in one).
        environment_table: Replacement cycle catalog (defaults to the built-in one).

    Returns:
        SimulationResult with median/upside95/downside5 final returns and the
        95th-percentile tail drawdown.

    Raises:
        SimulationInputError: if any request field violates its contract.
            Raised before any path is simulated.
    """
    if not isinstance(request.subject_key, str):
        raise SimulationInputError(
            "subject_key", f"must be a string, got {request.subject_key!r}"
        )
    path_count = _validate_count("path_count", request.path_count, 1)
    period_count = _validate_count("period_count", request.period_count, 0)
    max_workers = _validate_count("max_workers", max_workers, 1)
    chunk_size = _validate_count("chunk_size", chunk_size, 1)

    params = resolve_parameters(
        request.beta,
        request.environment_score,
        request.cycle_key,
        request.scenario_key,
        scenario_table=scenario_table,
        environment_table=environment_table,
    )

    seed = derive_seed(
        request.subject_key,
        params.cycle.value,
        params.scenario.value,
        params.environment_score,
    )

    logger.debug(
        "Simulating %s: %d paths x %d periods, seed=%d, workers=%d",
        request.subject_key, path_count, period_count, seed, max_workers,
    )

    chunks = _chunk_bounds(path_count, chunk_size)
    if max_workers == 1 or len(chunks) == 1:
        finals, drawdowns = simulate_paths(
            params.mu_period, params.sigma_period, period_count, seed, 0, path_count,
        )
    else:
        workers = min(max_workers, len(chunks))
        logger.debug("Fanning %d chunks out to %d workers", len(chunks), workers)
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    simulate_paths,
                    params.mu_period, params.sigma_period, period_count, seed, start, stop,
                )
                for start, stop in chunks
            ]
            parts = [future.result() for future in futures]
        finals = np.concatenate([p[0] for p in parts])
        drawdowns = np.concatenate([p[1] for p in parts])

    result = aggregate_outcomes(finals, drawdowns)
    logger.debug(
        "Result %s: median=%.4f p95=%.4f p05=%.4f mdd95=%.4f",
        request.subject_key, result.median, result.upside95,
        result.downside5, result.tail_drawdown95,
    )
    return result
