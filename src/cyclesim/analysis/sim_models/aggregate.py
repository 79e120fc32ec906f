"""Nearest-rank percentile aggregation of per-path outcomes."""

import math

import numpy as np

from . import SimulationResult


def nearest_rank(sorted_values: np.ndarray, q: float) -> float:
    """Value at index floor(q * (n - 1)) of an ascending array, no interpolation."""
    n = len(sorted_values)
    if n == 0:
        raise ValueError("cannot take a percentile of an empty sample")
    idx = min(n - 1, max(0, math.floor(q * (n - 1))))
    return float(sorted_values[idx])


def aggregate_outcomes(finals: np.ndarray, drawdowns: np.ndarray) -> SimulationResult:
    """Summarise final returns and worst drawdowns across all paths.

    Input order does not matter; both samples are sorted before ranking.
    The tail drawdown is the 95th percentile of drawdown magnitudes,
    reported as a negative fraction.
    """
    finals_sorted = np.sort(np.asarray(finals, dtype=np.float64))
    magnitudes_sorted = np.sort(np.abs(np.asarray(drawdowns, dtype=np.float64)))

    tail = nearest_rank(magnitudes_sorted, 0.95)
    return SimulationResult(
        median=nearest_rank(finals_sorted, 0.50),
        upside95=nearest_rank(finals_sorted, 0.95),
        downside5=nearest_rank(finals_sorted, 0.05),
        tail_drawdown95=-tail if tail > 0 else 0.0,
    )
