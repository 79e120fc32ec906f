"""Geometric multiplicative price step with running drawdown tracking."""

import math

import numpy as np

from . import PathOutcome
from .seed import path_offset
from .stream import RandomStream, standard_normal


def simulate_path(
    mu_period: float,
    sigma_period: float,
    period_count: int,
    stream: RandomStream,
) -> PathOutcome:
    """Advance one unit price through `period_count` log-normal steps.

    Each step multiplies the price by exp(mu - sigma^2/2 + sigma * z). The
    worst relative decline from the running peak is recorded along the way.
    A zero-length horizon returns a flat outcome without touching the stream.
    """
    if period_count == 0:
        return PathOutcome(final_return=0.0, worst_drawdown=0.0)

    drift = mu_period - 0.5 * sigma_period * sigma_period
    price = 1.0
    peak = 1.0
    worst_dd = 0.0
    for _ in range(period_count):
        z = standard_normal(stream)
        price *= math.exp(drift + sigma_period * z)
        if price > peak:
            peak = price
        dd = (price - peak) / peak
        if dd < worst_dd:
            worst_dd = dd

    return PathOutcome(final_return=price - 1.0, worst_drawdown=max(-1.0, worst_dd))


def simulate_paths(
    mu_period: float,
    sigma_period: float,
    period_count: int,
    seed: int,
    start: int,
    stop: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Simulate paths [start, stop) and return (final_returns, worst_drawdowns).

    Path i draws from the base stream jumped ahead to its own window, so any
    split of the index range yields the same per-path outcomes.
    """
    n = stop - start
    finals = np.empty(n, dtype=np.float64)
    drawdowns = np.empty(n, dtype=np.float64)
    for j, path_index in enumerate(range(start, stop)):
        stream = RandomStream.jumped(seed, path_offset(path_index, period_count))
        outcome = simulate_path(mu_period, sigma_period, period_count, stream)
        finals[j] = outcome.final_return
        drawdowns[j] = outcome.worst_drawdown
    return finals, drawdowns
