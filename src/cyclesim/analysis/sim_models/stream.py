"""Deterministic uniform stream (Mulberry32) and Box-Muller normal sampler.

The generator is a single 32-bit word advanced by a fixed additive step and
scrambled on every draw. It is not cryptographically secure; identical seeds
must yield identical sequences on every platform, which is all that matters
for cacheable simulation results.
"""

import math

MASK32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
UINT32_RANGE = 4294967296.0  # 2**32
TWO_PI = 2.0 * math.pi


class RandomStream:
    """Reproducible sequence of uniform floats in [0, 1)."""

    __slots__ = ("_state",)

    def __init__(self, seed: int):
        self._state = seed & MASK32

    @classmethod
    def jumped(cls, seed: int, draws: int) -> "RandomStream":
        """Stream positioned as if `draws` values had already been taken from `seed`.

        The state after k draws is seed + k * increment (mod 2**32), so any
        offset is reachable in constant time.
        """
        return cls((seed + draws * MULBERRY_INCREMENT) & MASK32)

    @property
    def state(self) -> int:
        return self._state

    def next_float(self) -> float:
        self._state = (self._state + MULBERRY_INCREMENT) & MASK32
        t = self._state
        t = ((t ^ (t >> 15)) * (t | 1)) & MASK32
        t ^= (t + (((t ^ (t >> 7)) * (t | 61)) & MASK32)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / UINT32_RANGE

    def __iter__(self):
        return self

    def __next__(self) -> float:
        return self.next_float()


def standard_normal(stream: RandomStream) -> float:
    """Draw one N(0, 1) sample via Box-Muller.

    Exact zeros are discarded and redrawn so log(u) stays finite.
    """
    u = 0.0
    while u == 0.0:
        u = stream.next_float()
    v = 0.0
    while v == 0.0:
        v = stream.next_float()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(TWO_PI * v)
