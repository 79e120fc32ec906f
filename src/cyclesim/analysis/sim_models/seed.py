"""Stable seed derivation for simulation requests.

Python's built-in hash() is salted per process, so seeds are folded with
32-bit FNV-1a instead. Characters are hashed as UTF-16 code units to keep
seeds identical to those issued by the dashboard front end.
"""

import math

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MASK32 = 0xFFFFFFFF


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of `text`."""
    h = FNV_OFFSET_BASIS
    for unit in _utf16_units(text):
        h ^= unit
        h = (h * FNV_PRIME) & MASK32
    return h


def _utf16_units(text: str):
    for ch in text:
        cp = ord(ch)
        if cp > 0xFFFF:
            cp -= 0x10000
            yield 0xD800 + (cp >> 10)
            yield 0xDC00 + (cp & 0x3FF)
        else:
            yield cp


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def seed_text(subject_key: str, cycle_key: str, scenario_key: str, environment_score: float) -> str:
    return f"{subject_key}|{cycle_key}|{scenario_key}|{round_half_up(environment_score)}"


def derive_seed(
    subject_key: str,
    cycle_key: str,
    scenario_key: str,
    environment_score: float,
) -> int:
    """Map (subject, cycle, scenario, rounded score) to a 32-bit seed."""
    return fnv1a_32(seed_text(subject_key, cycle_key, scenario_key, environment_score))


def draws_per_path(period_count: int) -> int:
    """Uniform draws one path consumes (two per Box-Muller normal)."""
    return 2 * period_count


def path_offset(path_index: int, period_count: int) -> int:
    """Stream offset at which path `path_index` starts drawing."""
    return path_index * draws_per_path(period_count)
