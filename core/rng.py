"""
core.rng
Deterministic RNG for meter runs. Does NOT rely on Python's built-in hash() or random module.

Goal:
- Same seed + same call count => same stream, bit for bit, on every platform.
- The whole stream is one 32-bit integer, so a run can persist it and resume exactly.
"""

from __future__ import annotations

import hashlib
import json
import time
from typing import Any

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_ZERO_SEED_STATE = 2147483647


def _imul(a: int, b: int) -> int:
    """32-bit multiply keeping the low 32 bits (unsigned)."""
    return (a * b) & _MASK32


def _coerce_seed(seed: int) -> int:
    state = abs(int(seed)) & _MASK32
    return state if state != 0 else _ZERO_SEED_STATE


class SeededRNG:
    """Mulberry32 stream.

    The state is kept as an unsigned 32-bit integer; every draw adds a fixed odd
    increment and mixes the result with two xor-shift/multiply rounds.
    """

    def __init__(self, seed: int) -> None:
        self._state = _coerce_seed(seed)

    @classmethod
    def from_state(cls, state: int) -> "SeededRNG":
        rng = cls(1)
        rng.set_state(state)
        return rng

    def next(self) -> float:
        """Return a float in [0, 1)."""
        self._state = (self._state + _INCREMENT) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def next_int(self, lo: int, hi: int) -> int:
        """Return an integer in [lo, hi] (inclusive on both ends)."""
        if lo > hi:
            raise ValueError(f"Invalid range: min ({lo}) must be <= max ({hi})")
        span = int(hi) - int(lo) + 1
        return int(lo) + int(self.next() * span)

    def next_float(self, lo: float, hi: float) -> float:
        """Return a float in [lo, hi]."""
        if lo > hi:
            raise ValueError(f"Invalid range: min ({lo}) must be <= max ({hi})")
        return self.next() * (float(hi) - float(lo)) + float(lo)

    def reset(self, seed: int) -> None:
        self._state = _coerce_seed(seed)

    def get_state(self) -> int:
        return self._state

    def set_state(self, state: int) -> None:
        """Restore a value previously returned by get_state()."""
        self._state = int(state) & _MASK32


def create_rng(seed: int) -> SeededRNG:
    return SeededRNG(seed)


def generate_seed() -> int:
    """Wall-clock seed for a fresh run. UI only; never call from the engine."""
    return int(time.time() * 1000) & 0x7FFFFFFF


def stable_int_seed(*parts: Any, salt: str = "scaling-meter") -> int:
    """Return a stable 32-bit integer seed derived from arbitrary inputs.

    Uses SHA-256 over a canonical JSON representation of `parts`.
    This avoids Python's randomized hash() and is stable across processes/platforms.

    Notes:
    - `default=str` ensures non-JSON types still serialize deterministically enough for our usage.
    - Output is 0..2**32-1 (works with SeededRNG).
    """
    payload = json.dumps(parts, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    h = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(h[:4], "big", signed=False)


def rng_from(*parts: Any, base_seed: int) -> SeededRNG:
    """Create an independent SeededRNG sub-stream from (base_seed + parts)."""
    return SeededRNG(stable_int_seed(base_seed, *parts))
