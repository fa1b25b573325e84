"""
core.meter
Scaling meter physics: five hidden dimensions -> one 0..100 display value.

Pipeline per step (order matters for RNG alignment and streaks):
accumulate -> diminishing returns -> weighted sum -> sigmoid -> noise
-> streak -> momentum -> clamp/round -> tier

Rubber-band is cross-step: the engine only exposes the predicate and the bump;
engine.pipeline applies it to the next step's delta.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import MeterConfig, Weights
from .rng import SeededRNG
from .state import DIMENSIONS, Delta, MeterState, UnluckResult, clamp
from .state import initial_meter_state  # noqa: F401  (engine entry point)
from .tiers import calculate_tier
from .unluck import UnluckOptions, process_unluck


def apply_delta_to_hidden_state(hidden: Delta, delta: Delta) -> Delta:
    return hidden + delta


def apply_diminishing_returns(hidden: Delta, power: float) -> Delta:
    """sign(v) * |v|**power per dimension."""
    return hidden.map(lambda _d, v: math.copysign(abs(v) ** power, v) if v != 0 else 0.0)


def compute_weighted_sum(hidden: Delta, weights: Weights) -> float:
    return sum(hidden.get(d) * float(getattr(weights, d)) for d in DIMENSIONS)


def sigmoid(x: float, mu: float, sigma: float) -> float:
    z = (x - mu) / sigma
    # split on sign so exp() never overflows
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


def normalize_meter(raw_score: float, config: MeterConfig) -> float:
    return 100.0 * sigmoid(raw_score, float(config.sigmoid.mu), float(config.sigmoid.sigma))


def apply_randomness(value: float, rng: SeededRNG, bounds: Tuple[float, float]) -> float:
    lo, hi = bounds
    return value + rng.next_float(lo, hi)


def clamp_meter(value: float) -> float:
    """Clamp to [0, 100] and round half up to one decimal."""
    return math.floor(clamp(float(value), 0.0, 100.0) * 10.0 + 0.5) / 10.0


def update_streak(old_value: float, new_value: float, current_streak: int) -> int:
    return int(current_streak) + 1 if new_value > old_value else 0


def apply_momentum_bonus(value: float, streak: int, config: MeterConfig) -> float:
    momentum = config.momentum
    if momentum.enabled and streak >= int(momentum.streak_threshold):
        return value + float(momentum.bonus)
    return value


def should_apply_rubber_band(meter_value: float, config: MeterConfig) -> bool:
    return bool(config.rubber_band.enabled) and float(meter_value) < float(config.rubber_band.threshold)


def apply_rubber_band_bump(delta: Delta, bump: float) -> Delta:
    """Add `bump` to the System dimension of a delta (meant for the *next* step's input)."""
    return Delta(R=delta.R, U=delta.U, S=delta.S + float(bump), C=delta.C, I=delta.I)


def update_meter_state(state: MeterState, delta: Delta, rng: SeededRNG, config: MeterConfig) -> MeterState:
    """Apply one delta and return the next meter state (pure apart from RNG draws)."""
    accumulated = apply_delta_to_hidden_state(state.hidden_state, delta)

    # scoring view only; the raw accumulated state is what persists
    effective = (
        apply_diminishing_returns(accumulated, float(config.diminishing_returns.power))
        if config.diminishing_returns.enabled
        else accumulated
    )

    value = normalize_meter(compute_weighted_sum(effective, config.weights), config)

    if config.randomness.enabled:
        value = apply_randomness(value, rng, config.randomness.bounds)

    streak = update_streak(float(state.display_value), value, int(state.streak))
    value = apply_momentum_bonus(value, streak, config)

    display = clamp_meter(value)
    return MeterState(
        hidden_state=accumulated,
        display_value=display,
        tier=calculate_tier(display),
        streak=streak,
        last_delta=delta,
    )


@dataclass(frozen=True)
class MeterUpdate:
    meter_state: MeterState
    unluck_result: UnluckResult


def update_meter_state_with_unluck(
    state: MeterState,
    delta: Delta,
    step_id: int,
    choice: str,
    rng: SeededRNG,
    config: MeterConfig,
    options: Optional[UnluckOptions] = None,
) -> MeterUpdate:
    """Unluck first (may rewrite the delta), then the regular meter update."""
    final_delta, unluck_result = process_unluck(step_id, choice, delta, rng, config, options)
    return MeterUpdate(
        meter_state=update_meter_state(state, final_delta, rng, config),
        unluck_result=unluck_result,
    )
