"""
core.unluck
Randomized setbacks layered on a step's delta:
- regular unluck (probability gated, scales the delta against the player)
- Perfect Storm (rare, one step/choice only, stacked on top of regular unluck)

RNG call order per step (must never change, saved runs depend on it):
1. regular roll        next()          skipped when force_unluck
2. luck factor         next_float()    skipped when an override is given
3. unluck message      next_int()      skipped when the bank has no entry
4. storm roll          next()          only when eligible; skipped when force_perfect_storm
5. storm message       next_int()      only when the storm triggered
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import MeterConfig, Weights
from .messages import (
    GENERIC_PERFECT_STORM_MESSAGE,
    GENERIC_UNLUCK_MESSAGE,
    PERFECT_STORM_MESSAGES,
    UNLUCK_MESSAGES,
)
from .rng import SeededRNG
from .state import DIMENSIONS, NO_UNLUCK, Delta, UnluckResult


@dataclass(frozen=True)
class UnluckOptions:
    """Operator / test overrides. Defaults leave everything to the RNG."""

    force_unluck: bool = False
    force_perfect_storm: bool = False
    unluck_factor_override: Optional[float] = None


# -------------------------
# Regular unluck
# -------------------------


def roll_unluck(rng: SeededRNG, config: MeterConfig, force_unluck: bool = False) -> bool:
    if force_unluck:
        return True
    roll = rng.next()
    return bool(config.unluck.enabled) and roll < float(config.unluck.probability)


def generate_luck_factor(rng: SeededRNG, factor_range: Tuple[float, float], override: Optional[float] = None) -> float:
    if override is not None:
        return float(override)
    lo, hi = factor_range
    return rng.next_float(lo, hi)


def weighted_impact(delta: Delta, weights: Weights) -> float:
    return sum(delta.get(d) * float(getattr(weights, d)) for d in DIMENSIONS)


def scale_positives(delta: Delta, factor: float) -> Delta:
    return delta.map(lambda _d, v: v * factor if v > 0 else v)


def amplify_negatives(delta: Delta, factor: float) -> Delta:
    return delta.map(lambda _d, v: v * factor if v < 0 else v)


def apply_unluck_to_delta(delta: Delta, luck_factor: float, weights: Weights) -> Delta:
    """Make the outcome worse, whichever way the choice leaned.

    Net-positive (or neutral) impact: gains shrink to `luck_factor`.
    Net-negative impact: losses grow by `2 - luck_factor`.
    """
    if weighted_impact(delta, weights) >= 0:
        return scale_positives(delta, luck_factor)
    return amplify_negatives(delta, 2.0 - luck_factor)


def get_unluck_message(step_id: int, choice: str, rng: SeededRNG) -> str:
    messages = UNLUCK_MESSAGES.get((int(step_id), str(choice)))
    if not messages:
        return GENERIC_UNLUCK_MESSAGE
    return messages[rng.next_int(0, len(messages) - 1)]


# -------------------------
# Perfect Storm
# -------------------------


def is_perfect_storm_eligible(step_id: int, choice: str, unluck_occurred: bool, config: MeterConfig) -> bool:
    special = config.special_unluck
    return bool(unluck_occurred) and int(step_id) == int(special.step) and str(choice) == str(special.choice)


def roll_perfect_storm(rng: SeededRNG, config: MeterConfig, force_perfect_storm: bool = False) -> bool:
    if force_perfect_storm:
        return True
    roll = rng.next()
    return bool(config.special_unluck.enabled) and roll < float(config.special_unluck.probability)


def apply_perfect_storm_penalties(delta: Delta, config: MeterConfig) -> Delta:
    """Symmetric per-dimension penalty: positives shrink by r, negatives grow by r."""
    special = config.special_unluck
    reductions = {
        "R": special.scaling_gains_reduction,
        "S": special.scaling_gains_reduction,
        "U": special.users_reduction,
        "C": special.customers_reduction,
        "I": special.investors_reduction,
    }

    def sym(dim: str, value: float) -> float:
        r = float(reductions[dim])
        return value * (1.0 - r) if value >= 0 else value * (1.0 + r)

    return delta.map(sym)


def get_perfect_storm_message(rng: SeededRNG, messages: Optional[List[str]] = None) -> str:
    bank = PERFECT_STORM_MESSAGES if messages is None else messages
    if not bank:
        return GENERIC_PERFECT_STORM_MESSAGE
    return bank[rng.next_int(0, len(bank) - 1)]


# -------------------------
# Orchestration
# -------------------------


def process_unluck(
    step_id: int,
    choice: str,
    delta: Delta,
    rng: SeededRNG,
    config: MeterConfig,
    options: Optional[UnluckOptions] = None,
) -> Tuple[Delta, UnluckResult]:
    """Run both unluck layers for one step. Returns (final_delta, result)."""
    opts = options or UnluckOptions()

    if not roll_unluck(rng, config, opts.force_unluck):
        return delta, NO_UNLUCK

    luck_factor = generate_luck_factor(rng, config.unluck.factor_range, opts.unluck_factor_override)
    message = get_unluck_message(step_id, choice, rng)
    modified = apply_unluck_to_delta(delta, luck_factor, config.weights)

    perfect_storm = False
    if is_perfect_storm_eligible(step_id, choice, True, config):
        perfect_storm = roll_perfect_storm(rng, config, opts.force_perfect_storm)
        if perfect_storm:
            modified = apply_perfect_storm_penalties(modified, config)
            message = get_perfect_storm_message(rng)

    return modified, UnluckResult(
        unluck_applied=True,
        luck_factor=float(luck_factor),
        message=message,
        perfect_storm=perfect_storm,
    )
