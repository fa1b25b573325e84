"""
core.tiers
Scaling meter tiers: value -> tier classification plus the display table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

Tier = str

CRASH: Tier = "crash"
FINDING_FIT: Tier = "finding-fit"
GAINING_STEAM: Tier = "gaining-steam"
SCALING_UP: Tier = "scaling-up"
BREAKOUT: Tier = "breakout"

# lowest -> highest
TIER_ORDER: Tuple[Tier, ...] = (CRASH, FINDING_FIT, GAINING_STEAM, SCALING_UP, BREAKOUT)


@dataclass(frozen=True)
class TierConfig:
    tier: Tier
    label: str
    emoji: str
    description: str
    min: int
    max: int


TIER_CONFIGS: Dict[Tier, TierConfig] = {
    CRASH: TierConfig(CRASH, "Crash", "🚧", "Struggling to survive", 0, 29),
    FINDING_FIT: TierConfig(FINDING_FIT, "Finding Fit", "🌱", "Early progress", 30, 49),
    GAINING_STEAM: TierConfig(GAINING_STEAM, "Gaining Steam", "⚡", "Momentum building", 50, 69),
    SCALING_UP: TierConfig(SCALING_UP, "Scaling Up", "🚀", "Rapid growth", 70, 84),
    BREAKOUT: TierConfig(BREAKOUT, "Breakout", "🦄", "Unicorn trajectory", 85, 100),
}


def calculate_tier(value: float) -> Tier:
    """Clamp to [0, 100], then map to a tier.

    Lower bounds are inclusive thresholds, so 29.9 is still a crash.
    """
    v = max(0.0, min(100.0, float(value)))
    for tier in reversed(TIER_ORDER):
        if v >= TIER_CONFIGS[tier].min:
            return tier
    raise AssertionError(f"no tier matched clamped value {v}")


def tier_rank(tier: Tier) -> int:
    return TIER_ORDER.index(tier)


def did_tier_change(old_value: float, new_value: float) -> bool:
    return calculate_tier(old_value) != calculate_tier(new_value)


def get_tier_config(tier: Tier) -> TierConfig:
    return TIER_CONFIGS[tier]


def get_tier_config_by_value(value: float) -> TierConfig:
    return TIER_CONFIGS[calculate_tier(value)]


def all_tier_configs() -> List[TierConfig]:
    return [TIER_CONFIGS[t] for t in TIER_ORDER]
