"""
core.endings
Final outcome for a finished run: ending tier, strongest drivers, main bottleneck,
and one piece of advice.

Ending tiers are finer than meter tiers at the bottom (crash is split into
"scrappy" and "crash") and use "unicorn" for the top band.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .state import DIMENSION_LABELS, DIMENSIONS, Delta


@dataclass(frozen=True)
class EndingTier:
    tier: str
    emoji: str
    title: str
    min: float
    max: float
    description: str


# highest first
ENDING_TIERS: Tuple[EndingTier, ...] = (
    EndingTier(
        "unicorn", "🦄", "Unicorn Success", 85, 100,
        "Against the odds you built something extraordinary. The company is valued past a billion, "
        "customers keep arriving, and investors are lining up for the next round.",
    ),
    EndingTier(
        "scaling-up", "🚀", "Scaling Up Fast", 70, 84,
        "Product-market fit is real and growth is accelerating. Revenue is strong and hiring is the "
        "bottleneck. The path to unicorn is visible; now it is about execution.",
    ),
    EndingTier(
        "gaining-steam", "⚡", "Gaining Momentum", 50, 69,
        "Solid traction and steady revenue. Customers see value and you know what works. "
        "Not a rocket ship yet, but pointed the right way.",
    ),
    EndingTier(
        "finding-fit", "🌱", "Finding Product-Market Fit", 30, 49,
        "Some people want this, and a few pay for it. Growth is slow and problems keep appearing, "
        "but iteration could still break it open.",
    ),
    EndingTier(
        "scrappy", "🔧", "Scrappy Survival", 15, 29,
        "Still alive. Revenue barely covers costs, the tech debt is loud and every day is a fire drill. "
        "Plenty of great companies started exactly here.",
    ),
    EndingTier(
        "crash", "💥", "Crash and Burn", 0, 14,
        "It fell apart: technical trouble, timing and bad luck all landed at once. "
        "The lessons are expensive, and they carry into the next attempt.",
    ),
)

_ADVICE_HIGH: Dict[str, str] = {
    "Revenue": "Focus on upselling and expanding into enterprise accounts.",
    "Users": "Launch a referral loop and lean into viral features.",
    "System": "Invest in infrastructure for 10x load before you need it.",
    "Customers": "Build a customer success team to keep churn down as you grow.",
    "Investors": "Prepare the next round: sharpen the story and show the vision.",
    "Everything": "Keep going, and get ready for the problems that come with scale.",
}

_ADVICE_MID: Dict[str, str] = {
    "Revenue": "Experiment with pricing. You are probably leaving money on the table.",
    "Users": "Double down on the best acquisition channel and tighten onboarding.",
    "System": "Pay down technical debt before it slows everything else.",
    "Customers": "Talk to churned customers and find out what went wrong.",
    "Investors": "Get better at communicating traction and momentum.",
    "Everything": "Pick the one metric that matters most and double it.",
}

_ADVICE_LOW: Dict[str, str] = {
    "Revenue": "Find one customer who would pay 10x and solve exactly their problem.",
    "Users": "Go back to user research. You may be building the wrong thing.",
    "System": "Stop adding features and fix what is broken.",
    "Customers": "Call every remaining customer personally before they leave.",
    "Investors": "Cut burn now and get to ramen profitability.",
    "Everything": "Consider a pivot. Moving on to the next idea is allowed.",
}


@dataclass(frozen=True)
class EndingData:
    tier: str
    emoji: str
    title: str
    description: str
    top_drivers: List[str]
    bottleneck: str
    next_step_suggestion: str


def calculate_ending_tier(final_meter: float) -> str:
    v = float(final_meter)
    for t in ENDING_TIERS:
        if v >= t.min:
            return t.tier
    return ENDING_TIERS[-1].tier


def get_ending_tier(tier_name: str) -> EndingTier:
    for t in ENDING_TIERS:
        if t.tier == tier_name:
            return t
    return ENDING_TIERS[-1]


def identify_top_drivers(hidden: Delta) -> List[str]:
    """Up to two strongest positive dimensions; "Persistence" if nothing is positive."""
    ordered = sorted(DIMENSIONS, key=lambda d: hidden.get(d), reverse=True)
    top = [DIMENSION_LABELS[d] for d in ordered if hidden.get(d) > 0][:2]
    return top or ["Persistence"]


def identify_bottleneck(hidden: Delta) -> str:
    return DIMENSION_LABELS[min(DIMENSIONS, key=lambda d: hidden.get(d))]


def next_step_suggestion(bottleneck: str, tier: str) -> str:
    if tier in ("unicorn", "scaling-up"):
        table = _ADVICE_HIGH
    elif tier in ("gaining-steam", "finding-fit"):
        table = _ADVICE_MID
    else:
        table = _ADVICE_LOW
    return table.get(bottleneck, table["Everything"])


def calculate_ending(final_meter: float, hidden: Delta) -> EndingData:
    tier = get_ending_tier(calculate_ending_tier(final_meter))
    bottleneck = identify_bottleneck(hidden)
    return EndingData(
        tier=tier.tier,
        emoji=tier.emoji,
        title=tier.title,
        description=tier.description,
        top_drivers=identify_top_drivers(hidden),
        bottleneck=bottleneck,
        next_step_suggestion=next_step_suggestion(bottleneck, tier.tier),
    )
