"""
core.insights
One or two short feedback lines per step: the strongest dimension and, when it
clearly lags, the bottleneck.
"""

from __future__ import annotations

from typing import Dict, List

from .state import DIMENSIONS, Delta, MeterState

TOP_MESSAGES: Dict[str, List[str]] = {
    "R": ["💰 Revenue momentum strong", "💰 Monetization working well", "💰 Cash flow looking healthy"],
    "U": ["👥 User growth impressive", "👥 Activation strong", "👥 User acquisition on track"],
    "S": ["⚙️ Infrastructure solid", "⚙️ Scaling smoothly", "⚙️ System performance good"],
    "C": ["❤️ Customers love you", "❤️ Retention excellent", "❤️ Customer satisfaction high"],
    "I": ["📊 Investors confident", "📊 Metrics visibility strong", "📊 Investor relations good"],
}

BOTTLENECK_MESSAGES: Dict[str, List[str]] = {
    "R": ["⚠️ Revenue lagging", "⚠️ Need pricing strategy", "⚠️ Monetization needs work"],
    "U": ["⚠️ Struggling to acquire users", "⚠️ Activation needs work", "⚠️ User growth stalling"],
    "S": ["⚠️ Infrastructure bottleneck", "⚠️ Consider autoscaling", "⚠️ System strain showing"],
    "C": ["⚠️ Churn risk increasing", "⚠️ Need better support", "⚠️ Customer satisfaction dropping"],
    "I": ["⚠️ Story unclear to investors", "⚠️ Need better reporting", "⚠️ Metrics visibility poor"],
}

# bottleneck line shows when it trails the top dimension by this much (or is negative)
BOTTLENECK_GAP = 5.0


def top_dimension(hidden: Delta) -> str:
    # ties resolve to the earlier dimension in R, U, S, C, I order
    best = DIMENSIONS[0]
    for d in DIMENSIONS[1:]:
        if hidden.get(d) > hidden.get(best):
            best = d
    return best


def bottleneck_dimension(hidden: Delta) -> str:
    worst = DIMENSIONS[0]
    for d in DIMENSIONS[1:]:
        if hidden.get(d) < hidden.get(worst):
            worst = d
    return worst


def generate_insights(meter_state: MeterState) -> List[str]:
    """Message choice rotates with the display value so lines vary across a run."""
    hidden = meter_state.hidden_state
    top = top_dimension(hidden)
    bottom = bottleneck_dimension(hidden)
    idx = int(float(meter_state.display_value) // 20)

    top_msgs = TOP_MESSAGES[top]
    insights = [top_msgs[idx % len(top_msgs)]]

    top_v, bottom_v = hidden.get(top), hidden.get(bottom)
    if top != bottom and (bottom_v < 0 or top_v - bottom_v >= BOTTLENECK_GAP):
        bottom_msgs = BOTTLENECK_MESSAGES[bottom]
        insights.append(bottom_msgs[idx % len(bottom_msgs)])
    return insights
