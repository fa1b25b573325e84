"""engine.replay

Post-run analysis: the path taken, "what if" hints, summary statistics and
run-vs-run comparison. Reads StepResults only; never touches the RNG.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from core.state import DIMENSIONS, StepResult

from content.schemas import ContentPack

FALLBACK_HINTS = [
    "Try different choices to see how the story changes!",
    "Every decision matters. Experiment with different paths.",
]

# alternate option must differ by more than this (sum of |dim diff|) to be worth a hint
HINT_MIN_DIFFERENCE = 5.0


def analyze_path_taken(history: Sequence[StepResult]) -> str:
    """Choice path as a string, e.g. "ABABA"."""
    return "".join(r.choice for r in history)


def choice_impact(r: StepResult) -> float:
    tier_changed = 20.0 if r.tier_before != r.tier_after else 0.0
    unluck = 10.0 if r.unluck_applied else 0.0
    storm = 30.0 if r.perfect_storm else 0.0
    return abs(r.meter_after - r.meter_before) + tier_changed + unluck + storm


def generate_alternate_path_hints(history: Sequence[StepResult], pack: ContentPack, limit: int = 2) -> List[str]:
    """Up to `limit` "what if you chose X at step N" hints, most impactful first."""
    scored: List[Tuple[float, str]] = []
    for r in history:
        try:
            step = pack.step(r.step_id)
        except ValueError:
            continue
        alt_choice = "B" if r.choice == "A" else "A"
        alt = step.option(alt_choice)
        difference = sum(abs(alt.delta.get(d) - r.applied_delta.get(d)) for d in DIMENSIONS)
        if difference > HINT_MIN_DIFFERENCE:
            message = f"What if you chose Option {alt_choice} at Step {r.step_id}? ({alt.label})"
            scored.append((choice_impact(r) + difference, message))

    scored.sort(key=lambda x: x[0], reverse=True)
    hints = [m for _, m in scored[:limit]]
    return hints or list(FALLBACK_HINTS)


@dataclass(frozen=True)
class RunStatistics:
    total_steps: int
    unluck_count: int
    perfect_storm_count: int
    tier_changes: int
    start_meter: float
    end_meter: float
    total_meter_change: float
    average_meter_change_per_step: float


def generate_run_statistics(history: Sequence[StepResult]) -> RunStatistics:
    total = len(history)
    start = float(history[0].meter_before) if history else 0.0
    end = float(history[-1].meter_after) if history else 0.0
    tier_changes = sum(1 for prev, cur in zip(history, history[1:]) if cur.tier_after != prev.tier_after)
    return RunStatistics(
        total_steps=total,
        unluck_count=sum(1 for r in history if r.unluck_applied),
        perfect_storm_count=sum(1 for r in history if r.perfect_storm),
        tier_changes=tier_changes,
        start_meter=start,
        end_meter=end,
        total_meter_change=end - start,
        average_meter_change_per_step=(end - start) / total if total else 0.0,
    )


@dataclass(frozen=True)
class RunComparison:
    path1: str
    path2: str
    stats1: RunStatistics
    stats2: RunStatistics
    divergence_step: int  # 1-based; -1 when the shared prefix never diverges
    meter_difference: float
    paths_identical: bool


def compare_runs(run1: Sequence[StepResult], run2: Sequence[StepResult]) -> RunComparison:
    path1, path2 = analyze_path_taken(run1), analyze_path_taken(run2)
    stats1, stats2 = generate_run_statistics(run1), generate_run_statistics(run2)

    divergence = -1
    for i, (a, b) in enumerate(zip(run1, run2)):
        if a.choice != b.choice:
            divergence = i + 1
            break

    return RunComparison(
        path1=path1,
        path2=path2,
        stats1=stats1,
        stats2=stats2,
        divergence_step=divergence,
        meter_difference=stats2.end_meter - stats1.end_meter,
        paths_identical=path1 == path2,
    )
