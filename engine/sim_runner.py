"""engine.sim_runner

Headless runner for quick sanity checks and tuning.

Plays whole runs through the same pipeline the UI uses, so results are exactly
what a player would see for the same seed and choices. No UI, no network.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from core.config import merge_config, validate_config
from core.endings import calculate_ending_tier
from core.rng import rng_from
from core.state import CHOICES, TOTAL_STEPS, RunState
from core.tiers import TIER_ORDER

from content.schemas import ContentPack

from .config import EngineConfig
from .pipeline import replay_run

log = logging.getLogger(__name__)

STRATEGIES = ("always_a", "always_b", "random")


def simulate_path(
    path: Union[str, Sequence[str]],
    seed: int,
    *,
    pack: ContentPack,
    config: Optional[EngineConfig] = None,
) -> RunState:
    """Play a full (or partial) run for a fixed choice path, e.g. "ABBAB"."""
    choices = [str(c).strip().upper() for c in path]
    if len(choices) > TOTAL_STEPS:
        raise ValueError(f"Path too long: {len(choices)} choices for {TOTAL_STEPS} steps")
    return replay_run(int(seed), choices, pack=pack, config=config, start_time="sim")


def choose_path(strategy: Union[str, Sequence[str]], *, run_index: int, base_seed: int) -> List[str]:
    """Resolve a strategy into a concrete choice path.

    "random" draws from a stream derived from (base_seed, run_index) so it never
    shares state with the engine's own PRNG.
    """
    if isinstance(strategy, str) and strategy in STRATEGIES:
        if strategy == "always_a":
            return ["A"] * TOTAL_STEPS
        if strategy == "always_b":
            return ["B"] * TOTAL_STEPS
        rng = rng_from("path", run_index, base_seed=base_seed)
        return [CHOICES[rng.next_int(0, 1)] for _ in range(TOTAL_STEPS)]

    path = [str(c).strip().upper() for c in strategy]
    bad = [c for c in path if c not in CHOICES]
    if bad or len(path) != TOTAL_STEPS:
        raise ValueError(f"Unknown strategy: {strategy!r} (expected one of {STRATEGIES} or a {TOTAL_STEPS}-letter A/B path)")
    return path


@dataclass
class BatchSummary:
    runs: int
    strategy: str
    mean_final: float
    min_final: float
    max_final: float
    tier_counts: Dict[str, int] = field(default_factory=dict)
    ending_counts: Dict[str, int] = field(default_factory=dict)
    unluck_steps: int = 0
    perfect_storms: int = 0
    unluck_rate: float = 0.0
    paths: Counter = field(default_factory=Counter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runs": self.runs,
            "strategy": self.strategy,
            "mean_final": round(self.mean_final, 2),
            "min_final": self.min_final,
            "max_final": self.max_final,
            "tier_counts": dict(self.tier_counts),
            "ending_counts": dict(self.ending_counts),
            "unluck_steps": self.unluck_steps,
            "perfect_storms": self.perfect_storms,
            "unluck_rate": round(self.unluck_rate, 4),
            "paths": dict(self.paths),
        }


def run_batch(
    n_runs: int,
    *,
    pack: ContentPack,
    base_seed: int = 123,
    strategy: Union[str, Sequence[str]] = "random",
    config: Optional[EngineConfig] = None,
    config_overrides: Optional[Mapping[str, Any]] = None,
) -> BatchSummary:
    """Play `n_runs` complete runs with seeds base_seed, base_seed+1, ...

    `config_overrides` is a nested mapping merged over the meter config (see
    core.config.merge_config); an invalid result raises ValueError.
    """
    if n_runs < 1:
        raise ValueError(f"n_runs must be >= 1, got {n_runs}")

    cfg = config or EngineConfig()
    if config_overrides:
        meter = merge_config(config_overrides, base=cfg.meter)
        problems = validate_config(meter)
        if problems:
            raise ValueError("Invalid config overrides:\n" + "\n".join(f"- {p}" for p in problems))
        cfg = EngineConfig(meter=meter, flags=cfg.flags)

    finals: List[float] = []
    tier_counts: Counter = Counter({t: 0 for t in TIER_ORDER})
    ending_counts: Counter = Counter()
    paths: Counter = Counter()
    unluck_steps = 0
    storms = 0

    for i in range(n_runs):
        path = choose_path(strategy, run_index=i, base_seed=base_seed)
        run = simulate_path(path, base_seed + i, pack=pack, config=cfg)

        final = float(run.meter_state.display_value)
        finals.append(final)
        tier_counts[run.meter_state.tier] += 1
        ending_counts[calculate_ending_tier(final)] += 1
        paths["".join(path)] += 1
        unluck_steps += sum(1 for r in run.step_history if r.unluck_applied)
        storms += sum(1 for r in run.step_history if r.perfect_storm)

    label = strategy if isinstance(strategy, str) else "".join(strategy)
    summary = BatchSummary(
        runs=n_runs,
        strategy=str(label),
        mean_final=sum(finals) / len(finals),
        min_final=min(finals),
        max_final=max(finals),
        tier_counts=dict(tier_counts),
        ending_counts=dict(ending_counts),
        unluck_steps=unluck_steps,
        perfect_storms=storms,
        unluck_rate=unluck_steps / float(n_runs * TOTAL_STEPS),
        paths=paths,
    )
    log.info(
        "batch %s x%d: mean %.1f [%.1f, %.1f] unluck_rate %.3f storms %d",
        summary.strategy, n_runs, summary.mean_final, summary.min_final, summary.max_final,
        summary.unluck_rate, storms,
    )
    return summary
