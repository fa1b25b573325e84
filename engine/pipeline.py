"""engine.pipeline

Core step flow (headless).

Responsibilities:
- Start a run (seed -> initial RunState)
- Apply a choice: pack delta -> rubber-band bump -> unluck -> meter update -> insights
- Persist the PRNG state after every step so saved runs resume exactly
- Replay a run from (seed, choices) by re-simulating every step

This layer is UI-agnostic.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from core.insights import generate_insights
from core.meter import apply_rubber_band_bump, should_apply_rubber_band, update_meter_state_with_unluck
from core.rng import SeededRNG, create_rng
from core.state import CHOICES, TOTAL_STEPS, RunState, StepResult, initial_meter_state

from content.schemas import ContentPack

from .config import EngineConfig

log = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def start_run(
    seed: int,
    *,
    pack: ContentPack,
    config: Optional[EngineConfig] = None,
    now: Optional[str] = None,
) -> RunState:
    """Fresh run at step 1. A fixed_seed flag overrides the given seed."""
    cfg = config or EngineConfig()
    if cfg.flags.fixed_seed is not None:
        seed = int(cfg.flags.fixed_seed)
    return RunState(
        seed=int(seed),
        current_step=1,
        meter_state=initial_meter_state(),
        step_history=[],
        start_time=now or _now_iso(),
        end_time=None,
        content_pack_id=str(pack.id),
        rng_state=create_rng(int(seed)).get_state(),
    )


def rng_for_run(run: RunState, *, pack: ContentPack, config: Optional[EngineConfig] = None) -> SeededRNG:
    """PRNG positioned right after the run's last completed step.

    Uses the persisted state when present. Older saves without it are rebuilt by
    re-simulating every recorded choice, which is only exact under the same
    config and flags the run was played with.
    """
    if run.rng_state is not None:
        return SeededRNG.from_state(run.rng_state)
    log.info("run has no persisted rng state; replaying %d step(s) from seed %s", len(run.step_history), run.seed)
    cfg = config or EngineConfig()
    # replay from the run's own seed, never from a fixed_seed flag
    cfg = replace(cfg, flags=replace(cfg.flags, fixed_seed=None))
    replayed = replay_run(run.seed, [r.choice for r in run.step_history], pack=pack, config=cfg)
    return SeededRNG.from_state(int(replayed.rng_state or 0))


def apply_choice(
    run: RunState,
    choice: str,
    *,
    pack: ContentPack,
    config: Optional[EngineConfig] = None,
    now: Optional[str] = None,
) -> Tuple[RunState, StepResult]:
    """Apply the player's choice for the current step and advance.

    Returns (new_run, step_result).
    """
    cfg = config or EngineConfig()
    if run.is_complete:
        raise ValueError(f"Run already finished (current_step={run.current_step})")
    choice = str(choice).strip().upper()
    if choice not in CHOICES:
        raise ValueError(f"Unknown choice: {choice!r} (expected 'A' or 'B')")
    if run.content_pack_id != pack.id:
        raise ValueError(f"Run was played with content pack {run.content_pack_id!r}, not {pack.id!r}")

    step_id = int(run.current_step)
    original = pack.step(step_id).option(choice).delta
    rng = rng_for_run(run, pack=pack, config=cfg)

    # rubber-band queued by the previous step's result
    delta = original
    rubber_band = bool(run.step_history) and should_apply_rubber_band(run.meter_state.display_value, cfg.meter)
    if rubber_band:
        delta = apply_rubber_band_bump(delta, float(cfg.meter.rubber_band.bump))

    before = run.meter_state
    update = update_meter_state_with_unluck(
        before, delta, step_id, choice, rng, cfg.meter, cfg.flags.unluck_options()
    )
    after = update.meter_state
    unluck = update.unluck_result
    stamp = now or _now_iso()

    result = StepResult(
        step_id=step_id,
        choice=choice,
        original_delta=original,
        applied_delta=after.last_delta if after.last_delta is not None else delta,
        meter_before=float(before.display_value),
        meter_after=float(after.display_value),
        tier_before=before.tier,
        tier_after=after.tier,
        insights=generate_insights(after),
        unluck_applied=unluck.unluck_applied,
        luck_factor=float(unluck.luck_factor),
        perfect_storm=unluck.perfect_storm,
        unluck_message=unluck.message,
        rubber_band_applied=rubber_band,
        timestamp=stamp,
    )

    next_step = step_id + 1
    finished = next_step > TOTAL_STEPS
    new_run = replace(
        run,
        current_step=next_step,
        meter_state=after,
        step_history=[*run.step_history, result],
        end_time=stamp if finished else run.end_time,
        rng_state=rng.get_state(),
    )

    log.debug(
        "step %s choice %s: %.1f -> %.1f (%s) unluck=%s storm=%s rubber_band=%s",
        step_id, choice, before.display_value, after.display_value, after.tier,
        unluck.unluck_applied, unluck.perfect_storm, rubber_band,
    )
    return new_run, result


def replay_run(
    seed: int,
    choices: Sequence[str],
    *,
    pack: ContentPack,
    config: Optional[EngineConfig] = None,
    start_time: Optional[str] = None,
) -> RunState:
    """Re-simulate a run from its seed and choice path (e.g. "ABABA")."""
    run = start_run(seed, pack=pack, config=config, now=start_time)
    for c in choices:
        run, _ = apply_choice(run, c, pack=pack, config=config)
    return run

