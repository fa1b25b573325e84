"""
core.selfcheck
Minimal "it runs" proof for the meter core.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from .config import DEFAULT_CONFIG, validate_config
from .meter import update_meter_state_with_unluck
from .rng import create_rng
from .state import DIMENSIONS, Delta, initial_meter_state
from .tiers import calculate_tier


def run_5_steps_smoke() -> None:
    assert not validate_config(DEFAULT_CONFIG)

    seed = 42
    rng = create_rng(seed)
    state = initial_meter_state()
    hidden_sum = Delta()

    deltas = [
        Delta(R=10, U=2, S=-2, C=3, I=2),
        Delta(R=4, U=5, S=0, C=6, I=1),
        Delta(R=5, U=6, S=-4, C=8, I=2),
        Delta(R=10, U=12, S=-6, C=5, I=8),
        Delta(R=3, U=9, S=-3, C=6, I=3),
    ]

    for step, delta in enumerate(deltas, start=1):
        choice = "A" if step % 2 == 1 else "B"
        update = update_meter_state_with_unluck(state, delta, step, choice, rng, DEFAULT_CONFIG)
        state = update.meter_state
        applied = state.last_delta
        assert applied is not None
        hidden_sum = hidden_sum + applied

        # invariants
        assert 0.0 <= state.display_value <= 100.0
        assert round(state.display_value, 1) == state.display_value
        assert state.tier == calculate_tier(state.display_value)
        assert state.streak >= 0
        if update.unluck_result.perfect_storm:
            assert update.unluck_result.unluck_applied
        for d in DIMENSIONS:
            assert abs(state.hidden_state.get(d) - hidden_sum.get(d)) < 1e-9

    # same seed, same inputs, same outcome
    replay_rng = create_rng(seed)
    replay = initial_meter_state()
    for step, delta in enumerate(deltas, start=1):
        choice = "A" if step % 2 == 1 else "B"
        replay = update_meter_state_with_unluck(replay, delta, step, choice, replay_rng, DEFAULT_CONFIG).meter_state
    assert replay == state
    assert replay_rng.get_state() == rng.get_state()

    print("OK: 5-step core smoke test passed.")
    print("Final meter:", state.display_value, state.tier)
    print("Hidden state:", dict(state.hidden_state.items()))


if __name__ == "__main__":
    run_5_steps_smoke()
