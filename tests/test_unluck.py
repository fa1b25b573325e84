import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import DEFAULT_CONFIG, merge_config  # noqa: E402
from core.messages import (  # noqa: E402
    GENERIC_UNLUCK_MESSAGE,
    PERFECT_STORM_MESSAGES,
    UNLUCK_MESSAGES,
)
from core.rng import create_rng  # noqa: E402
from core.state import DIMENSIONS, NO_UNLUCK, Delta  # noqa: E402
from core.unluck import (  # noqa: E402
    UnluckOptions,
    apply_perfect_storm_penalties,
    apply_unluck_to_delta,
    is_perfect_storm_eligible,
    process_unluck,
    weighted_impact,
)

FORCED = UnluckOptions(force_unluck=True, unluck_factor_override=0.5)


def _state_after(seed, draws):
    rng = create_rng(seed)
    for _ in range(draws):
        rng.next()
    return rng.get_state()


class TestUnluckScaling(unittest.TestCase):
    def test_positive_impact_scales_gains_only(self):
        delta = Delta(R=10, U=4, S=-2, C=0, I=1)
        out = apply_unluck_to_delta(delta, 0.5, DEFAULT_CONFIG.weights)
        self.assertEqual(out, Delta(R=5, U=2, S=-2, C=0, I=0.5))

    def test_negative_impact_amplifies_losses_only(self):
        delta = Delta(R=-10, U=2, S=-4, C=0, I=0)
        self.assertLess(weighted_impact(delta, DEFAULT_CONFIG.weights), 0)
        out = apply_unluck_to_delta(delta, 0.6, DEFAULT_CONFIG.weights)
        self.assertAlmostEqual(out.R, -14.0)
        self.assertAlmostEqual(out.S, -5.6)
        self.assertEqual(out.U, 2)

    def test_zero_impact_counts_as_positive(self):
        delta = Delta(R=1, U=-1.2)
        self.assertAlmostEqual(weighted_impact(delta, DEFAULT_CONFIG.weights), 0.0)
        out = apply_unluck_to_delta(delta, 0.5, DEFAULT_CONFIG.weights)
        self.assertAlmostEqual(out.R, 0.5)
        self.assertAlmostEqual(out.U, -1.2)

    def test_unluck_never_improves_any_dimension(self):
        rng = create_rng(77)
        for _ in range(300):
            delta = Delta(**{d: rng.next_float(-10, 15) for d in DIMENSIONS})
            factor = rng.next_float(0.4, 0.7)
            out = apply_unluck_to_delta(delta, factor, DEFAULT_CONFIG.weights)
            storm = apply_perfect_storm_penalties(out, DEFAULT_CONFIG)
            for d in DIMENSIONS:
                self.assertLessEqual(out.get(d), delta.get(d) + 1e-12)
                self.assertLessEqual(storm.get(d), out.get(d) + 1e-12)


class TestPerfectStorm(unittest.TestCase):
    def test_penalties_per_dimension(self):
        out = apply_perfect_storm_penalties(Delta(R=10, U=5, S=8, C=3, I=2), DEFAULT_CONFIG)
        self.assertAlmostEqual(out.R, 5.0)
        self.assertAlmostEqual(out.U, 2.5)
        self.assertAlmostEqual(out.S, 4.0)
        self.assertAlmostEqual(out.C, 0.9)
        self.assertAlmostEqual(out.I, 1.2)

    def test_penalties_grow_losses(self):
        out = apply_perfect_storm_penalties(Delta(R=-4, C=-10), DEFAULT_CONFIG)
        self.assertAlmostEqual(out.R, -6.0)
        self.assertAlmostEqual(out.C, -17.0)

    def test_eligibility(self):
        self.assertTrue(is_perfect_storm_eligible(4, "B", True, DEFAULT_CONFIG))
        self.assertFalse(is_perfect_storm_eligible(4, "B", False, DEFAULT_CONFIG))
        self.assertFalse(is_perfect_storm_eligible(4, "A", True, DEFAULT_CONFIG))
        self.assertFalse(is_perfect_storm_eligible(3, "B", True, DEFAULT_CONFIG))

    def test_eligibility_follows_config(self):
        cfg = merge_config({"special_unluck": {"step": 2, "choice": "A"}})
        self.assertTrue(is_perfect_storm_eligible(2, "A", True, cfg))
        self.assertFalse(is_perfect_storm_eligible(4, "B", True, cfg))

    def test_storm_needs_regular_unluck(self):
        cfg = merge_config({"unluck": {"probability": 0.0}})
        opts = UnluckOptions(force_perfect_storm=True)
        out, result = process_unluck(4, "B", Delta(R=10), create_rng(1), cfg, opts)
        self.assertEqual(result, NO_UNLUCK)
        self.assertEqual(out, Delta(R=10))

    def test_storm_on_wrong_step_never_triggers(self):
        opts = UnluckOptions(force_unluck=True, force_perfect_storm=True, unluck_factor_override=0.5)
        for step in range(1, 6):
            for choice in ("A", "B"):
                if (step, choice) == (4, "B"):
                    continue
                with self.subTest(step=step, choice=choice):
                    out, result = process_unluck(step, choice, Delta(R=10, U=5), create_rng(1), DEFAULT_CONFIG, opts)
                    self.assertTrue(result.unluck_applied)
                    self.assertFalse(result.perfect_storm)
                    self.assertEqual(out, apply_unluck_to_delta(Delta(R=10, U=5), 0.5, DEFAULT_CONFIG.weights))

    def test_forced_storm_stacks_on_unluck(self):
        opts = UnluckOptions(force_unluck=True, force_perfect_storm=True, unluck_factor_override=0.5)
        rng = create_rng(9)
        out, result = process_unluck(4, "B", Delta(R=10, U=12, S=-6, C=5, I=8), rng, DEFAULT_CONFIG, opts)
        self.assertTrue(result.unluck_applied)
        self.assertTrue(result.perfect_storm)
        self.assertIn(result.message, PERFECT_STORM_MESSAGES)
        # unluck message + storm message; both rolls skipped
        self.assertEqual(rng.get_state(), _state_after(9, 2))
        self.assertAlmostEqual(out.R, 10 * 0.5 * 0.5)
        self.assertAlmostEqual(out.S, -6 * 1.5)
        self.assertAlmostEqual(out.C, 5 * 0.5 * 0.3)


class TestProcessUnluck(unittest.TestCase):
    def test_no_unluck_consumes_one_draw(self):
        cfg = merge_config({"unluck": {"probability": 0.0}})
        rng = create_rng(3)
        out, result = process_unluck(1, "A", Delta(R=10), rng, cfg)
        self.assertEqual(result, NO_UNLUCK)
        self.assertEqual(result.luck_factor, 1.0)
        self.assertEqual(out, Delta(R=10))
        self.assertEqual(rng.get_state(), _state_after(3, 1))

    def test_disabled_unluck_still_consumes_roll(self):
        cfg = merge_config({"unluck": {"enabled": False, "probability": 1.0}})
        rng = create_rng(3)
        _, result = process_unluck(1, "A", Delta(R=10), rng, cfg)
        self.assertFalse(result.unluck_applied)
        self.assertEqual(rng.get_state(), _state_after(3, 1))

    def test_forced_unluck_skips_roll(self):
        rng = create_rng(3)
        out, result = process_unluck(1, "A", Delta(R=10, S=-2), rng, DEFAULT_CONFIG, FORCED)
        self.assertTrue(result.unluck_applied)
        self.assertEqual(result.luck_factor, 0.5)
        self.assertIn(result.message, UNLUCK_MESSAGES[(1, "A")])
        self.assertEqual(out, Delta(R=5, S=-2))
        # message only
        self.assertEqual(rng.get_state(), _state_after(3, 1))

    def test_forced_unluck_without_override_draws_factor(self):
        rng = create_rng(3)
        _, result = process_unluck(1, "A", Delta(R=10), rng, DEFAULT_CONFIG, UnluckOptions(force_unluck=True))
        self.assertGreaterEqual(result.luck_factor, 0.4)
        self.assertLessEqual(result.luck_factor, 0.7)
        self.assertEqual(rng.get_state(), _state_after(3, 2))

    def test_missing_message_bank_falls_back_without_draw(self):
        rng = create_rng(3)
        _, result = process_unluck(9, "A", Delta(R=10), rng, DEFAULT_CONFIG, FORCED)
        self.assertEqual(result.message, GENERIC_UNLUCK_MESSAGE)
        self.assertEqual(rng.get_state(), _state_after(3, 0))

    def test_unluck_rate_close_to_probability(self):
        rng = create_rng(2024)
        hits = 0
        n = 5000
        for _ in range(n):
            _, result = process_unluck(2, "A", Delta(R=5), rng, DEFAULT_CONFIG)
            hits += int(result.unluck_applied)
        self.assertGreater(hits / n, 0.07)
        self.assertLess(hits / n, 0.13)

    def test_same_seed_same_outcome(self):
        delta = Delta(R=10, U=12, S=-6, C=5, I=8)
        cfg = merge_config({"unluck": {"probability": 0.5}})
        a = [process_unluck(4, "B", delta, rng, cfg) for rng in [create_rng(11)] for _ in range(20)]
        b = [process_unluck(4, "B", delta, rng, cfg) for rng in [create_rng(11)] for _ in range(20)]
        self.assertEqual(a, b)


if __name__ == "__main__":
    unittest.main()
