import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import DEFAULT_CONFIG, merge_config  # noqa: E402
from core.meter import (  # noqa: E402
    apply_diminishing_returns,
    apply_momentum_bonus,
    apply_rubber_band_bump,
    clamp_meter,
    normalize_meter,
    should_apply_rubber_band,
    sigmoid,
    update_meter_state,
    update_meter_state_with_unluck,
    update_streak,
)
from core.rng import create_rng  # noqa: E402
from core.state import DIMENSIONS, Delta, initial_meter_state  # noqa: E402
from core.tiers import GAINING_STEAM, calculate_tier  # noqa: E402

# every optional mechanic off: display is a pure function of the hidden state
PURE = merge_config({
    "momentum": {"enabled": False},
    "randomness": {"enabled": False},
    "diminishing_returns": {"enabled": False},
    "rubber_band": {"enabled": False},
    "unluck": {"enabled": False},
    "special_unluck": {"enabled": False},
})


class TestMeterMath(unittest.TestCase):
    def test_sigmoid_midpoint_and_extremes(self):
        self.assertAlmostEqual(sigmoid(-4, -4, 11), 0.5)
        self.assertAlmostEqual(sigmoid(10_000, -4, 11), 1.0)
        self.assertAlmostEqual(sigmoid(-10_000, -4, 11), 0.0)

    def test_sigmoid_monotonic(self):
        values = [sigmoid(x, -4, 11) for x in range(-50, 51)]
        self.assertEqual(values, sorted(values))

    def test_diminishing_returns_keeps_sign(self):
        out = apply_diminishing_returns(Delta(R=16, U=-16, S=0, C=1, I=-1), 0.5)
        self.assertAlmostEqual(out.R, 4.0)
        self.assertAlmostEqual(out.U, -4.0)
        self.assertEqual(out.S, 0.0)
        self.assertAlmostEqual(out.C, 1.0)
        self.assertAlmostEqual(out.I, -1.0)

    def test_clamp_rounds_half_up(self):
        self.assertEqual(clamp_meter(-3.0), 0.0)
        self.assertEqual(clamp_meter(104.2), 100.0)
        self.assertEqual(clamp_meter(42.25), 42.3)
        self.assertEqual(clamp_meter(42.24), 42.2)

    def test_streak(self):
        self.assertEqual(update_streak(50.0, 50.1, 0), 1)
        self.assertEqual(update_streak(50.0, 50.1, 3), 4)
        self.assertEqual(update_streak(50.0, 50.0, 3), 0)
        self.assertEqual(update_streak(50.0, 49.0, 3), 0)

    def test_momentum_bonus_threshold(self):
        self.assertEqual(apply_momentum_bonus(60.0, 1, DEFAULT_CONFIG), 60.0)
        self.assertEqual(apply_momentum_bonus(60.0, 2, DEFAULT_CONFIG), 63.0)
        self.assertEqual(apply_momentum_bonus(60.0, 5, PURE), 60.0)

    def test_rubber_band_predicate_and_bump(self):
        self.assertTrue(should_apply_rubber_band(29.9, DEFAULT_CONFIG))
        self.assertFalse(should_apply_rubber_band(30.0, DEFAULT_CONFIG))
        self.assertFalse(should_apply_rubber_band(10.0, PURE))
        self.assertEqual(apply_rubber_band_bump(Delta(R=1, S=3), 2.0), Delta(R=1, S=5))


class TestUpdateMeterState(unittest.TestCase):
    def test_initial_state(self):
        s = initial_meter_state()
        self.assertEqual(s.display_value, 50.0)
        self.assertEqual(s.tier, GAINING_STEAM)
        self.assertEqual(s.streak, 0)
        self.assertEqual(s.hidden_state, Delta())

    def test_pure_sigmoid_when_everything_disabled(self):
        rng = create_rng(42)
        before = rng.get_state()
        s = update_meter_state(initial_meter_state(), Delta(), rng, PURE)
        self.assertEqual(s.display_value, clamp_meter(100.0 * sigmoid(0.0, -4.0, 11.0)))
        self.assertEqual(s.display_value, 59.0)
        # no noise, no draws
        self.assertEqual(rng.get_state(), before)

    def test_same_seed_same_result(self):
        delta = Delta(R=10, U=5, S=3, C=2, I=1)
        a = update_meter_state_with_unluck(initial_meter_state(), delta, 1, "A", create_rng(42), DEFAULT_CONFIG)
        b = update_meter_state_with_unluck(initial_meter_state(), delta, 1, "A", create_rng(42), DEFAULT_CONFIG)
        self.assertEqual(a, b)

    def test_hidden_state_accumulates_raw_delta(self):
        rng = create_rng(5)
        s = initial_meter_state()
        s = update_meter_state(s, Delta(R=10, S=-4), rng, DEFAULT_CONFIG)
        s = update_meter_state(s, Delta(R=6, U=2), rng, DEFAULT_CONFIG)
        self.assertEqual(s.hidden_state, Delta(R=16, U=2, S=-4))
        self.assertEqual(s.last_delta, Delta(R=6, U=2))

    def test_display_in_range_and_tier_consistent(self):
        rng = create_rng(31337)
        content_rng = create_rng(1)
        for _ in range(200):
            s = initial_meter_state()
            for step in range(1, 6):
                delta = Delta(**{d: content_rng.next_float(-10, 15) for d in DIMENSIONS})
                choice = "A" if content_rng.next() < 0.5 else "B"
                s = update_meter_state_with_unluck(s, delta, step, choice, rng, DEFAULT_CONFIG).meter_state
                self.assertGreaterEqual(s.display_value, 0.0)
                self.assertLessEqual(s.display_value, 100.0)
                self.assertEqual(round(s.display_value, 1), s.display_value)
                self.assertEqual(s.tier, calculate_tier(s.display_value))

    def test_streak_and_momentum_on_rising_meter(self):
        cfg = merge_config({"momentum": {"enabled": True}}, base=PURE)
        rng = create_rng(1)
        s1 = update_meter_state(initial_meter_state(), Delta(R=10), rng, cfg)
        self.assertEqual(s1.streak, 1)
        self.assertEqual(s1.display_value, clamp_meter(normalize_meter(3.0, cfg)))

        s2 = update_meter_state(s1, Delta(R=10), rng, cfg)
        self.assertEqual(s2.streak, 2)
        self.assertEqual(s2.display_value, clamp_meter(normalize_meter(6.0, cfg) + 3.0))

    def test_streak_resets_on_drop(self):
        rng = create_rng(1)
        s1 = update_meter_state(initial_meter_state(), Delta(R=10), rng, PURE)
        s2 = update_meter_state(s1, Delta(R=-15), rng, PURE)
        self.assertEqual(s2.streak, 0)
        self.assertLess(s2.display_value, s1.display_value)

    def test_noise_consumes_one_draw(self):
        cfg = merge_config({"randomness": {"enabled": True}}, base=PURE)
        rng = create_rng(8)
        s = update_meter_state(initial_meter_state(), Delta(), rng, cfg)
        expected_rng = create_rng(8)
        noise = expected_rng.next_float(-2.0, 5.0)
        self.assertEqual(s.display_value, clamp_meter(normalize_meter(0.0, cfg) + noise))
        self.assertEqual(rng.get_state(), expected_rng.get_state())

    def test_diminishing_returns_does_not_touch_stored_state(self):
        rng = create_rng(1)
        cfg = merge_config({"diminishing_returns": {"enabled": True}}, base=PURE)
        s = update_meter_state(initial_meter_state(), Delta(R=20), rng, cfg)
        self.assertEqual(s.hidden_state.R, 20.0)
        self.assertEqual(s.display_value, clamp_meter(normalize_meter(0.3 * 20 ** 0.9, cfg)))


if __name__ == "__main__":
    unittest.main()
