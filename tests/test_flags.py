import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.config import FeatureFlags, flags_from_params, is_operator_mode  # noqa: E402


class TestFeatureFlags(unittest.TestCase):
    def test_defaults(self):
        flags = flags_from_params({}, env={})
        self.assertEqual(flags, FeatureFlags())
        self.assertFalse(is_operator_mode(flags))

    def test_query_params(self):
        flags = flags_from_params(
            {"seed": "42", "forceUnluck": "true", "forcePerfectStorm": "1", "unluckFactor": "0.55", "skipAnimations": ["true"]},
            env={},
        )
        self.assertEqual(flags.fixed_seed, 42)
        self.assertTrue(flags.force_unluck)
        self.assertTrue(flags.force_perfect_storm)
        self.assertEqual(flags.unluck_factor_override, 0.55)
        self.assertTrue(flags.skip_animations)

    def test_unluck_factor_out_of_range_ignored(self):
        self.assertIsNone(flags_from_params({"unluckFactor": "0.9"}, env={}).unluck_factor_override)
        self.assertIsNone(flags_from_params({"unluckFactor": "abc"}, env={}).unluck_factor_override)

    def test_bad_seed_ignored(self):
        self.assertIsNone(flags_from_params({"seed": "abc"}, env={}).fixed_seed)

    def test_operator_turns_on_debug_surfaces(self):
        flags = flags_from_params({"operator": "true"}, env={})
        self.assertTrue(flags.show_hidden_state)
        self.assertTrue(flags.enable_debug_console)
        self.assertTrue(is_operator_mode(flags))

    def test_env_fallback_and_param_precedence(self):
        env = {"SCALING_METER_SEED": "7", "SCALING_METER_FORCE_UNLUCK": "1"}
        self.assertEqual(flags_from_params({}, env=env).fixed_seed, 7)
        self.assertTrue(flags_from_params({}, env=env).force_unluck)
        self.assertEqual(flags_from_params({"seed": "9"}, env=env).fixed_seed, 9)
        self.assertFalse(flags_from_params({"forceUnluck": "false"}, env=env).force_unluck)

    def test_unluck_options(self):
        opts = FeatureFlags(force_unluck=True, unluck_factor_override=0.4).unluck_options()
        self.assertTrue(opts.force_unluck)
        self.assertFalse(opts.force_perfect_storm)
        self.assertEqual(opts.unluck_factor_override, 0.4)


if __name__ == "__main__":
    unittest.main()
