"""engine.config

Engine configuration passed from UI: meter tuning + operator feature flags.

Flags come from URL query parameters (Streamlit `st.query_params` is a mapping) with
environment variables (SCALING_METER_<FLAG>) as a fallback for headless use.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from core.config import DEFAULT_CONFIG, MeterConfig
from core.unluck import UnluckOptions

ENV_PREFIX = "SCALING_METER_"

# operator-facing range for the luck factor override
FACTOR_OVERRIDE_RANGE = (0.4, 0.7)


@dataclass(frozen=True)
class FeatureFlags:
    fixed_seed: Optional[int] = None
    force_unluck: bool = False
    force_perfect_storm: bool = False
    unluck_factor_override: Optional[float] = None
    show_hidden_state: bool = False
    enable_debug_console: bool = False
    skip_animations: bool = False

    def unluck_options(self) -> UnluckOptions:
        return UnluckOptions(
            force_unluck=self.force_unluck,
            force_perfect_storm=self.force_perfect_storm,
            unluck_factor_override=self.unluck_factor_override,
        )


@dataclass(frozen=True)
class EngineConfig:
    meter: MeterConfig = DEFAULT_CONFIG
    flags: FeatureFlags = field(default_factory=FeatureFlags)


def _first(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return v[0] if v else None
    return v


def _truthy(v: Any) -> bool:
    return str(_first(v) or "").strip().lower() in ("true", "1")


def _int_or_none(v: Any) -> Optional[int]:
    try:
        return int(str(_first(v)).strip())
    except (TypeError, ValueError):
        return None


def _factor_or_none(v: Any) -> Optional[float]:
    try:
        f = float(str(_first(v)).strip())
    except (TypeError, ValueError):
        return None
    lo, hi = FACTOR_OVERRIDE_RANGE
    return f if lo <= f <= hi else None


def flags_from_params(params: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> FeatureFlags:
    """Query params win; env fills anything the params leave unset.

    Recognised params: seed, forceUnluck, forcePerfectStorm, unluckFactor, operator,
    showHiddenState, debugConsole, skipAnimations. Unparseable values are ignored.
    """
    env = os.environ if env is None else env

    def raw(param: str, env_key: str) -> Any:
        if param in params and _first(params[param]) not in (None, ""):
            return params[param]
        return env.get(ENV_PREFIX + env_key)

    operator = _truthy(raw("operator", "OPERATOR"))
    return FeatureFlags(
        fixed_seed=_int_or_none(raw("seed", "SEED")),
        force_unluck=_truthy(raw("forceUnluck", "FORCE_UNLUCK")),
        force_perfect_storm=_truthy(raw("forcePerfectStorm", "FORCE_PERFECT_STORM")),
        unluck_factor_override=_factor_or_none(raw("unluckFactor", "UNLUCK_FACTOR")),
        show_hidden_state=operator or _truthy(raw("showHiddenState", "SHOW_HIDDEN_STATE")),
        enable_debug_console=operator or _truthy(raw("debugConsole", "DEBUG_CONSOLE")),
        skip_animations=_truthy(raw("skipAnimations", "SKIP_ANIMATIONS")),
    )


def is_operator_mode(flags: FeatureFlags) -> bool:
    return flags.show_hidden_state and flags.enable_debug_console
