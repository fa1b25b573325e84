"""
core.config
Tuning parameters for the meter and unluck engines.

Kept in core so balancing lives in one place. The config is a plain immutable value:
callers build one (usually DEFAULT_CONFIG or merge_config(overrides)) and pass it
explicitly to every engine call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, is_dataclass, replace
from typing import Any, Dict, List, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class Weights:
    R: float = 0.30  # Revenue
    U: float = 0.25  # Users
    S: float = 0.20  # System
    C: float = 0.15  # Customers
    I: float = 0.10  # noqa: E741 (Investors)


@dataclass(frozen=True)
class SigmoidParams:
    mu: float = -4.0
    sigma: float = 11.0


@dataclass(frozen=True)
class MomentumConfig:
    enabled: bool = True
    bonus: float = 3.0
    streak_threshold: int = 2


@dataclass(frozen=True)
class RandomnessConfig:
    enabled: bool = True
    bounds: Tuple[float, float] = (-2.0, 5.0)


@dataclass(frozen=True)
class DiminishingReturnsConfig:
    enabled: bool = True
    power: float = 0.9


@dataclass(frozen=True)
class RubberBandConfig:
    enabled: bool = True
    threshold: float = 30.0
    bump: float = 2.0


@dataclass(frozen=True)
class UnluckConfig:
    enabled: bool = True
    probability: float = 0.10
    factor_range: Tuple[float, float] = (0.4, 0.7)


@dataclass(frozen=True)
class SpecialUnluckConfig:
    """Perfect Storm: only rolled on one step/choice, after regular unluck hit."""

    enabled: bool = True
    step: int = 4
    choice: str = "B"
    probability: float = 1.0
    scaling_gains_reduction: float = 0.5  # R and S
    users_reduction: float = 0.5
    customers_reduction: float = 0.7
    investors_reduction: float = 0.4


@dataclass(frozen=True)
class MeterConfig:
    weights: Weights = Weights()
    sigmoid: SigmoidParams = SigmoidParams()
    momentum: MomentumConfig = MomentumConfig()
    randomness: RandomnessConfig = RandomnessConfig()
    diminishing_returns: DiminishingReturnsConfig = DiminishingReturnsConfig()
    rubber_band: RubberBandConfig = RubberBandConfig()
    unluck: UnluckConfig = UnluckConfig()
    special_unluck: SpecialUnluckConfig = SpecialUnluckConfig()


DEFAULT_CONFIG = MeterConfig()

_PAIR_FIELDS = {"bounds", "factor_range"}


def _pair(value: Any, where: str) -> Tuple[float, float]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise ValueError(f"Config value {where} must be a [min, max] pair (got {value!r})")
    return (_number(value[0], where), _number(value[1], where))


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Config value {where} must be a number (got {value!r})")
    return float(value)


def _scalar(kind: str, value: Any, where: str) -> Any:
    """Coerce an override to its field's declared type."""
    if kind == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"Config value {where} must be true or false (got {value!r})")
        return value
    if kind == "int":
        number = _number(value, where)
        if not number.is_integer():
            raise ValueError(f"Config value {where} must be a whole number (got {value!r})")
        return int(number)
    if kind == "float":
        return _number(value, where)
    if not isinstance(value, str):
        raise ValueError(f"Config value {where} must be a string (got {value!r})")
    return value


def _merge_section(section: Any, overrides: Mapping[str, Any], path: str) -> Any:
    if not isinstance(overrides, Mapping):
        raise ValueError(f"Config overrides{' for ' + path.rstrip('.') if path else ''} must be a mapping (got {overrides!r})")
    known = {f.name: f for f in fields(section)}
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            raise ValueError(f"Unknown config key: {path}{key}")
        current = getattr(section, key)
        if is_dataclass(current):
            changes[key] = _merge_section(current, value, f"{path}{key}.")
        elif key in _PAIR_FIELDS:
            changes[key] = _pair(value, f"{path}{key}")
        else:
            changes[key] = _scalar(str(known[key].type), value, f"{path}{key}")
    return replace(section, **changes)


def merge_config(overrides: Mapping[str, Any], base: MeterConfig = DEFAULT_CONFIG) -> MeterConfig:
    """Deep-merge a partial nested mapping over `base` (defaults if omitted).

    Example: merge_config({"unluck": {"probability": 0.5}}) keeps every other
    unluck field (and every other section) at its default.
    """
    return _merge_section(base, overrides or {}, "")


def config_to_dict(config: MeterConfig) -> Dict[str, Any]:
    d = asdict(config)
    d["randomness"]["bounds"] = list(config.randomness.bounds)
    d["unluck"]["factor_range"] = list(config.unluck.factor_range)
    return d


def config_from_dict(d: Mapping[str, Any]) -> MeterConfig:
    return merge_config(d, DEFAULT_CONFIG)


def _in_unit(x: float) -> bool:
    return 0.0 <= float(x) <= 1.0


def validate_config(config: MeterConfig) -> List[str]:
    """Return human-readable problems (empty list when the config is usable).

    Never raises: callers decide whether to reject or proceed.
    """
    errors: List[str] = []

    weights = asdict(config.weights)
    weight_sum = sum(float(v) for v in weights.values())
    if abs(weight_sum - 1.0) > 0.01:
        errors.append(f"Weights must sum to 1.0 (got {weight_sum:.3f})")
    for key, value in weights.items():
        if float(value) < 0:
            errors.append(f"Weight {key} must be non-negative (got {value})")

    if float(config.sigmoid.sigma) <= 0:
        errors.append(f"Sigmoid sigma must be > 0 (got {config.sigmoid.sigma})")

    if float(config.momentum.bonus) < 0 or float(config.momentum.bonus) > 10:
        errors.append(f"Momentum bonus should be in [0, 10] range (got {config.momentum.bonus})")
    if int(config.momentum.streak_threshold) < 1:
        errors.append(f"Momentum streak threshold must be >= 1 (got {config.momentum.streak_threshold})")

    lo, hi = config.randomness.bounds
    if lo > hi:
        errors.append(f"Randomness bounds must be ordered min <= max (got [{lo}, {hi}])")

    if float(config.diminishing_returns.power) <= 0:
        errors.append(f"Diminishing returns power must be > 0 (got {config.diminishing_returns.power})")

    if not _in_unit(config.unluck.probability):
        errors.append(f"Unluck probability must be in [0, 1] range (got {config.unluck.probability})")

    min_f, max_f = config.unluck.factor_range
    if not (_in_unit(min_f) and _in_unit(max_f)):
        errors.append(f"Unluck factor range must be in [0, 1] (got [{min_f}, {max_f}])")
    if min_f >= max_f:
        errors.append(f"Unluck factor min must be < max (got [{min_f}, {max_f}])")

    special = config.special_unluck
    if not _in_unit(special.probability):
        errors.append(f"Perfect Storm probability must be in [0, 1] range (got {special.probability})")
    if int(special.step) < 1 or int(special.step) > 5:
        errors.append(f"Perfect Storm step must be in [1, 5] (got {special.step})")
    if special.choice not in ("A", "B"):
        errors.append(f"Perfect Storm choice must be 'A' or 'B' (got {special.choice!r})")
    for name in ("scaling_gains_reduction", "users_reduction", "customers_reduction", "investors_reduction"):
        value = getattr(special, name)
        if not _in_unit(value):
            errors.append(f"Perfect Storm {name} must be in [0, 1] (got {value})")

    return errors
