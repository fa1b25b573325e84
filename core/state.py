"""
core.state
Core domain data models (UI independent).

Everything here is an immutable value. The engines return new instances on every
step; the *_to_dict / *_from_dict helpers give the JSON shape used by run exports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .tiers import GAINING_STEAM, Tier


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


DIMENSIONS: Tuple[str, ...] = ("R", "U", "S", "C", "I")

DIMENSION_LABELS: Dict[str, str] = {
    "R": "Revenue",
    "U": "Users",
    "S": "System",
    "C": "Customers",
    "I": "Investors",
}

CHOICES: Tuple[str, ...] = ("A", "B")

TOTAL_STEPS = 5


@dataclass(frozen=True)
class Delta:
    """A five-dimensional change (or, as HiddenState, an accumulated total).

    Authored content keeps each field in [-10, +15]; engine intermediates are not bounded.
    """

    R: float = 0.0
    U: float = 0.0
    S: float = 0.0
    C: float = 0.0
    I: float = 0.0  # noqa: E741

    def get(self, dim: str) -> float:
        return float(getattr(self, dim))

    def items(self) -> List[Tuple[str, float]]:
        return [(d, self.get(d)) for d in DIMENSIONS]

    def map(self, fn) -> "Delta":
        """Apply fn(dim, value) to every dimension."""
        return Delta(**{d: float(fn(d, self.get(d))) for d in DIMENSIONS})

    def __add__(self, other: "Delta") -> "Delta":
        return Delta(**{d: self.get(d) + other.get(d) for d in DIMENSIONS})


HiddenState = Delta

ZERO_DELTA = Delta()


def delta_from_mapping(d: Mapping[str, Any]) -> Delta:
    """Bridge helper for dict-based deltas (content packs, run files). Missing keys are 0."""
    return Delta(**{k: float(d.get(k, 0.0) or 0.0) for k in DIMENSIONS})


def delta_to_dict(delta: Delta) -> Dict[str, float]:
    return {k: delta.get(k) for k in DIMENSIONS}


@dataclass(frozen=True)
class MeterState:
    hidden_state: Delta
    display_value: float
    tier: Tier
    streak: int = 0
    last_delta: Optional[Delta] = None


@dataclass(frozen=True)
class UnluckResult:
    """Descriptive output of one unluck pass; never stored as engine state."""

    unluck_applied: bool
    luck_factor: float
    message: Optional[str]
    perfect_storm: bool


NO_UNLUCK = UnluckResult(unluck_applied=False, luck_factor=1.0, message=None, perfect_storm=False)


@dataclass(frozen=True)
class StepResult:
    step_id: int
    choice: str
    original_delta: Delta
    applied_delta: Delta
    meter_before: float
    meter_after: float
    tier_before: Tier
    tier_after: Tier
    insights: List[str] = field(default_factory=list)
    unluck_applied: bool = False
    luck_factor: float = 1.0
    perfect_storm: bool = False
    unluck_message: Optional[str] = None
    rubber_band_applied: bool = False
    timestamp: str = ""


@dataclass(frozen=True)
class RunState:
    """One playthrough.

    `rng_state` is the PRNG state after the last completed step, so a saved run can be
    resumed without re-deriving earlier draws.
    """

    seed: int
    current_step: int
    meter_state: MeterState
    step_history: List[StepResult] = field(default_factory=list)
    start_time: str = ""
    end_time: Optional[str] = None
    content_pack_id: str = "default"
    rng_state: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.current_step > TOTAL_STEPS


def initial_meter_state() -> MeterState:
    """Baseline start state: hidden state at zero, display at 50 (gaining-steam)."""
    return MeterState(hidden_state=ZERO_DELTA, display_value=50.0, tier=GAINING_STEAM, streak=0, last_delta=None)


# -------------------------
# dict bridges
# -------------------------


def meter_state_to_dict(s: MeterState) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "hidden_state": delta_to_dict(s.hidden_state),
        "display_value": float(s.display_value),
        "tier": str(s.tier),
        "streak": int(s.streak),
    }
    if s.last_delta is not None:
        out["last_delta"] = delta_to_dict(s.last_delta)
    return out


def meter_state_from_dict(d: Mapping[str, Any]) -> MeterState:
    last = d.get("last_delta")
    return MeterState(
        hidden_state=delta_from_mapping(d.get("hidden_state") or {}),
        display_value=float(d.get("display_value", 50.0)),
        tier=str(d.get("tier", GAINING_STEAM)),
        streak=int(d.get("streak", 0)),
        last_delta=delta_from_mapping(last) if last is not None else None,
    )


def step_result_to_dict(r: StepResult) -> Dict[str, Any]:
    return {
        "step_id": int(r.step_id),
        "choice": str(r.choice),
        "original_delta": delta_to_dict(r.original_delta),
        "applied_delta": delta_to_dict(r.applied_delta),
        "meter_before": float(r.meter_before),
        "meter_after": float(r.meter_after),
        "tier_before": str(r.tier_before),
        "tier_after": str(r.tier_after),
        "insights": list(r.insights),
        "unluck_applied": bool(r.unluck_applied),
        "luck_factor": float(r.luck_factor),
        "perfect_storm": bool(r.perfect_storm),
        "unluck_message": r.unluck_message,
        "rubber_band_applied": bool(r.rubber_band_applied),
        "timestamp": str(r.timestamp),
    }


def step_result_from_dict(d: Mapping[str, Any]) -> StepResult:
    applied = delta_from_mapping(d.get("applied_delta") or {})
    return StepResult(
        step_id=int(d["step_id"]),
        choice=str(d["choice"]),
        original_delta=delta_from_mapping(d.get("original_delta") or d.get("applied_delta") or {}),
        applied_delta=applied,
        meter_before=float(d["meter_before"]),
        meter_after=float(d["meter_after"]),
        tier_before=str(d["tier_before"]),
        tier_after=str(d["tier_after"]),
        insights=[str(x) for x in list(d.get("insights") or [])],
        unluck_applied=bool(d.get("unluck_applied", False)),
        luck_factor=float(d.get("luck_factor", 1.0)),
        perfect_storm=bool(d.get("perfect_storm", False)),
        unluck_message=d.get("unluck_message"),
        rubber_band_applied=bool(d.get("rubber_band_applied", False)),
        timestamp=str(d.get("timestamp", "") or ""),
    )


def run_state_to_dict(run: RunState) -> Dict[str, Any]:
    return {
        "seed": int(run.seed),
        "current_step": int(run.current_step),
        "meter_state": meter_state_to_dict(run.meter_state),
        "step_history": [step_result_to_dict(r) for r in run.step_history],
        "start_time": str(run.start_time),
        "end_time": run.end_time,
        "content_pack_id": str(run.content_pack_id),
        "rng_state": None if run.rng_state is None else int(run.rng_state),
    }


def run_state_from_dict(d: Mapping[str, Any]) -> RunState:
    for key in ("seed", "current_step", "meter_state"):
        if key not in d:
            raise ValueError(f"run state is missing required field: {key}")
    return RunState(
        seed=int(d["seed"]),
        current_step=int(d["current_step"]),
        meter_state=meter_state_from_dict(d["meter_state"]),
        step_history=[step_result_from_dict(x) for x in list(d.get("step_history") or [])],
        start_time=str(d.get("start_time", "") or ""),
        end_time=d.get("end_time"),
        content_pack_id=str(d.get("content_pack_id", "default") or "default"),
        rng_state=None if d.get("rng_state") is None else int(d["rng_state"]),
    )
