"""content.schemas

Contracts for content packs:
- ContentPack: id/version/title + exactly five Steps (ids 1..5)
- Step: scenario text + two Choices (A/B)
- Choice: label/body + the Delta the engine applies

Design choice:
Packs are static data. Validation collects every problem (coded, with a path) instead
of stopping at the first one, so an author sees the whole report at once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from core.state import DIMENSIONS, Delta, delta_from_mapping, delta_to_dict

DELTA_MIN = -10.0
DELTA_MAX = 15.0
LABEL_MAX = 200
BODY_MAX = 1000
STEP_IDS = [1, 2, 3, 4, 5]

_ID_RE = re.compile(r"^[a-z0-9-]+$", re.IGNORECASE)
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


def _as_float(x: Any, default: float = 0.0) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float(default)


@dataclass(frozen=True)
class Choice:
    label: str
    body: str
    delta: Delta

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "body": self.body, "delta": delta_to_dict(self.delta)}


@dataclass(frozen=True)
class Step:
    id: int
    title: str
    scenario: str
    option_a: Choice
    option_b: Choice
    subtitle: str = ""
    assets: List[str] = field(default_factory=list)

    def option(self, choice: str) -> Choice:
        c = str(choice).strip().upper()
        if c == "A":
            return self.option_a
        if c == "B":
            return self.option_b
        raise ValueError(f"Unknown choice: {choice!r} (expected 'A' or 'B')")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": int(self.id),
            "title": self.title,
            "subtitle": self.subtitle,
            "scenario": self.scenario,
            "optionA": self.option_a.to_dict(),
            "optionB": self.option_b.to_dict(),
            "assets": list(self.assets),
        }


@dataclass(frozen=True)
class ContentPack:
    id: str
    version: str
    title: str
    steps: List[Step]
    description: str = ""
    author: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def step(self, step_id: int) -> Step:
        for s in self.steps:
            if int(s.id) == int(step_id):
                return s
        raise ValueError(f"Step {step_id} not found in content pack {self.id!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "steps": [s.to_dict() for s in self.steps],
            "metadata": dict(self.metadata),
        }


# =========================
# Validation
# =========================


@dataclass(frozen=True)
class ValidationError:
    message: str
    path: str
    code: str


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[ValidationError]


def validate_id(pack_id: Any) -> List[ValidationError]:
    if not isinstance(pack_id, str):
        return [ValidationError("ID is required and must be a string", "id", "INVALID_ID")]
    errors: List[ValidationError] = []
    if not pack_id.strip():
        errors.append(ValidationError("ID cannot be empty", "id", "EMPTY_ID"))
    if not _ID_RE.match(pack_id):
        errors.append(ValidationError("ID must contain only alphanumeric characters and hyphens", "id", "INVALID_ID_FORMAT"))
    return errors


def validate_version(version: Any) -> List[ValidationError]:
    if not isinstance(version, str) or not version:
        return [ValidationError("Version is required and must be a string", "version", "INVALID_VERSION")]
    if not _VERSION_RE.match(version):
        return [ValidationError("Version must follow semantic versioning (X.Y.Z)", "version", "INVALID_VERSION_FORMAT")]
    return []


def validate_delta(delta: Any, path: str = "delta") -> List[ValidationError]:
    """Accepts a raw mapping (pre-parse) or a Delta."""
    if isinstance(delta, Delta):
        delta = delta_to_dict(delta)
    if not isinstance(delta, Mapping):
        return [ValidationError("Delta must be an object", path, "INVALID_DELTA")]
    errors: List[ValidationError] = []
    for dim in DIMENSIONS:
        value = delta.get(dim)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(ValidationError(f"Delta.{dim} must be a number", f"{path}.{dim}", "INVALID_DELTA_VALUE"))
            continue
        if value < DELTA_MIN or value > DELTA_MAX:
            errors.append(
                ValidationError(f"Delta.{dim} must be in range [-10, +15] (got {value})", f"{path}.{dim}", "DELTA_OUT_OF_RANGE")
            )
    return errors


def validate_choice(choice: Any, step_id: Any, option_label: str) -> List[ValidationError]:
    base = f"step{step_id}.option{option_label}"
    if not isinstance(choice, Mapping):
        return [ValidationError(f"Option {option_label} must be an object", base, "INVALID_CHOICE")]

    errors: List[ValidationError] = []
    label = choice.get("label")
    if not isinstance(label, str) or not label:
        errors.append(ValidationError("Choice label is required", f"{base}.label", "MISSING_LABEL"))
    elif len(label) > LABEL_MAX:
        errors.append(ValidationError(f"Choice label must be <={LABEL_MAX} characters (got {len(label)})", f"{base}.label", "LABEL_TOO_LONG"))

    body = choice.get("body")
    if not isinstance(body, str) or not body:
        errors.append(ValidationError("Choice body is required", f"{base}.body", "MISSING_BODY"))
    elif len(body) > BODY_MAX:
        errors.append(ValidationError(f"Choice body must be <={BODY_MAX} characters (got {len(body)})", f"{base}.body", "BODY_TOO_LONG"))

    errors.extend(validate_delta(choice.get("delta"), f"{base}.delta"))
    return errors


def validate_step(step: Any) -> List[ValidationError]:
    if not isinstance(step, Mapping):
        return [ValidationError("Step must be an object", "step", "INVALID_STEP")]

    sid = step.get("id")
    base = f"step{sid}"
    errors: List[ValidationError] = []
    if isinstance(sid, bool) or not isinstance(sid, int):
        errors.append(ValidationError("Step ID must be a number", f"{base}.id", "INVALID_STEP_ID"))
    elif sid < 1 or sid > 5:
        errors.append(ValidationError(f"Step ID must be in range [1, 5] (got {sid})", f"{base}.id", "STEP_ID_OUT_OF_RANGE"))

    for key, missing, empty in (("title", "MISSING_TITLE", "EMPTY_TITLE"), ("scenario", "MISSING_SCENARIO", "EMPTY_SCENARIO")):
        value = step.get(key)
        if not isinstance(value, str) or not value:
            errors.append(ValidationError(f"Step {key} is required", f"{base}.{key}", missing))
        elif not value.strip():
            errors.append(ValidationError(f"Step {key} cannot be empty", f"{base}.{key}", empty))

    errors.extend(validate_choice(step.get("optionA"), sid, "A"))
    errors.extend(validate_choice(step.get("optionB"), sid, "B"))
    return errors


def validate_content_pack(data: Any) -> ValidationResult:
    """Validate a raw (JSON-shaped) pack mapping."""
    if isinstance(data, ContentPack):
        data = data.to_dict()
    if not isinstance(data, Mapping):
        return ValidationResult(False, [ValidationError("Content pack must be an object", "root", "INVALID_PACK")])

    errors: List[ValidationError] = []
    errors.extend(validate_id(data.get("id")))
    errors.extend(validate_version(data.get("version")))

    title = data.get("title")
    if not isinstance(title, str) or not title:
        errors.append(ValidationError("Title is required", "title", "MISSING_TITLE"))
    elif not title.strip():
        errors.append(ValidationError("Title cannot be empty", "title", "EMPTY_TITLE"))

    steps = data.get("steps")
    if not isinstance(steps, list):
        errors.append(ValidationError("Steps must be an array", "steps", "INVALID_STEPS"))
        return ValidationResult(False, errors)

    if len(steps) != 5:
        errors.append(ValidationError(f"Pack must have exactly 5 steps (got {len(steps)})", "steps", "WRONG_STEP_COUNT"))

    for s in steps:
        errors.extend(validate_step(s))

    ids = sorted(s.get("id") for s in steps if isinstance(s, Mapping) and isinstance(s.get("id"), int))
    if ids != STEP_IDS:
        errors.append(
            ValidationError(
                f"Step IDs must be sequential [1, 2, 3, 4, 5] (got {ids})", "steps", "NON_SEQUENTIAL_STEPS"
            )
        )

    return ValidationResult(valid=not errors, errors=errors)


def format_validation_errors(result: ValidationResult) -> str:
    if result.valid:
        return "Content pack is valid"
    lines = ["Content pack validation failed:", ""]
    for e in result.errors:
        lines.append(f"  [{e.code}] {e.path}: {e.message}")
    return "\n".join(lines)


# =========================
# Parsing
# =========================


def _parse_choice(obj: Mapping[str, Any]) -> Choice:
    raw_delta = obj.get("delta") or {}
    return Choice(
        label=str(obj.get("label", "") or "").strip(),
        body=str(obj.get("body", "") or "").strip(),
        delta=delta_from_mapping({k: _as_float(raw_delta.get(k)) for k in DIMENSIONS}),
    )


def _parse_step(obj: Mapping[str, Any]) -> Step:
    return Step(
        id=int(obj["id"]),
        title=str(obj.get("title", "") or "").strip(),
        subtitle=str(obj.get("subtitle", "") or "").strip(),
        scenario=str(obj.get("scenario", "") or "").strip(),
        option_a=_parse_choice(obj.get("optionA") or {}),
        option_b=_parse_choice(obj.get("optionB") or {}),
        assets=[str(a) for a in list(obj.get("assets") or [])],
    )


def pack_from_dict(data: Mapping[str, Any], *, validate: bool = True) -> ContentPack:
    """Build a ContentPack from JSON-shaped data.

    Raises ValueError with the formatted report when validation fails.
    """
    if validate:
        result = validate_content_pack(data)
        if not result.valid:
            raise ValueError(format_validation_errors(result))

    metadata: Optional[Mapping[str, Any]] = data.get("metadata")
    steps = sorted((_parse_step(s) for s in list(data.get("steps") or [])), key=lambda s: s.id)
    return ContentPack(
        id=str(data.get("id", "")),
        version=str(data.get("version", "")),
        title=str(data.get("title", "")).strip(),
        description=str(data.get("description", "") or "").strip(),
        author=str(data.get("author", "") or "").strip(),
        steps=steps,
        metadata=dict(metadata or {}),
    )
