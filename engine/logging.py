"""engine.logging

Small helpers for storing run logs.

A run log is JSON-serializable so it can be exported/imported later and resumed:
it carries the full RunState (including the PRNG state) plus the config it was
played with.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from core.config import MeterConfig, config_from_dict, config_to_dict
from core.state import RunState, run_state_from_dict, run_state_to_dict

from content.parsing import must_parse_json

EXPORT_VERSION = 2


def make_run_export(*, run: RunState, config: MeterConfig, pack_version: str = "") -> Dict[str, Any]:
    return {
        "version": EXPORT_VERSION,
        "seed": int(run.seed),
        "pack_version": str(pack_version),
        "config": config_to_dict(config),
        "run": run_state_to_dict(run),
    }


def dumps_run_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)


def loads_run_export(text: str) -> Tuple[RunState, Optional[MeterConfig]]:
    """Parse an exported run. Raises ValueError on malformed or unsupported files.

    Version 1 files (no PRNG state) still load; the pipeline replays them from the seed.
    """
    data = must_parse_json(text)
    version = int(data.get("version", 0) or 0)
    if version not in (1, EXPORT_VERSION):
        raise ValueError(f"Unsupported run export version: {version}")

    run_data = data.get("run")
    if not isinstance(run_data, dict):
        raise ValueError("Run export has no 'run' object")

    cfg_data = data.get("config")
    config = config_from_dict(cfg_data) if isinstance(cfg_data, dict) else None
    return run_state_from_dict(run_data), config
