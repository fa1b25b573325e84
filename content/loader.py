"""content.loader

Where packs come from: the built-in default, or a JSON file on local disk.

Packs are passed around explicitly by callers (no process-wide pack manager).
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from .default_pack import DEFAULT_PACK_DATA
from .parsing import must_parse_json
from .schemas import ContentPack, pack_from_dict


def default_content_pack() -> ContentPack:
    return pack_from_dict(DEFAULT_PACK_DATA)


def load_pack_text(text: str) -> ContentPack:
    """Parse + validate. Raises ValueError with a readable report on any problem."""
    return pack_from_dict(must_parse_json(text))


def load_pack_file(path: Union[str, Path]) -> ContentPack:
    p = Path(path)
    return load_pack_text(p.read_text(encoding="utf-8"))
