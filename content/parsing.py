"""content.parsing

Forgiving JSON parsing for hand-edited files (content packs, exported runs).

We only clean up what editors and copy/paste commonly introduce:
- byte order mark
- smart double quotes and non-breaking spaces
- trailing commas before } or ]
- whole-line // comments
then json.loads. Anything else is reported, not guessed.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ParseResult:
    data: Optional[Dict[str, Any]]
    raw: str
    cleaned: str
    error: str = ""


_LINE_COMMENT_RE = re.compile(r"^\s*//.*$", re.MULTILINE)


def strip_bom(s: str) -> str:
    return (s or "").lstrip("\ufeff")


def normalize_smart_quotes(s: str) -> str:
    return (
        (s or "")
        .replace("\u201c", '"')
        .replace("\u201d", '"')
        .replace("\u00a0", " ")
    )


def remove_line_comments(s: str) -> str:
    return _LINE_COMMENT_RE.sub("", s or "")


def remove_trailing_commas(s: str) -> str:
    return re.sub(r",\s*([}\]])", r"\1", s)


def try_parse_json(raw: str) -> ParseResult:
    """Best-effort parse. Returns ParseResult(data=None, error=...) on failure."""
    raw = raw or ""
    s = strip_bom(raw).strip()

    # strict first: a valid file must never be rewritten
    try:
        obj = json.loads(s)
    except json.JSONDecodeError:
        s = remove_trailing_commas(remove_line_comments(normalize_smart_quotes(s)))
        try:
            obj = json.loads(s)
        except json.JSONDecodeError as e:
            return ParseResult(data=None, raw=raw, cleaned=s, error=f"json.loads: {e}")

    if not isinstance(obj, dict):
        return ParseResult(data=None, raw=raw, cleaned=s, error="JSON root is not an object")
    return ParseResult(data=obj, raw=raw, cleaned=s)


def must_parse_json(raw: str) -> Dict[str, Any]:
    res = try_parse_json(raw)
    if res.data is None:
        raise ValueError(res.error or "JSON parse failed")
    return res.data
