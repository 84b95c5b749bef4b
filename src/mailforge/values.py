"""Dot-path lookup and value stringification shared by the pipeline stages."""

from __future__ import annotations

import json
import math
from typing import Any, Iterable


def get_nested_value(obj: Any, path: str | Iterable[str], default: Any = None) -> Any:
    """Walk ``path`` one segment at a time, returning ``default`` on any dead end.

    Segments index mappings by key and sequences by integer position. A
    ``None`` intermediate short-circuits to ``default``.
    """
    segments = path.split(".") if isinstance(path, str) else list(path)
    current = obj
    for segment in segments:
        if current is None:
            return default
        if isinstance(current, dict):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return default
            current = current[index]
        else:
            return default
    return current


def to_json(value: Any) -> str:
    """Compact JSON, matching what the editor front end stores."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def stringify(value: Any) -> str:
    """Render a scalar the way the editor displays it.

    Objects and arrays become compact JSON; booleans are lower-case and
    integral floats drop their fractional part.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (dict, list)):
        return to_json(value)
    return str(value)


def to_number(value: Any) -> float:
    """Coerce a value to a number, ``nan`` when it has no numeric reading."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan
