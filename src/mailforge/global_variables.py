"""Resolution of externally fetched global variables inside template text."""

from __future__ import annotations

import re
from typing import Any, Mapping

from mailforge.placeholders import Placeholder, substitute_placeholders
from mailforge.schemas import GlobalApiVariable
from mailforge.values import get_nested_value, stringify, to_json

GlobalVariables = Mapping[str, GlobalApiVariable]


def _serialize(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return to_json(value)
    return stringify(value)


def lookup_global(placeholder: Placeholder, global_variables: GlobalVariables) -> str | None:
    """Resolved text for ``placeholder``, or ``None`` to leave it untouched."""
    variable = global_variables.get(placeholder.name)
    if variable is None or variable.data is None:
        return None
    if not placeholder.path:
        return _serialize(variable.data)
    value = get_nested_value(variable.data, placeholder.path)
    if value is None:
        return None
    return _serialize(value)


def resolve_global_variables(text: str | None, global_variables: GlobalVariables | None) -> str:
    """Replace placeholders whose name is a known global variable.

    ``{{acct.name}}`` becomes the nested value, ``{{acct}}`` the whole value
    serialized as compact JSON. Names that are not global variables, null
    data and paths that resolve to nothing are left as written.

    >>> acct = GlobalApiVariable(name="acct", data={"name": "Acme", "id": 7})
    >>> resolve_global_variables("{{acct.name}}", {"acct": acct})
    'Acme'
    """
    if not text or not global_variables:
        return text or ""
    return substitute_placeholders(text, lambda placeholder: lookup_global(placeholder, global_variables))


def detect_schema(data: Any) -> dict[str, str]:
    """Flattened ``path -> type`` map taken from the first element (or the object itself).

    Arrays of objects are described under ``path[]``.
    """
    sample = data[0] if isinstance(data, list) and data else data
    if not isinstance(sample, dict):
        return {}

    schema: dict[str, str] = {}

    def _walk(obj: dict[str, Any], prefix: str) -> None:
        for key, value in obj.items():
            path = f"{prefix}.{key}" if prefix else key
            if value is None:
                schema[path] = "null"
            elif isinstance(value, list):
                schema[path] = "array"
                if value and isinstance(value[0], dict):
                    _walk(value[0], f"{path}[]")
            elif isinstance(value, dict):
                _walk(value, path)
            else:
                schema[path] = _type_name(value)

    _walk(sample, "")
    return schema


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def get_field_paths(global_variables: GlobalVariables) -> list[dict[str, Any]]:
    """Every addressable ``name.field`` path with its value and type, for autocomplete."""
    paths: list[dict[str, Any]] = []
    for name, variable in global_variables.items():
        data = variable.data
        if data is None or data == "" or data == 0 or data is False:
            continue
        if isinstance(data, dict):
            _collect_paths(data, name, paths)
        else:
            paths.append({"path": name, "value": data, "type": _type_name(data)})
    return paths


def _collect_paths(obj: dict[str, Any], prefix: str, paths: list[dict[str, Any]]) -> None:
    for key, value in obj.items():
        full_path = f"{prefix}.{key}"
        if isinstance(value, dict):
            _collect_paths(value, full_path, paths)
        else:
            paths.append({"path": full_path, "value": value, "type": _type_name(value)})


def sanitize_variable_name(name: str) -> str:
    """Turn free text into a usable variable name (``"Jira Issues"`` -> ``"jira_issues"``)."""
    cleaned = re.sub(r"[^a-zA-Z0-9_\s-]", "", name)
    cleaned = re.sub(r"[\s-]+", "_", cleaned)
    cleaned = re.sub(r"^[0-9]", lambda match: f"_{match.group(0)}", cleaned)
    return cleaned.lower()
