"""Filter, sort, limit and select/rename over fetched collections."""

from __future__ import annotations

import math
import re
from typing import Any

from mailforge.schemas import DataTransformation, FilterCondition
from mailforge.values import get_nested_value, stringify, to_number

_DIGIT_RUN_RE = re.compile(r"(\d+)")


def _as_text(value: Any) -> str:
    return stringify(value).lower()


def matches_filter(item: Any, condition: FilterCondition) -> bool:
    value = get_nested_value(item, condition.field)
    expected = condition.value
    operator = condition.operator

    if operator == "equals":
        return _as_text(value) == expected.lower()
    if operator == "not_equals":
        return _as_text(value) != expected.lower()
    if operator == "contains":
        return expected.lower() in _as_text(value)
    if operator == "not_contains":
        return expected.lower() not in _as_text(value)
    if operator in ("greater_than", "less_than"):
        left, right = to_number(value), to_number(expected)
        if math.isnan(left) or math.isnan(right):
            return False
        return left > right if operator == "greater_than" else left < right
    if operator == "is_empty":
        return value is None or value == ""
    if operator == "is_not_empty":
        return value is not None and value != ""
    return True


def natural_key(value: Any) -> tuple[tuple[int, Any], ...]:
    """Case-insensitive sort key comparing digit runs numerically."""
    parts = _DIGIT_RUN_RE.split(stringify(value).casefold())
    return tuple((0, int(part)) if part.isdigit() else (1, part) for part in parts if part != "")


def apply_transformation(data: Any, transformation: DataTransformation | None) -> Any:
    """Run filter -> sort -> limit -> select/rename over an array payload.

    Anything that is not a list, or a missing transformation, passes through
    unchanged. The input is never mutated.
    """
    if transformation is None or not isinstance(data, list):
        return data

    result = list(data)

    if transformation.filters:
        combine = all if transformation.filter_logic == "and" else any
        result = [
            item
            for item in result
            if combine(matches_filter(item, condition) for condition in transformation.filters)
        ]

    if transformation.sort_field:
        sort_field = transformation.sort_field
        result.sort(
            key=lambda item: natural_key(get_nested_value(item, sort_field)),
            reverse=transformation.sort_order == "desc",
        )

    if transformation.limit and transformation.limit > 0:
        result = result[: transformation.limit]

    if transformation.select_fields or transformation.field_mappings:
        renames = {
            mapping.source_field: mapping.target_field
            for mapping in transformation.field_mappings
            if mapping.enabled
        }
        result = [_select(item, transformation.select_fields, renames) for item in result]

    return result


def _select(item: Any, select_fields: list[str], renames: dict[str, str]) -> Any:
    if not isinstance(item, dict):
        return item
    fields = select_fields or list(item)
    selected: dict[str, Any] = {}
    for field in fields:
        value = get_nested_value(item, field)
        if value is None and field not in item:
            continue
        selected[renames.get(field) or field] = value
    return selected
