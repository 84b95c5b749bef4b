"""Tests for global variable resolution and schema helpers."""

from __future__ import annotations

import pytest

from mailforge.global_variables import (
    detect_schema,
    get_field_paths,
    resolve_global_variables,
    sanitize_variable_name,
)
from mailforge.schemas import GlobalApiVariable


@pytest.fixture
def acct() -> dict[str, GlobalApiVariable]:
    return {"acct": GlobalApiVariable(name="acct", data={"name": "Acme", "id": 7})}


class TestResolveGlobalVariables:
    """Tests for resolve_global_variables."""

    def test_nested_field(self, acct: dict[str, GlobalApiVariable]) -> None:
        assert resolve_global_variables("{{acct.name}}", acct) == "Acme"

    def test_whole_value_is_compact_json(self, acct: dict[str, GlobalApiVariable]) -> None:
        assert resolve_global_variables("{{acct}}", acct) == '{"name":"Acme","id":7}'

    def test_unknown_name_is_unchanged(self) -> None:
        assert resolve_global_variables("{{missing.x}}", {}) == "{{missing.x}}"

    def test_unresolvable_path_is_unchanged(self, acct: dict[str, GlobalApiVariable]) -> None:
        assert resolve_global_variables("{{acct.owner.name}} {{other}}", acct) == "{{acct.owner.name}} {{other}}"

    def test_directive_form_is_resolved(self, acct: dict[str, GlobalApiVariable]) -> None:
        assert resolve_global_variables('<span th:utext="${acct.id}"/>', acct) == "7"

    def test_null_data_is_unchanged(self) -> None:
        variables = {"acct": GlobalApiVariable(name="acct")}
        assert resolve_global_variables("{{acct.name}}", variables) == "{{acct.name}}"

    def test_array_index_and_nested_list(self) -> None:
        variables = {
            "issues": GlobalApiVariable(
                name="issues", data_type="list", data=[{"key": "OPS-1", "labels": ["p1", "infra"]}]
            )
        }
        text = "{{issues.0.key}}: {{issues.0.labels}}"
        assert resolve_global_variables(text, variables) == 'OPS-1: ["p1","infra"]'


class TestSchemaHelpers:
    """Tests for detect_schema, get_field_paths and sanitize_variable_name."""

    def test_detect_schema_from_first_element(self) -> None:
        data = [
            {"key": "A-1", "points": 3, "done": False, "owner": {"name": "Ada"}, "tags": [{"id": 1}], "due": None},
            {"other": "ignored"},
        ]
        assert detect_schema(data) == {
            "key": "string",
            "points": "number",
            "done": "boolean",
            "owner.name": "string",
            "tags": "array",
            "tags[].id": "number",
            "due": "null",
        }

    def test_detect_schema_of_scalars(self) -> None:
        assert detect_schema(["a", "b"]) == {}
        assert detect_schema([]) == {}

    def test_get_field_paths(self, acct: dict[str, GlobalApiVariable]) -> None:
        acct["count"] = GlobalApiVariable(name="count", data=3)
        acct["empty"] = GlobalApiVariable(name="empty", data="")
        assert get_field_paths(acct) == [
            {"path": "acct.name", "value": "Acme", "type": "string"},
            {"path": "acct.id", "value": 7, "type": "number"},
            {"path": "count", "value": 3, "type": "number"},
        ]

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Jira Issues", "jira_issues"),
            ("open-bugs (EU)", "open_bugs_eu"),
            ("2024 Sales", "_2024_sales"),
        ],
    )
    def test_sanitize_variable_name(self, raw: str, expected: str) -> None:
        assert sanitize_variable_name(raw) == expected
