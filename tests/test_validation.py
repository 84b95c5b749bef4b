"""Tests for template validation."""

from __future__ import annotations

from typing import Any

import pytest

from mailforge.schemas import GlobalApiVariable, Section, ValidationIssue
from mailforge.validation import (
    format_validation_errors,
    has_blocking_errors,
    section_display_name,
    validate,
    validate_name,
    validate_section,
    validate_subject,
)


def _section(section_id: str, kind: str, content: str = "", **variables: Any) -> Section:
    return Section.model_validate({"id": section_id, "type": kind, "content": content, "variables": variables})


def _container(section_id: str, *children: Section) -> Section:
    return Section(id=section_id, kind="container", children=list(children))


class TestValidateName:
    """Tests for validate_name."""

    @pytest.mark.parametrize(
        ("name", "message"),
        [
            ("", "Template name is required"),
            ("  ", "Template name is required"),
            ("ab", "Template name must be at least 3 characters"),
            ("x" * 101, "Template name must be less than 100 characters"),
            ("Bad/Name", "Template name contains invalid characters"),
        ],
    )
    def test_invalid_names(self, name: str, message: str) -> None:
        issue = validate_name(name)
        assert issue is not None
        assert issue.message == message
        assert issue.field == "templateName"

    def test_valid_name(self) -> None:
        assert validate_name("Weekly Report (v2.1) - EU") is None


class TestValidateSubject:
    """Tests for validate_subject."""

    @pytest.mark.parametrize(
        ("subject", "message"),
        [
            ("", "Email subject is required"),
            ("x" * 201, "Subject must be less than 200 characters"),
            ("Hello {{name", "Subject has unclosed placeholder brackets"),
            ("Hello {{ }}", "Subject has empty placeholder brackets"),
        ],
    )
    def test_invalid_subjects(self, subject: str, message: str) -> None:
        issue = validate_subject(subject)
        assert issue is not None
        assert issue.message == message
        assert issue.field == "templateSubject"

    def test_valid_subject(self) -> None:
        assert validate_subject("Status for {{projectName}}") is None


class TestValidate:
    """Tests for validate over a whole tree."""

    def test_unbound_placeholder_is_one_binding_error(self) -> None:
        issues = validate("Report", "Subject", [_section("s1", "text", "<p>Hi {{x}}</p>")])

        assert len(issues) == 1
        (issue,) = issues
        assert issue.category == "binding"
        assert issue.severity == "error"
        assert issue.section_id == "s1"
        assert '"{{x}}"' in issue.message

    def test_global_variable_satisfies_binding(self) -> None:
        issues = validate(
            "Report",
            "Subject",
            [_section("s1", "text", "{{acct.name}}")],
            global_variables={"acct": GlobalApiVariable(name="acct", data={"name": "Acme"})},
        )
        assert issues == []

    def test_single_use_kinds_counted_through_containers(self) -> None:
        sections = [
            _section("b1", "banner", "<div>One</div>"),
            _container("c1", _section("b2", "banner", "<div>Two</div>")),
        ]
        issues = validate("Report", "Subject", sections)
        messages = [issue.message for issue in issues if issue.section_id is None]
        assert messages == ["Only one Banner section is allowed per template (found 2)"]

    def test_requires_a_content_section(self) -> None:
        issues = validate("Report", "Subject", [_section("header", "header", "<div>Logo</div>")])
        assert [issue.message for issue in issues] == ["Template must have at least one content section"]

    def test_general_issues_come_first(self) -> None:
        issues = validate("", "", [_section("s1", "heading1")])
        assert [issue.field for issue in issues] == ["templateName", "templateSubject", "sectionContent"]
        assert issues[-1].section_id == "s1"

    def test_too_deep_sections_are_reported(self) -> None:
        tree = [_container("c0", _container("c1", _section("leaf", "text", "deep")))]
        issues = validate("Report", "Subject", tree, max_depth=1)
        deep = [issue for issue in issues if "deeper than 1 levels" in issue.message]
        assert [issue.section_id for issue in deep] == ["c1"]


class TestValidateSection:
    """Tests for validate_section."""

    def test_missing_content(self) -> None:
        (issue,) = validate_section(_section("h", "heading2", "   "))
        assert issue.message == '"Heading 2" section has no content'
        assert issue.category == "structural"

    def test_unbound_table_cell_placeholder(self) -> None:
        section = _section("t1", "table", tableData={"rows": [["Amount"], ["{{amount}} {{unit}}"]]}, amount="42")
        (issue,) = validate_section(section)
        assert issue.category == "binding"
        assert issue.field == "tableData"
        assert '"{{unit}}"' in issue.message

    def test_frame_sections_skip_binding_checks(self) -> None:
        assert validate_section(_section("footer", "footer", "Sent by {{senderName}}")) == []

    def test_empty_defaults_are_warnings(self) -> None:
        section = _section("s1", "text", "{{a}} {{b}}", a="", b=[], label="", contentType=None)
        issues = validate_section(section)
        assert [issue.severity for issue in issues] == ["warning", "warning"]
        assert [issue.category for issue in issues] == ["defaulting", "defaulting"]
        assert 'Variable "a" has no default value' in issues[0].message
        assert 'Variable "b" list is empty' in issues[1].message
        assert not has_blocking_errors(issues)

    def test_table_checks(self) -> None:
        (malformed,) = validate_section(_section("t1", "table", tableData={"rows": "x"}))
        assert malformed.message == '"Table" has malformed table data'
        (empty,) = validate_section(_section("t2", "table"))
        assert empty.message == '"Table" has no data rows'

    def test_empty_list_section(self) -> None:
        issues = validate_section(_section("l1", "bullet-list-disc", items=[]))
        assert [issue.message for issue in issues if issue.category == "structural"] == [
            '"Bullet List (Disc)" has no items'
        ]

    def test_labeled_list_needs_valid_variable_name(self) -> None:
        missing = validate_section(_section("l1", "labeled-content", label="Todo", contentType="list"))
        assert [issue.message for issue in missing] == [
            '"Labeled Content: "Todo"" list section is missing a variable name'
        ]

        invalid = validate_section(
            _section("l2", "labeled-content", label="Todo", contentType="list", listVariableName="my-items")
        )
        assert len(invalid) == 1
        assert 'invalid list variable name "my-items"' in invalid[0].message

        valid = validate_section(
            _section("l3", "labeled-content", label="Todo", contentType="list", listVariableName="my_items")
        )
        assert valid == []


class TestDisplayAndFormatting:
    """Tests for display names and issue summaries."""

    def test_display_name_uses_text_preview(self) -> None:
        section = _section("s1", "paragraph", "<p>Dear {{name}}, welcome to the quarterly review</p>")
        assert section_display_name(section) == 'Paragraph: "Dear ..., welcome to the ..."'

    def test_display_name_prefers_label(self) -> None:
        assert section_display_name(_section("s1", "labeled-content", label="Owner")) == 'Labeled Content: "Owner"'

    def test_format_validation_errors(self) -> None:
        issues = [
            ValidationIssue(message="Template name is required", field="templateName"),
            ValidationIssue(message="bad table", field="sectionContent", section_id="t1", section_type="table"),
            ValidationIssue(message="bad list", field="sectionContent", section_id="l1", section_type="bullet-list-disc"),
        ]
        assert format_validation_errors(issues) == (
            "• Template name is required\n"
            "Section: table:\n"
            "  • bad table\n"
            "Section: bullet-list-disc:\n"
            "  • bad list"
        )
