"""Template validation: structural rules and placeholder binding checks."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Mapping

try:
    from bs4 import BeautifulSoup
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML parsing (pip install beautifulsoup4)."
    ) from exc

from mailforge.config import MAILFORGE_MAX_NESTING_DEPTH
from mailforge.placeholders import AUTHOR_RE, extract_placeholder_names, is_valid_identifier
from mailforge.schemas import GlobalApiVariable, Section, SectionKind, ValidationIssue
from mailforge.schemas.sections import (
    CONTENT_REQUIRED_KINDS,
    FRAME_KINDS,
    LIST_KINDS,
    SINGLE_USE_KINDS,
    parse_table_data,
)
from mailforge.tables import table_placeholder_names
from mailforge.tree import count_kinds, too_deep_sections, walk_sections

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
SUBJECT_MAX_LENGTH = 200
_VALID_NAME_RE = re.compile(r"^[\w\s\-.()]+$")
_EMPTY_PLACEHOLDER_RE = re.compile(r"\{\{\s*\}\}")
_PREVIEW_LENGTH = 25

# Variables that never need a default value.
_UNCHECKED_VARIABLES = frozenset({"label", "contentType", "listStyle"})

SECTION_TYPE_NAMES: dict[SectionKind, str] = {
    SectionKind.HEADING1: "Heading 1",
    SectionKind.HEADING2: "Heading 2",
    SectionKind.HEADING3: "Heading 3",
    SectionKind.HEADING4: "Heading 4",
    SectionKind.HEADING5: "Heading 5",
    SectionKind.HEADING6: "Heading 6",
    SectionKind.TEXT: "Text",
    SectionKind.PARAGRAPH: "Paragraph",
    SectionKind.TABLE: "Table",
    SectionKind.BULLET_LIST_CIRCLE: "Bullet List (Circle)",
    SectionKind.BULLET_LIST_DISC: "Bullet List (Disc)",
    SectionKind.BULLET_LIST_SQUARE: "Bullet List (Square)",
    SectionKind.NUMBER_LIST_1: "Numbered List",
    SectionKind.NUMBER_LIST_I: "Roman Numeral List",
    SectionKind.NUMBER_LIST_A: "Alphabetic List",
    SectionKind.IMAGE: "Image",
    SectionKind.LINK: "Link",
    SectionKind.BUTTON: "Button",
    SectionKind.CONTAINER: "Container",
    SectionKind.LAYOUT_TABLE: "Layout Table",
    SectionKind.LABELED_CONTENT: "Labeled Content",
    SectionKind.MIXED_CONTENT: "Mixed Content",
    SectionKind.STATIC_TEXT: "Static Text",
    SectionKind.PROGRAM_NAME: "Program Name",
    SectionKind.BANNER: "Banner",
}


def validate(
    name: str,
    subject: str,
    sections: Iterable[Section],
    *,
    global_variables: Mapping[str, GlobalApiVariable] | None = None,
    max_depth: int = MAILFORGE_MAX_NESTING_DEPTH,
) -> list[ValidationIssue]:
    """Validate a template, returning every issue found.

    General issues come first, then per-section issues in tree order. The
    function never raises; callers decide whether to block on errors.
    """
    roots = list(sections)
    known_globals = frozenset(global_variables or {})

    issues: list[ValidationIssue] = []
    name_issue = validate_name(name)
    if name_issue is not None:
        issues.append(name_issue)
    subject_issue = validate_subject(subject)
    if subject_issue is not None:
        issues.append(subject_issue)
    issues.extend(_validate_tree(roots, max_depth))

    for section, _depth in walk_sections(roots, max_depth=max_depth):
        issues.extend(validate_section(section, known_globals=known_globals))
    return issues


def validate_name(name: str | None) -> ValidationIssue | None:
    trimmed = (name or "").strip()
    message = None
    if not trimmed:
        message = "Template name is required"
    elif len(trimmed) < NAME_MIN_LENGTH:
        message = f"Template name must be at least {NAME_MIN_LENGTH} characters"
    elif len(trimmed) > NAME_MAX_LENGTH:
        message = f"Template name must be less than {NAME_MAX_LENGTH} characters"
    elif not _VALID_NAME_RE.match(trimmed):
        message = "Template name contains invalid characters"
    if message is None:
        return None
    return ValidationIssue(message=message, field="templateName")


def validate_subject(subject: str | None) -> ValidationIssue | None:
    subject = subject or ""
    message = None
    if not subject.strip():
        message = "Email subject is required"
    elif len(subject) > SUBJECT_MAX_LENGTH:
        message = f"Subject must be less than {SUBJECT_MAX_LENGTH} characters"
    elif subject.count("{{") != subject.count("}}"):
        message = "Subject has unclosed placeholder brackets"
    elif _EMPTY_PLACEHOLDER_RE.search(subject):
        message = "Subject has empty placeholder brackets"
    if message is None:
        return None
    return ValidationIssue(message=message, field="templateSubject")


def _validate_tree(roots: list[Section], max_depth: int) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not any(section.kind not in FRAME_KINDS for section in roots):
        issues.append(
            ValidationIssue(message="Template must have at least one content section", field="sections")
        )

    counts: Counter[SectionKind] = count_kinds(roots, max_depth=max_depth)
    for kind in SINGLE_USE_KINDS:
        if counts[kind] > 1:
            issues.append(
                ValidationIssue(
                    message=(
                        f"Only one {SECTION_TYPE_NAMES[kind]} section is allowed per template "
                        f"(found {counts[kind]})"
                    ),
                    field="sections",
                )
            )

    for section in too_deep_sections(roots, max_depth=max_depth):
        issues.append(
            ValidationIssue(
                message=(
                    f'"{section_display_name(section)}" nests sections deeper than '
                    f"{max_depth} levels; deeper content is ignored"
                ),
                field="sections",
                section_id=section.id,
                section_type=section.kind.value,
            )
        )
    return issues


def validate_section(
    section: Section, *, known_globals: frozenset[str] = frozenset()
) -> list[ValidationIssue]:
    """Issues for one section, nested sections excluded."""
    display_name = section_display_name(section)
    issues: list[ValidationIssue] = []

    def _issue(message: str, field: str, category: str, severity: str = "error") -> None:
        issues.append(
            ValidationIssue(
                message=message,
                field=field,
                category=category,
                severity=severity,
                section_id=section.id,
                section_type=section.kind.value,
            )
        )

    if section.kind in CONTENT_REQUIRED_KINDS and not section.content.strip():
        _issue(f'"{display_name}" section has no content', "sectionContent", "structural")

    if section.kind not in FRAME_KINDS:
        referenced = [(name, "sectionContent") for name in extract_placeholder_names(section.content)]
        if section.kind is SectionKind.TABLE:
            referenced += [
                (name, "tableData") for name in table_placeholder_names(section.variables.get("tableData"))
            ]
        for placeholder, field in referenced:
            if placeholder in section.variables or placeholder in known_globals:
                continue
            _issue(
                f'In "{display_name}": Placeholder "{{{{{placeholder}}}}}" is used but not defined as a variable',
                field,
                "binding",
            )

        for variable_name, value in section.variables.items():
            if variable_name in _UNCHECKED_VARIABLES:
                continue
            if value is None or value == "":
                _issue(
                    f'In "{display_name}": Variable "{variable_name}" has no default value',
                    "sectionVariable",
                    "defaulting",
                    "warning",
                )
            elif isinstance(value, list) and not value:
                _issue(
                    f'In "{display_name}": Variable "{variable_name}" list is empty',
                    "sectionVariable",
                    "defaulting",
                    "warning",
                )

    if section.kind is SectionKind.TABLE:
        raw_table = section.variables.get("tableData")
        table = parse_table_data(raw_table)
        if raw_table is not None and table is None:
            _issue(f'"{display_name}" has malformed table data', "sectionContent", "structural")
        elif table is None or not table.grid:
            _issue(f'"{display_name}" has no data rows', "sectionContent", "structural")

    if section.kind in LIST_KINDS:
        items = section.variables.get("items")
        if isinstance(items, list) and not items:
            _issue(f'"{display_name}" has no items', "sectionContent", "structural")

    if section.kind is SectionKind.LABELED_CONTENT and section.content_type == "list":
        list_name = section.variables.get("listVariableName")
        if not list_name:
            _issue(
                f'"{display_name}" list section is missing a variable name',
                "sectionVariable",
                "structural",
            )
        elif not isinstance(list_name, str) or not is_valid_identifier(list_name):
            _issue(
                f'"{display_name}" has invalid list variable name "{list_name}". '
                "Must contain only letters, numbers, and underscores.",
                "sectionVariable",
                "structural",
            )
    return issues


def section_display_name(section: Section) -> str:
    """``Type: "text preview"`` label used to point authors at a section."""
    type_name = SECTION_TYPE_NAMES.get(section.kind, section.kind.value)
    preview = ""
    if section.content:
        text = BeautifulSoup(section.content, "lxml").get_text()
        text = AUTHOR_RE.sub("...", text).strip()
        if text:
            preview = text[:_PREVIEW_LENGTH] + ("..." if len(text) > _PREVIEW_LENGTH else "")
    if section.label:
        preview = section.label[:_PREVIEW_LENGTH]
    return f'{type_name}: "{preview}"' if preview else type_name


def has_blocking_errors(issues: Iterable[ValidationIssue]) -> bool:
    """True when any issue should prevent saving the template."""
    return any(issue.severity == "error" for issue in issues)


def format_validation_errors(issues: Iterable[ValidationIssue]) -> str:
    """Bulleted summary: general issues first, then one group per section type."""
    grouped: dict[str, list[ValidationIssue]] = {}
    for issue in issues:
        key = f"Section: {issue.section_type}" if issue.section_id else "General"
        grouped.setdefault(key, []).append(issue)

    lines: list[str] = []
    for issue in grouped.pop("General", []):
        lines.append(f"• {issue.message}")
    for group, group_issues in grouped.items():
        lines.append(f"{group}:")
        lines.extend(f"  • {issue.message}" for issue in group_issues)
    return "\n".join(lines)
