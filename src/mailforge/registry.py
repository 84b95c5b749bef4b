"""Variable Registry Builder: one scan over subject and tree, deduplicated by name."""

from __future__ import annotations

from typing import Iterable

from mailforge.placeholders import create_label, extract_placeholder_names
from mailforge.schemas import Section, SectionKind, TemplateVariable
from mailforge.schemas.sections import LIST_KINDS, METADATA_VARIABLE_KEYS
from mailforge.schemas.variables import SOURCE_ORDER, VariableSource, VariableType
from mailforge.tables import table_placeholder_names
from mailforge.tree import walk_sections
from mailforge.values import stringify, to_json

# Name fragments checked in priority order; the first hit decides the type.
_NAME_TYPE_HINTS: tuple[tuple[tuple[str, ...], VariableType], ...] = (
    (("email",), "email"),
    (("date", "year"), "date"),
    (("url", "link"), "url"),
    (("count", "number", "amount"), "number"),
)

# Kinds whose text lives in ``variables.label`` / ``variables.content``.
_TEXT_VARIABLE_KINDS = frozenset(
    {SectionKind.LABELED_CONTENT, SectionKind.MIXED_CONTENT, SectionKind.STATIC_TEXT}
)


def infer_variable_type(name: str, section: Section | None = None) -> VariableType:
    """Guess a variable's type from its section and name."""
    if section is not None and section.kind is SectionKind.LABELED_CONTENT:
        if section.content_type == "list":
            return "list"
        if section.content_type == "table":
            return "table"

    lower = name.lower()
    for fragments, variable_type in _NAME_TYPE_HINTS:
        if any(fragment in lower for fragment in fragments):
            return variable_type
    return "text"


def default_value_for(name: str, section: Section | None) -> str | None:
    """The section's own value for ``name``, serialized; ``None`` when unset."""
    if section is None or name not in section.variables:
        return None
    value = section.variables[name]
    if value is None:
        return None
    return stringify(value)


def extract_subject_variables(subject: str) -> list[TemplateVariable]:
    """Subject variables are always required, typed as text and have no default."""
    return [
        TemplateVariable(
            name=name,
            label=create_label(name),
            type="text",
            default_value=None,
            is_required=True,
            source="subject",
        )
        for name in extract_placeholder_names(subject)
    ]


def extract_section_variables(
    section: Section, source: VariableSource = "section"
) -> list[TemplateVariable]:
    """Variables referenced or defined by a single section (nested sections excluded)."""
    found: dict[str, TemplateVariable] = {}

    def _add(name: str, variable_type: VariableType, default: str | None) -> None:
        if name in found:
            return
        found[name] = TemplateVariable(
            name=name,
            label=create_label(name),
            type=variable_type,
            default_value=default,
            is_required=False,
            source_section_id=section.id,
            source=source,
        )

    for name in extract_placeholder_names(section.content):
        # A list's items slot is filled from its generated collection.
        if name == "items" and section.kind in LIST_KINDS:
            continue
        _add(name, infer_variable_type(name, section), default_value_for(name, section))

    if section.kind is SectionKind.TABLE:
        for name in table_placeholder_names(section.variables.get("tableData")):
            _add(name, infer_variable_type(name), default_value_for(name, section))

    if section.kind in _TEXT_VARIABLE_KINDS:
        for key in ("label", "content"):
            text = section.variables.get(key)
            if not isinstance(text, str):
                continue
            for name in extract_placeholder_names(text):
                _add(name, infer_variable_type(name), default_value_for(name, section))

    for key, value in section.variables.items():
        if key in METADATA_VARIABLE_KEYS or value is None:
            continue
        _add(
            key,
            infer_variable_type(key, section),
            value if isinstance(value, str) else to_json(value),
        )

    return list(found.values())


def build_registry(
    subject: str,
    header: Section | None,
    sections: Iterable[Section],
    footer: Section | None,
) -> list[TemplateVariable]:
    """Build the ordered, deduplicated variable catalog of a template.

    Scan order is subject, header, body sections (depth first, containers
    before their children, layout cells row-major), footer. The first
    occurrence of a name wins; later sites keep rendering their own values.
    """
    registry: dict[str, TemplateVariable] = {}
    for variable in extract_subject_variables(subject or ""):
        registry.setdefault(variable.name, variable)

    scans: list[tuple[VariableSource, list[Section]]] = [
        ("header", [header] if header is not None else []),
        ("section", list(sections)),
        ("footer", [footer] if footer is not None else []),
    ]
    for source, roots in scans:
        for section, _depth in walk_sections(roots):
            for variable in extract_section_variables(section, source):
                registry.setdefault(variable.name, variable)

    return sorted(registry.values(), key=lambda variable: SOURCE_ORDER[variable.source])
