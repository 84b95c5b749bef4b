"""Whole-template compilation: registry, both renderings, bindings and validation."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from mailforge.exceptions import TemplateLoadError
from mailforge.global_variables import resolve_global_variables
from mailforge.placeholders import substitute_placeholders, to_author_syntax, to_production_syntax
from mailforge.registry import build_registry
from mailforge.renderer import label_collection_name, list_collection_name, render_preview, render_production
from mailforge.schemas import CompiledTemplate, EmailTemplate, ListItem, Section, SectionKind
from mailforge.schemas.sections import LIST_KINDS, parse_list_items, parse_table_data
from mailforge.styles import list_item_style
from mailforge.tables import table_bindings
from mailforge.tree import walk_sections
from mailforge.validation import validate
from mailforge.values import stringify

logger = logging.getLogger(__name__)


def load_template(source: str | bytes | Mapping[str, Any]) -> EmailTemplate:
    """Parse a template document from JSON text or an already decoded mapping.

    Raises:
        TemplateLoadError: If the JSON is invalid or does not describe a template.
    """
    if isinstance(source, (str, bytes)):
        try:
            source = json.loads(source)
        except json.JSONDecodeError as exc:
            raise TemplateLoadError(f"Template is not valid JSON: {exc}") from exc
    if not isinstance(source, Mapping):
        raise TemplateLoadError("Template document must be a JSON object")
    try:
        return EmailTemplate.model_validate(source)
    except ValidationError as exc:
        raise TemplateLoadError(f"Invalid template document: {exc}") from exc


def render_subject_preview(
    subject: str, runtime_values: Mapping[str, Any] | None = None, *, global_variables=None
) -> str:
    """Subject with runtime values filled in; unknown names stay as ``{{name}}``."""
    runtime_values = runtime_values or {}
    resolved = resolve_global_variables(subject, global_variables)

    def _lookup(placeholder) -> str:
        value = runtime_values.get(placeholder.name)
        if value is None:
            return "{{" + placeholder.dotted + "}}"
        return stringify(value)

    return to_author_syntax(substitute_placeholders(resolved, _lookup))


def _binding_item(item: ListItem) -> dict[str, Any]:
    return {
        "text": item.text,
        "styles": list_item_style(item),
        "children": [_binding_item(child) for child in item.children],
    }


def _list_binding(raw_items: Any) -> list[Any]:
    items = parse_list_items(raw_items) or []
    if any(item.children or item.is_styled for item in items):
        return [_binding_item(item) for item in items]
    return [item.text for item in items]


def default_bindings(sections: Iterable[Section]) -> dict[str, Any]:
    """Author defaults for every generated collection the production markup loops over."""
    bindings: dict[str, Any] = {}
    for section, _depth in walk_sections(sections):
        if section.kind in LIST_KINDS:
            bindings[list_collection_name(section)] = _list_binding(section.variables.get("items"))
        elif section.kind is SectionKind.LABELED_CONTENT:
            if section.is_label_editable:
                bindings[label_collection_name(section)] = section.label
            if section.content_type == "list":
                bindings[list_collection_name(section)] = _list_binding(section.variables.get("items"))
            elif section.content_type == "table":
                table = parse_table_data(section.variables.get("tableData"))
                if table is not None:
                    bindings.update(table_bindings(section.id, table))
    return bindings


def compile_template(
    template: EmailTemplate, runtime_values: Mapping[str, Any] | None = None
) -> CompiledTemplate:
    """Derive every artifact of ``template`` in one pass."""
    sections = template.all_sections()
    variables = build_registry(template.subject, template.header, template.sections, template.footer)
    issues = validate(
        template.name,
        template.subject,
        sections,
        global_variables=template.global_variables,
    )
    logger.debug(
        "Compiled template %r: %d variables, %d issues", template.name, len(variables), len(issues)
    )
    return CompiledTemplate(
        variables=variables,
        subject_preview=render_subject_preview(
            template.subject, runtime_values, global_variables=template.global_variables
        ),
        production_subject=to_production_syntax(template.subject, subject=True),
        preview_html=render_preview(
            sections, runtime_values, global_variables=template.global_variables
        ),
        production_html=render_production(sections),
        bindings=default_bindings(sections),
        issues=issues,
    )
