"""Dual renderer: preview markup with values substituted, production markup with directives.

Both renderers walk the same tree and reference the same variables; only the
encoding differs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from mailforge.config import MAILFORGE_MAX_NESTING_DEPTH
from mailforge.global_variables import GlobalVariables, resolve_global_variables
from mailforge.lists import (
    list_item_loop,
    needs_nested_loop,
    render_list_items,
    render_list_preview,
    render_list_production,
    render_nested_list_production,
)
from mailforge.placeholders import (
    Placeholder,
    is_valid_identifier,
    label_variable_name,
    list_variable_name,
    substitute_placeholders,
    to_author_syntax,
    to_directive,
    to_production_syntax,
)
from mailforge.sanitize import sanitize_html, sanitize_input
from mailforge.schemas import LayoutTableData, Section, SectionKind
from mailforge.schemas.sections import LIST_KINDS, parse_list_items
from mailforge.styles import section_style, style_attr
from mailforge.tables import TABLE_FALLBACK_HTML, render_table_payload, render_table_production
from mailforge.values import get_nested_value, stringify, to_json

logger = logging.getLogger(__name__)

CONTAINER_STYLE = (
    "margin: 15px 0; padding: 15px; border: 1px solid #e0e0e0; border-radius: 8px; background: #fafafa;"
)
LABELED_WRAPPER_STYLE = "margin: 15px 0;"
LABEL_STYLE = "font-weight: bold; margin-bottom: 8px; font-size: 1.1em;"
TEXT_BLOCK_STYLE = "margin: 10px 0; padding: 8px; line-height: 1.6;"
DEFAULT_LABEL = "Label"
DEFAULT_LABELED_LIST_STYLE = "circle"


@dataclass(frozen=True)
class _RenderContext:
    production: bool
    runtime_values: Mapping[str, Any] = field(default_factory=dict)
    global_variables: GlobalVariables = field(default_factory=dict)
    max_depth: int = MAILFORGE_MAX_NESTING_DEPTH


def render_preview(
    sections: Iterable[Section],
    runtime_values: Mapping[str, Any] | None = None,
    *,
    global_variables: GlobalVariables | None = None,
    max_depth: int = MAILFORGE_MAX_NESTING_DEPTH,
) -> str:
    """Render the human-readable preview of ``sections``.

    Each placeholder takes the runtime override when one is supplied, else
    the section's own value. Unresolved placeholders stay visible as
    ``{{name}}``. Global variables are resolved before local values.
    """
    context = _RenderContext(
        production=False,
        runtime_values=runtime_values or {},
        global_variables=global_variables or {},
        max_depth=max_depth,
    )
    return _render_sections(sections, context, 0)


def render_production(
    sections: Iterable[Section], *, max_depth: int = MAILFORGE_MAX_NESTING_DEPTH
) -> str:
    """Render the server-template form of ``sections``.

    Scalars become value-interpolation directives; lists and labeled
    tables become loops over collections named after the section id.
    """
    return _render_sections(sections, _RenderContext(production=True, max_depth=max_depth), 0)


def _render_sections(sections: Iterable[Section], context: _RenderContext, depth: int) -> str:
    return "".join(_render_section(section, context, depth) for section in sections)


def _render_nested(section: Section, sections: list[Section], context: _RenderContext, depth: int) -> str:
    if not sections:
        return ""
    if depth >= context.max_depth:
        logger.warning(
            "Section %s exceeds the maximum nesting depth of %d; %d nested sections skipped",
            section.id,
            context.max_depth,
            len(sections),
        )
        return ""
    return _render_sections(sections, context, depth + 1)


def _render_section(section: Section, context: _RenderContext, depth: int) -> str:
    kind = section.kind
    if kind is SectionKind.LINE_BREAK:
        return "<br/>"
    if kind is SectionKind.CONTAINER:
        inner = _render_nested(section, section.children, context, depth)
        return f'<div style="{CONTAINER_STYLE}">{inner}</div>'
    if kind is SectionKind.LAYOUT_TABLE:
        return _render_layout_table(section, context, depth)

    if kind is SectionKind.LABELED_CONTENT:
        html = _render_labeled_content(section, context)
    elif kind in (SectionKind.STATIC_TEXT, SectionKind.MIXED_CONTENT):
        text = section.variables.get("content")
        if not isinstance(text, str):
            text = section.content
        rendered = _render_text(section, text, context).replace("\n", "<br/>")
        html = f'<div style="{TEXT_BLOCK_STYLE}">{rendered}</div>'
    elif kind is SectionKind.TABLE:
        html = render_table_payload(
            section.id,
            section.variables.get("tableData"),
            lambda cell: _render_text(section, cell, context),
        )
    elif kind in LIST_KINDS:
        html = _render_list_section(section, context)
    else:
        html = _render_text(section, section.content, context)

    return _wrap_styles(section, html)


def _wrap_styles(section: Section, html: str) -> str:
    style = section_style(section.styles)
    if not style:
        return html
    return f"<div{style_attr(style)}>{html}</div>"


# ---------------------------------------------------------------------------
# Placeholder text
# ---------------------------------------------------------------------------


def _render_text(section: Section, text: str | None, context: _RenderContext) -> str:
    if not text:
        return ""
    if context.production:
        return to_production_syntax(text)
    resolved = resolve_global_variables(text, context.global_variables)
    substituted = substitute_placeholders(
        resolved, lambda placeholder: _preview_value(section, placeholder, context)
    )
    return to_author_syntax(substituted)


def _preview_value(section: Section, placeholder: Placeholder, context: _RenderContext) -> str:
    if placeholder.name in context.runtime_values:
        value = context.runtime_values[placeholder.name]
    else:
        value = section.variables.get(placeholder.name)
    if value is not None and placeholder.path:
        value = get_nested_value(value, placeholder.path)
    if value is None:
        return "{{" + placeholder.dotted + "}}"
    return _format_preview_value(value)


def _format_preview_value(value: Any) -> str:
    if isinstance(value, list):
        return _list_value_html(value)
    if isinstance(value, dict):
        return sanitize_html(to_json(value))
    return sanitize_html(stringify(value))


def _is_plain_item(value: Any) -> bool:
    if isinstance(value, dict):
        return "text" in value or "content" in value
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _list_value_html(values: list[Any]) -> str:
    items = parse_list_items(values) if all(_is_plain_item(value) for value in values) else None
    if items is not None:
        return render_list_items(items, None)
    return "".join(f"<li>{sanitize_html(stringify(value))}</li>" for value in values)


# ---------------------------------------------------------------------------
# Lists and labeled content
# ---------------------------------------------------------------------------


def list_collection_name(section: Section) -> str:
    """Collection bound to a list section: its own valid name, else the generated one."""
    name = section.variables.get("listVariableName")
    if isinstance(name, str) and is_valid_identifier(name):
        return name
    return list_variable_name(section.id)


def label_collection_name(section: Section) -> str:
    name = section.variables.get("labelVariableName")
    if isinstance(name, str) and is_valid_identifier(name):
        return name
    return label_variable_name(section.id)


def _production_list(section: Section, list_style: str) -> str:
    name = list_collection_name(section)
    if needs_nested_loop(section.variables.get("items")):
        return render_nested_list_production(name, list_style)
    return render_list_production(name, list_style)


def _production_list_content(section: Section, list_style: str) -> str:
    """Authored list markup with its ``items`` slot replaced by the item loop."""
    loop = list_item_loop(
        list_collection_name(section),
        list_style,
        styled=needs_nested_loop(section.variables.get("items")),
    )

    def _items_slot(placeholder: Placeholder) -> str | None:
        if placeholder.name == "items" and not placeholder.path:
            return loop
        return None

    return to_production_syntax(substitute_placeholders(section.content, _items_slot))


def _render_list_section(section: Section, context: _RenderContext) -> str:
    list_style = LIST_KINDS[section.kind]
    if section.content.strip():
        if context.production:
            return _production_list_content(section, list_style)
        return _render_text(section, section.content, context)
    if context.production:
        return _production_list(section, list_style)
    return render_list_preview(section.id, section.variables.get("items"), list_style)


def _render_labeled_content(section: Section, context: _RenderContext) -> str:
    content_type = section.content_type
    list_style = str(section.variables.get("listStyle") or DEFAULT_LABELED_LIST_STYLE)

    if context.production:
        if section.is_label_editable:
            label = to_directive(label_collection_name(section))
        else:
            label = to_production_syntax(section.label or DEFAULT_LABEL)
        if content_type == "list":
            body = _production_list(section, list_style)
        elif content_type == "table":
            body = render_table_production(section.id, section.variables.get("tableData"))
        else:
            body = f'<div style="white-space: pre-wrap;">{_render_text(section, _content_text(section), context)}</div>'
    else:
        label_override = context.runtime_values.get(label_collection_name(section))
        if isinstance(label_override, str):
            label = sanitize_input(label_override)
        else:
            label = _render_text(section, sanitize_input(section.label or DEFAULT_LABEL), context)
        if content_type == "list":
            items = context.runtime_values.get(list_collection_name(section), section.variables.get("items"))
            body = render_list_preview(section.id, items, list_style)
        elif content_type == "table":
            body = render_table_payload(section.id, section.variables.get("tableData"))
        else:
            body = f'<div style="white-space: pre-wrap;">{_render_text(section, _content_text(section), context)}</div>'

    return (
        f'<div style="{LABELED_WRAPPER_STYLE}">'
        f'<div style="{LABEL_STYLE}">{label}</div>'
        f"{body}"
        f"</div>"
    )


def _content_text(section: Section) -> str:
    text = section.variables.get("content")
    return text if isinstance(text, str) else section.content


# ---------------------------------------------------------------------------
# Layout tables
# ---------------------------------------------------------------------------


def _render_layout_table(section: Section, context: _RenderContext, depth: int) -> str:
    layout: LayoutTableData | None = section.layout
    if layout is None:
        logger.warning("Layout table %s has no layout grid; rendering a placeholder table", section.id)
        return TABLE_FALLBACK_HTML

    border = f" border: 1px solid {layout.border_color};" if layout.show_borders else ""
    parts = ['<table style="width: 100%; border-collapse: collapse;">']
    for row in layout.rows:
        parts.append("<tr>")
        for cell in row.cells:
            width = f"width: {cell.width}; " if cell.width else ""
            style = f"{width}padding: {layout.cell_padding};{border} vertical-align: top;"
            parts.append(f'<td style="{style}">{_render_nested(section, cell.sections, context, depth)}</td>')
        parts.append("</tr>")
    parts.append("</table>")
    return _wrap_styles(section, "".join(parts))
