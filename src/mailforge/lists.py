"""List markup for preview and production output."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from mailforge.placeholders import to_directive
from mailforge.sanitize import sanitize_input
from mailforge.schemas import ListItem
from mailforge.schemas.sections import parse_list_items
from mailforge.styles import list_item_style, style_attr

logger = logging.getLogger(__name__)

ORDERED_STYLES = frozenset({"decimal", "lower-roman", "upper-roman", "lower-alpha", "upper-alpha"})

_STYLE_ALIASES = {
    "circle": "circle",
    "disc": "disc",
    "square": "square",
    "decimal": "decimal",
    "lower-roman": "lower-roman",
    "upper-roman": "upper-roman",
    "lower-alpha": "lower-alpha",
    "upper-alpha": "upper-alpha",
    "1": "decimal",
    "i": "lower-roman",
    "I": "upper-roman",
    "a": "lower-alpha",
    "A": "upper-alpha",
}

LIST_FALLBACK_HTML = '<ul style="list-style-type: disc;"></ul>'


def list_style_type(list_style: str | None) -> str:
    """CSS ``list-style-type`` for an authored list style, ``disc`` when unknown."""
    return _STYLE_ALIASES.get(list_style or "", "disc")


def list_tag(list_style: str | None) -> str:
    return "ol" if list_style_type(list_style) in ORDERED_STYLES else "ul"


def render_list_items(items: Sequence[ListItem], list_style: str | None) -> str:
    """``<li>`` elements for ``items``; nested entries become a nested list."""
    parts = []
    for item in items:
        nested = ""
        if item.children:
            nested = render_list(item.children, list_style, nested=True)
        text = sanitize_input(item.text)
        parts.append(f"<li{style_attr(list_item_style(item))}>{text}{nested}</li>")
    return "".join(parts)


def render_list(items: Sequence[ListItem], list_style: str | None, *, nested: bool = False) -> str:
    tag = list_tag(list_style)
    style = f"list-style-type: {list_style_type(list_style)}; margin-left: 20px;"
    if nested:
        style = f"list-style-type: {list_style_type(list_style)};"
    return f'<{tag} style="{style}">{render_list_items(items, list_style)}</{tag}>'


def render_list_preview(section_id: str, raw_items: Any, list_style: str | None) -> str:
    """Preview markup for an authored item list; degrades to an empty list."""
    items = parse_list_items(raw_items)
    if items is None:
        logger.warning("Section %s has a missing or malformed list payload; rendering an empty list", section_id)
        return LIST_FALLBACK_HTML
    return render_list(items, list_style)


def list_item_loop(collection: str, list_style: str | None, *, styled: bool = False) -> str:
    """``<li>`` loop over ``collection``, without the surrounding list element.

    Styled loops read ``item.text`` and ``item.styles`` and render one level of
    ``item.children``; plain loops interpolate each item as is.
    """
    if not styled:
        return f'<li th:each="item : ${{{collection}}}">{to_directive("item")}</li>'
    tag = list_tag(list_style)
    style_type = list_style_type(list_style)
    return (
        f'<li th:each="item : ${{{collection}}}" th:styleappend="${{item.styles}}">{to_directive("item", ("text",))}'
        f'<{tag} th:if="${{item.children != null and !item.children.isEmpty()}}" '
        f'style="list-style-type: {style_type}; margin-left: 20px;">'
        f'<li th:each="child : ${{item.children}}" th:styleappend="${{child.styles}}">'
        f'{to_directive("child", ("text",))}</li>'
        f"</{tag}>"
        f"</li>"
    )


def render_list_production(variable_name: str, list_style: str | None) -> str:
    """Loop over a flat collection of strings bound at send time.

    Example::

        <ul style="list-style-type: circle;"><li th:each="item : ${items_abc123}"><span th:utext="${item}"/></li></ul>
    """
    tag = list_tag(list_style)
    return (
        f'<{tag} style="list-style-type: {list_style_type(list_style)};">'
        f"{list_item_loop(variable_name, list_style)}"
        f"</{tag}>"
    )


def render_nested_list_production(variable_name: str, list_style: str | None) -> str:
    """Loop over styled items, each with optional one-level children."""
    tag = list_tag(list_style)
    return (
        f'<{tag} style="list-style-type: {list_style_type(list_style)};" th:with="listItems=${{{variable_name}}}">'
        f'{list_item_loop("listItems", list_style, styled=True)}'
        f"</{tag}>"
    )


def needs_nested_loop(raw_items: Any) -> bool:
    """True when the authored items carry children or styling."""
    items = parse_list_items(raw_items)
    if not items:
        return False
    return any(item.children or item.is_styled for item in items)
