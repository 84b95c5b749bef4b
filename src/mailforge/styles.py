"""Inline style assembly."""

from __future__ import annotations

from mailforge.schemas import CellStyle, ListItem, SectionStyles

# Declarations are always emitted in this order.
_STYLE_ORDER: tuple[tuple[str, str], ...] = (
    ("color", "color"),
    ("font_weight", "font-weight"),
    ("font_style", "font-style"),
    ("text_decoration", "text-decoration"),
    ("background_color", "background-color"),
    ("font_size", "font-size"),
    ("text_align", "text-align"),
    ("padding", "padding"),
    ("margin", "margin"),
)


def build_inline_style(
    *,
    color: str | None = None,
    font_weight: str | None = None,
    font_style: str | None = None,
    text_decoration: str | None = None,
    background_color: str | None = None,
    font_size: str | None = None,
    text_align: str | None = None,
    padding: str | None = None,
    margin: str | None = None,
) -> str:
    """Join the present declarations; absent or blank attributes are skipped."""
    values = {
        "color": color,
        "font_weight": font_weight,
        "font_style": font_style,
        "text_decoration": text_decoration,
        "background_color": background_color,
        "font_size": font_size,
        "text_align": text_align,
        "padding": padding,
        "margin": margin,
    }
    declarations = []
    for key, css_property in _STYLE_ORDER:
        value = values[key]
        if value is not None and str(value).strip():
            declarations.append(f"{css_property}: {str(value).strip()}")
    return "; ".join(declarations)


def section_style(styles: SectionStyles | None) -> str:
    if styles is None:
        return ""
    return build_inline_style(
        color=styles.color,
        font_weight=styles.font_weight,
        background_color=styles.background_color,
        font_size=styles.font_size,
        text_align=styles.text_align,
        padding=styles.padding,
        margin=styles.margin,
    )


def cell_style(style: CellStyle | None) -> str:
    if style is None:
        return ""
    return build_inline_style(
        color=style.color,
        font_weight="bold" if style.bold else None,
        font_style="italic" if style.italic else None,
        text_decoration="underline" if style.underline else None,
        background_color=style.background_color,
        font_size=style.font_size,
    )


def list_item_style(item: ListItem) -> str:
    return build_inline_style(
        color=item.color,
        font_weight="bold" if item.bold else None,
        font_style="italic" if item.italic else None,
        text_decoration="underline" if item.underline else None,
        background_color=item.background_color,
        font_size=item.font_size,
    )


def style_attr(style: str) -> str:
    """`` style="..."`` attribute text, or nothing for an empty style."""
    return f' style="{style}"' if style else ""
