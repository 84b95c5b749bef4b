"""Table markup: authored grids and production row loops."""

from __future__ import annotations

import logging
from typing import Any, Callable

from mailforge.placeholders import (
    extract_placeholder_names,
    field_name_for_header,
    table_headers_variable_name,
    table_rows_variable_name,
    to_directive,
)
from mailforge.schemas import MergeSpan, TableData
from mailforge.schemas.sections import HeaderPosition, parse_table_data
from mailforge.styles import cell_style

logger = logging.getLogger(__name__)

DEFAULT_BORDER_COLOR = "#ddd"
HEADER_CELL_STYLE = "background-color: #f5f5f5; font-weight: bold;"
TABLE_FALLBACK_HTML = (
    '<table style="border-collapse: collapse;"><tr><td style="padding: 8px;">&nbsp;</td></tr></table>'
)


def parse_cell_key(key: str) -> tuple[int, int] | None:
    """``"row-col"`` -> ``(row, col)``; ``None`` for anything else."""
    row, sep, col = key.partition("-")
    if not sep or not row.isdigit() or not col.isdigit():
        return None
    return int(row), int(col)


def covered_positions(
    merged_cells: dict[str, MergeSpan], row_count: int, col_count: int
) -> set[tuple[int, int]]:
    """Positions hidden under a merged cell, origins excluded.

    Spans are clipped to the ``row_count`` x ``col_count`` grid.
    """
    covered: set[tuple[int, int]] = set()
    for key, span in merged_cells.items():
        origin = parse_cell_key(key)
        if origin is None:
            logger.warning("Ignoring merged cell with malformed key %r", key)
            continue
        start_row, start_col = origin
        for row in range(start_row, min(start_row + span.row_span, row_count)):
            for col in range(start_col, min(start_col + span.col_span, col_count)):
                if (row, col) != origin:
                    covered.add((row, col))
    return covered


def is_header_cell(position: HeaderPosition, row: int, col: int) -> bool:
    if position == "first-row":
        return row == 0
    if position == "first-column":
        return col == 0
    return False


def _border_styles(table: TableData) -> tuple[str, str]:
    border_color = table.border_color or DEFAULT_BORDER_COLOR
    if table.show_border:
        return (
            f' border="1" style="border-collapse: collapse; border: 1px solid {border_color};"',
            f"border: 1px solid {border_color}; padding: 8px;",
        )
    return ' style="border-collapse: collapse;"', "padding: 8px;"


def render_table(table: TableData, render_cell: Callable[[str], str] | None = None) -> str:
    """Render the authored grid, honoring merges, header placement and cell styles.

    ``render_cell``, when given, maps each cell's text before it is emitted.
    """
    table_attrs, base_style = _border_styles(table)
    grid = table.grid
    row_count, col_count = len(grid), table.column_count
    covered = covered_positions(table.merged_cells, row_count, col_count)

    parts = [f"<table{table_attrs}>"]
    for row_index, row in enumerate(grid):
        parts.append("<tr>")
        for col_index, cell in enumerate(row):
            if (row_index, col_index) in covered:
                continue
            key = f"{row_index}-{col_index}"
            header = is_header_cell(table.header_position, row_index, col_index)
            tag = "th" if header else "td"
            style = " ".join(
                part
                for part in (
                    base_style,
                    HEADER_CELL_STYLE if header else "",
                    cell_style(table.cell_styles.get(key)),
                )
                if part
            )
            merge = table.merged_cells.get(key)
            span_attrs = ""
            if merge:
                row_span = min(merge.row_span, row_count - row_index)
                col_span = min(merge.col_span, col_count - col_index)
                span_attrs = f' rowspan="{row_span}" colspan="{col_span}"'
            if render_cell is not None:
                cell = render_cell(cell)
            parts.append(f'<{tag} style="{style}"{span_attrs}>{cell}</{tag}>')
        parts.append("</tr>")
    parts.append("</table>")
    return "".join(parts)


def render_table_payload(
    section_id: str, raw_table: Any, render_cell: Callable[[str], str] | None = None
) -> str:
    """Authored grid for a raw payload; degrades to a one-cell table."""
    table = parse_table_data(raw_table)
    if table is None or not table.grid:
        logger.warning("Section %s has a missing or malformed table payload; rendering a placeholder table", section_id)
        return TABLE_FALLBACK_HTML
    return render_table(table, render_cell)


def table_placeholder_names(raw_table: Any) -> list[str]:
    """Variable names referenced from the cells of an authored grid."""
    table = parse_table_data(raw_table)
    if table is None:
        return []
    names: list[str] = []
    for row in table.grid:
        for cell in row:
            for name in extract_placeholder_names(cell):
                if name not in names:
                    names.append(name)
    return names


def header_fields(headers: list[str]) -> list[str]:
    """Unique ``row.<field>`` names for a header row."""
    fields: list[str] = []
    for index, header in enumerate(headers):
        field = field_name_for_header(header, index)
        if field in fields:
            field = f"{field}_{index + 1}"
        fields.append(field)
    return fields


def render_table_production(section_id: str, raw_table: Any) -> str:
    """Row loop over ``tableRows_<suffix>`` shaped by the header placement.

    * ``first-row``: header cells loop over ``tableHeaders_<suffix>``, body
      cells read ``row.<field>`` per authored column;
    * ``first-column``: each row renders ``row.header`` then loops ``row.cells``;
    * ``none``: each row is a plain list of cell values.
    """
    table = parse_table_data(raw_table)
    if table is None:
        logger.warning("Section %s has a missing or malformed table payload; rendering a placeholder table", section_id)
        return TABLE_FALLBACK_HTML

    rows_name = table_rows_variable_name(section_id)
    table_attrs, base_style = _border_styles(table)
    header_style = f"{base_style} {HEADER_CELL_STYLE}"

    if table.header_position == "first-row":
        if not table.grid:
            logger.warning("Section %s has no header row; rendering a placeholder table", section_id)
            return TABLE_FALLBACK_HTML
        headers_name = table_headers_variable_name(section_id)
        cells = "".join(
            f'<td style="{base_style}">{to_directive("row", (field,))}</td>'
            for field in header_fields(table.grid[0])
        )
        return (
            f"<table{table_attrs}>"
            f'<thead><tr><th th:each="header : ${{{headers_name}}}" style="{header_style}">'
            f'{to_directive("header")}</th></tr></thead>'
            f'<tbody><tr th:each="row : ${{{rows_name}}}">{cells}</tr></tbody>'
            f"</table>"
        )

    if table.header_position == "first-column":
        return (
            f"<table{table_attrs}>"
            f'<tr th:each="row : ${{{rows_name}}}">'
            f'<th style="{header_style}">{to_directive("row", ("header",))}</th>'
            f'<td th:each="cell : ${{row.cells}}" style="{base_style}">{to_directive("cell")}</td>'
            f"</tr>"
            f"</table>"
        )

    return (
        f"<table{table_attrs}>"
        f'<tr th:each="row : ${{{rows_name}}}">'
        f'<td th:each="cell : ${{row}}" style="{base_style}">{to_directive("cell")}</td>'
        f"</tr>"
        f"</table>"
    )


def table_bindings(section_id: str, table: TableData) -> dict[str, Any]:
    """Send-time values matching :func:`render_table_production` for ``table``."""
    rows_name = table_rows_variable_name(section_id)
    grid = table.grid
    if table.header_position == "first-row":
        if not grid:
            return {table_headers_variable_name(section_id): [], rows_name: []}
        fields = header_fields(grid[0])
        rows = [
            {field: row[index] if index < len(row) else "" for index, field in enumerate(fields)}
            for row in grid[1:]
        ]
        return {table_headers_variable_name(section_id): list(grid[0]), rows_name: rows}
    if table.header_position == "first-column":
        return {
            rows_name: [
                {"header": row[0] if row else "", "cells": list(row[1:])} for row in grid
            ]
        }
    return {rows_name: [list(row) for row in grid]}
