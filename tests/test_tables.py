"""Tests for table markup."""

from __future__ import annotations

import logging

import pytest

from mailforge.schemas import MergeSpan, TableData
from mailforge.tables import (
    TABLE_FALLBACK_HTML,
    covered_positions,
    header_fields,
    is_header_cell,
    parse_cell_key,
    render_table,
    render_table_payload,
    render_table_production,
    table_bindings,
    table_placeholder_names,
)


def _grid(rows: int, cols: int) -> list[list[str]]:
    return [[f"r{r}c{c}" for c in range(cols)] for r in range(rows)]


class TestCellKeys:
    """Tests for merged-cell bookkeeping."""

    def test_parse_cell_key(self) -> None:
        assert parse_cell_key("2-3") == (2, 3)
        assert parse_cell_key("2") is None
        assert parse_cell_key("a-1") is None

    def test_covered_positions_exclude_origin(self) -> None:
        covered = covered_positions({"0-0": MergeSpan(row_span=2, col_span=2)}, 3, 3)
        assert covered == {(0, 1), (1, 0), (1, 1)}

    def test_covered_positions_stay_inside_the_grid(self) -> None:
        covered = covered_positions({"1-0": MergeSpan(row_span=3000, col_span=3000)}, 2, 2)
        assert covered == {(1, 1)}

    def test_malformed_keys_are_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="mailforge.tables"):
            assert covered_positions({"bad": MergeSpan(row_span=2)}, 3, 3) == set()
        assert "bad" in caplog.text

    def test_header_positions(self) -> None:
        assert is_header_cell("first-row", 0, 3)
        assert not is_header_cell("first-row", 1, 0)
        assert is_header_cell("first-column", 4, 0)
        assert not is_header_cell("none", 0, 0)


class TestRenderTable:
    """Tests for render_table."""

    def test_merged_cell_hides_covered_cells(self) -> None:
        table = TableData(rows=_grid(3, 3), merged_cells={"0-0": MergeSpan(row_span=2, col_span=2)})
        html = render_table(table)

        assert 'rowspan="2" colspan="2">r0c0</th>' in html
        for hidden in ("r0c1", "r1c0", "r1c1"):
            assert hidden not in html
        for visible in ("r0c2", "r1c2", "r2c0", "r2c1", "r2c2"):
            assert visible in html
        assert html.count("<tr>") == 3

    def test_oversized_merge_is_clipped_to_the_grid(self) -> None:
        table = TableData.model_validate(
            {"rows": _grid(2, 2), "mergedCells": {"0-0": {"rowSpan": 3000, "colSpan": 3000}}}
        )
        html = render_table(table)

        assert 'rowspan="2" colspan="2">r0c0</th>' in html
        for hidden in ("r0c1", "r1c0", "r1c1"):
            assert hidden not in html
        assert html.count("<tr>") == 2

    def test_render_cell_maps_each_cell(self) -> None:
        html = render_table(TableData(rows=[["Amount"], ["{{amount}}"]]), render_cell=str.upper)
        assert ">AMOUNT</th>" in html
        assert ">{{AMOUNT}}</td>" in html

    def test_first_row_headers(self) -> None:
        html = render_table(TableData(rows=[["A", "B"], ["1", "2"]]))
        assert html.startswith('<table border="1" style="border-collapse: collapse; border: 1px solid #ddd;">')
        assert html.count("<th ") == 2
        assert html.count("<td ") == 2

    def test_first_column_headers(self) -> None:
        html = render_table(TableData(rows=[["A", "1"], ["B", "2"]], header_position="first-column"))
        assert ">A</th>" in html
        assert ">B</th>" in html
        assert ">1</td>" in html

    def test_no_headers_and_no_border(self) -> None:
        html = render_table(TableData(rows=[["x"]], header_position="none", show_border=False, border_color="#000"))
        assert html == '<table style="border-collapse: collapse;"><tr><td style="padding: 8px;">x</td></tr></table>'

    def test_cell_styles_follow_base_style(self) -> None:
        table = TableData.model_validate(
            {
                "rows": [["h"], ["v"]],
                "borderColor": "#123456",
                "cellStyles": {"1-0": {"bold": True, "underline": True, "color": "red"}},
            }
        )
        html = render_table(table)
        assert (
            '<td style="border: 1px solid #123456; padding: 8px; '
            'color: red; font-weight: bold; text-decoration: underline">v</td>'
        ) in html

    def test_separate_headers_are_the_first_row(self) -> None:
        table = TableData(headers=["Name"], rows=[["Ada"]])
        html = render_table(table)
        assert ">Name</th>" in html
        assert ">Ada</td>" in html


class TestRenderTablePayload:
    """Tests for the degradation path."""

    @pytest.mark.parametrize("payload", [None, "rows", {"rows": "nope"}, {"rows": [1, 2]}, {"rows": []}])
    def test_malformed_payload_falls_back(self, payload: object, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="mailforge.tables"):
            assert render_table_payload("sec-t", payload) == TABLE_FALLBACK_HTML
        assert "sec-t" in caplog.text

    def test_valid_payload(self) -> None:
        assert render_table_payload("sec-t", {"rows": [["a"]]}).startswith("<table")

    def test_cell_placeholder_names(self) -> None:
        payload = {"headers": ["{{unit}}"], "rows": [["{{amount}} {{unit}}"], ['<span th:utext="${total}"/>']]}
        assert table_placeholder_names(payload) == ["unit", "amount", "total"]
        assert table_placeholder_names(None) == []


class TestProductionTables:
    """Tests for the production table loop and its bindings."""

    def test_header_fields_are_unique(self) -> None:
        assert header_fields(["Name", "Name", "Unit Price"]) == ["name", "name_2", "unit_price"]

    def test_first_row_shape_matches_bindings(self) -> None:
        table = TableData(rows=[["Name", "Amount"], ["A", "1"], ["B"]])
        html = render_table_production("sec-table", table.model_dump(by_alias=True))
        bindings = table_bindings("sec-table", table)

        assert "${tableHeaders_sectable}" in html
        assert "${tableRows_sectable}" in html
        assert bindings == {
            "tableHeaders_sectable": ["Name", "Amount"],
            "tableRows_sectable": [{"name": "A", "amount": "1"}, {"name": "B", "amount": ""}],
        }

    def test_first_column_bindings(self) -> None:
        table = TableData(rows=[["Q1", "1", "2"]], header_position="first-column")
        assert table_bindings("sec-table", table) == {
            "tableRows_sectable": [{"header": "Q1", "cells": ["1", "2"]}]
        }

    def test_plain_bindings(self) -> None:
        table = TableData(rows=[["a", "b"]], header_position="none")
        assert table_bindings("sec-table", table) == {"tableRows_sectable": [["a", "b"]]}

    def test_first_row_without_rows_falls_back(self) -> None:
        assert render_table_production("sec-table", {"rows": []}) == TABLE_FALLBACK_HTML
