"""Section tree models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both camelCase (editor JSON) and snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SectionKind(str, Enum):
    """Closed set of section variants an author can place in a template."""

    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HEADING4 = "heading4"
    HEADING5 = "heading5"
    HEADING6 = "heading6"
    TEXT = "text"
    PARAGRAPH = "paragraph"
    TABLE = "table"
    BULLET_LIST_CIRCLE = "bullet-list-circle"
    BULLET_LIST_DISC = "bullet-list-disc"
    BULLET_LIST_SQUARE = "bullet-list-square"
    NUMBER_LIST_1 = "number-list-1"
    NUMBER_LIST_I = "number-list-i"
    NUMBER_LIST_A = "number-list-a"
    IMAGE = "image"
    LINK = "link"
    BUTTON = "button"
    GRID = "grid"
    HTML_CONTENT = "html-content"
    HEADER = "header"
    FOOTER = "footer"
    LINE_BREAK = "line-break"
    STATIC_TEXT = "static-text"
    MIXED_CONTENT = "mixed-content"
    LABELED_CONTENT = "labeled-content"
    CONTAINER = "container"
    LAYOUT_TABLE = "layout-table"
    PROGRAM_NAME = "program-name"
    BANNER = "banner"


HEADING_KINDS = frozenset(
    {
        SectionKind.HEADING1,
        SectionKind.HEADING2,
        SectionKind.HEADING3,
        SectionKind.HEADING4,
        SectionKind.HEADING5,
        SectionKind.HEADING6,
    }
)
CONTENT_REQUIRED_KINDS = HEADING_KINDS | {SectionKind.TEXT, SectionKind.PARAGRAPH}

# List section kinds mapped to their CSS list-style-type.
LIST_KINDS: dict[SectionKind, str] = {
    SectionKind.BULLET_LIST_CIRCLE: "circle",
    SectionKind.BULLET_LIST_DISC: "disc",
    SectionKind.BULLET_LIST_SQUARE: "square",
    SectionKind.NUMBER_LIST_1: "decimal",
    SectionKind.NUMBER_LIST_I: "lower-roman",
    SectionKind.NUMBER_LIST_A: "lower-alpha",
}

SINGLE_USE_KINDS = (SectionKind.PROGRAM_NAME, SectionKind.BANNER)
FRAME_KINDS = frozenset({SectionKind.HEADER, SectionKind.FOOTER})

# Keys of ``Section.variables`` that describe structure rather than hold values.
METADATA_VARIABLE_KEYS = frozenset({"label", "content", "contentType", "listStyle", "items", "tableData"})

ContentType = Literal["text", "list", "table"]
HeaderPosition = Literal["first-row", "first-column", "none"]


class SectionStyles(CamelModel):
    """Presentation attributes carried through the pipeline untouched."""

    font_size: str | None = None
    color: str | None = None
    background_color: str | None = None
    padding: str | None = None
    margin: str | None = None
    text_align: str | None = None
    font_weight: str | None = None


class CellStyle(CamelModel):
    color: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    background_color: str | None = None
    font_size: str | None = None


class MergeSpan(CamelModel):
    row_span: int = Field(default=1, ge=1)
    col_span: int = Field(default=1, ge=1)


class TableData(CamelModel):
    """Authored table payload.

    Attributes:
        rows: Cell text, row-major. When ``headers`` is given it is treated as
            the first row.
        merged_cells: ``"row-col"`` of the origin cell -> span.
        cell_styles: ``"row-col"`` -> per-cell styling.
        header_position: Which cells render as ``<th>``.
    """

    rows: list[list[str]] = Field(default_factory=list)
    headers: list[str] | None = None
    show_border: bool = True
    border_color: str | None = None
    merged_cells: dict[str, MergeSpan] = Field(default_factory=dict)
    cell_styles: dict[str, CellStyle] = Field(default_factory=dict)
    header_position: HeaderPosition = "first-row"

    @field_validator("rows", mode="before")
    @classmethod
    def stringify_cells(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        rows = []
        for row in v:
            if not isinstance(row, list):
                raise ValueError("table rows must be lists of cells")
            rows.append(["" if cell is None else str(cell) for cell in row])
        return rows

    @field_validator("headers", mode="before")
    @classmethod
    def stringify_headers(cls, v: Any) -> Any:
        if isinstance(v, list):
            return ["" if cell is None else str(cell) for cell in v]
        return v

    @property
    def grid(self) -> list[list[str]]:
        """All rows including the header row when headers are stored apart."""
        if self.headers:
            return [list(self.headers), *self.rows]
        return self.rows

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.grid), default=0)


class ListItem(CamelModel):
    """A styled list entry, optionally with nested entries."""

    text: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: str | None = None
    background_color: str | None = None
    font_size: str | None = None
    children: list[ListItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def coerce_plain_item(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"text": data}
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return {"text": str(data)}
        if isinstance(data, dict) and "text" not in data and "content" in data:
            return {**data, "text": data["content"]}
        return data

    @property
    def is_styled(self) -> bool:
        return bool(
            self.bold
            or self.italic
            or self.underline
            or self.color
            or self.background_color
            or self.font_size
        )


class LayoutTableCell(CamelModel):
    id: str = ""
    sections: list[Section] = Field(default_factory=list)
    width: str | None = None


class LayoutTableRow(CamelModel):
    id: str = ""
    cells: list[LayoutTableCell] = Field(default_factory=list)


class LayoutTableData(CamelModel):
    rows: list[LayoutTableRow] = Field(default_factory=list)
    cell_padding: str = "8px"
    show_borders: bool = True
    border_color: str = "#dee2e6"


class Section(CamelModel):
    """A node of the authored content tree."""

    id: str
    kind: SectionKind = Field(alias="type")
    content: str = ""
    variables: dict[str, Any] = Field(default_factory=dict)
    styles: SectionStyles | None = None
    children: list[Section] = Field(default_factory=list)
    layout: LayoutTableData | None = Field(default=None, alias="layoutData")
    is_label_editable: bool = True
    order: int | None = None

    @model_validator(mode="before")
    @classmethod
    def lift_layout_data(cls, data: Any) -> Any:
        """Accept layout grids stored under ``variables.layoutData``."""
        if not isinstance(data, dict):
            return data
        variables = data.get("variables")
        has_layout = data.get("layoutData") is not None or data.get("layout") is not None
        if isinstance(variables, dict) and "layoutData" in variables and not has_layout:
            variables = dict(variables)
            layout = variables.pop("layoutData")
            return {**data, "variables": variables, "layoutData": layout}
        return data

    @field_validator("content", mode="before")
    @classmethod
    def none_content_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("variables", mode="before")
    @classmethod
    def none_variables_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def content_type(self) -> str:
        return str(self.variables.get("contentType") or "text")

    @property
    def label(self) -> str:
        return str(self.variables.get("label") or "")


LayoutTableCell.model_rebuild()
Section.model_rebuild()


def parse_table_data(value: Any) -> TableData | None:
    """Parse a table payload, returning ``None`` when it is missing or malformed."""
    if isinstance(value, TableData):
        return value
    if not isinstance(value, dict):
        return None
    try:
        return TableData.model_validate(value)
    except ValidationError:
        return None


def parse_list_items(value: Any) -> list[ListItem] | None:
    """Parse list items, returning ``None`` when the payload is not a list of items."""
    if not isinstance(value, list):
        return None
    try:
        return [ListItem.model_validate(item) for item in value]
    except ValidationError:
        return None
