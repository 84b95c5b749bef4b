"""Shared schemas for mailforge."""

from mailforge.schemas.global_api import (
    ApiParam,
    ApiRequest,
    ApiTemplate,
    DataTransformation,
    FieldMapping,
    FilterCondition,
    GlobalApiIntegration,
    GlobalApiVariable,
)
from mailforge.schemas.sections import (
    CellStyle,
    LayoutTableCell,
    LayoutTableData,
    LayoutTableRow,
    ListItem,
    MergeSpan,
    Section,
    SectionKind,
    SectionStyles,
    TableData,
)
from mailforge.schemas.template import CompiledTemplate, EmailTemplate
from mailforge.schemas.validation import ValidationIssue
from mailforge.schemas.variables import TemplateVariable

__all__ = [
    "ApiParam",
    "ApiRequest",
    "ApiTemplate",
    "CellStyle",
    "CompiledTemplate",
    "DataTransformation",
    "EmailTemplate",
    "FieldMapping",
    "FilterCondition",
    "GlobalApiIntegration",
    "GlobalApiVariable",
    "LayoutTableCell",
    "LayoutTableData",
    "LayoutTableRow",
    "ListItem",
    "MergeSpan",
    "Section",
    "SectionKind",
    "SectionStyles",
    "TableData",
    "TemplateVariable",
    "ValidationIssue",
]
