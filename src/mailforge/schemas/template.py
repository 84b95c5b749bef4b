"""Whole-template document models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from mailforge.schemas.global_api import GlobalApiVariable
from mailforge.schemas.sections import CamelModel, Section, SectionKind
from mailforge.schemas.validation import ValidationIssue
from mailforge.schemas.variables import TemplateVariable


def _default_header() -> Section:
    return Section(id="header", kind=SectionKind.HEADER)


def _default_footer() -> Section:
    return Section(id="footer", kind=SectionKind.FOOTER)


class EmailTemplate(CamelModel):
    """An authored template: subject, fixed header/footer and body sections."""

    name: str = ""
    subject: str = ""
    header: Section = Field(default_factory=_default_header)
    sections: list[Section] = Field(default_factory=list)
    footer: Section = Field(default_factory=_default_footer)
    global_variables: dict[str, GlobalApiVariable] = Field(default_factory=dict)

    def all_sections(self) -> list[Section]:
        return [self.header, *self.sections, self.footer]


class CompiledTemplate(CamelModel):
    """Every artifact derived from one template scan."""

    variables: list[TemplateVariable]
    subject_preview: str
    production_subject: str
    preview_html: str
    production_html: str
    bindings: dict[str, Any] = Field(default_factory=dict)
    issues: list[ValidationIssue]
