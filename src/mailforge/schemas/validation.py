"""Validation issue model."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IssueCategory = Literal["structural", "binding", "defaulting"]
IssueSeverity = Literal["error", "warning"]


class ValidationIssue(BaseModel):
    """A single validation finding.

    General (tree-level) issues carry no ``section_id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    field: str
    category: IssueCategory = "structural"
    severity: IssueSeverity = "error"
    section_id: str | None = Field(default=None, alias="sectionId")
    section_type: str | None = Field(default=None, alias="sectionType")
