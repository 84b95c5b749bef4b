"""Pydantic models for the template API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mailforge.schemas import (
    ApiTemplate,
    DataTransformation,
    GlobalApiIntegration,
    GlobalApiVariable,
    TemplateVariable,
    ValidationIssue,
)


class ApiModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TemplateRequest(ApiModel):
    """Request body carrying one template document.

    Attributes
    ----------
    template : dict[str, Any]
        The authored template document, parsed with ``load_template``.
    runtime_values : dict[str, Any]
        Values that override section defaults in previews.

    """

    template: dict[str, Any] = Field(..., description="Template document")
    runtime_values: dict[str, Any] = Field(default_factory=dict, description="Preview overrides by variable name")


class VariablesResponse(ApiModel):
    variables: list[TemplateVariable]


class RenderResponse(ApiModel):
    """Rendered subject and body for one output mode."""

    subject: str = Field(..., description="Rendered subject line")
    html: str = Field(..., description="Rendered body markup")


class ValidateResponse(ApiModel):
    """Validation outcome.

    Attributes
    ----------
    valid : bool
        False when any issue blocks saving.
    issues : list[ValidationIssue]
        Every issue, general ones first.
    summary : str
        Human-readable bulleted summary.

    """

    valid: bool
    issues: list[ValidationIssue]
    summary: str = ""


class TransformRequest(ApiModel):
    data: Any = None
    transformation: DataTransformation | None = None


class TransformResponse(ApiModel):
    data: Any = None


class ResolveRequest(ApiModel):
    text: str = ""
    global_variables: dict[str, GlobalApiVariable] = Field(default_factory=dict)


class ResolveResponse(ApiModel):
    text: str


class FetchRequest(ApiModel):
    """An integration and the API template it calls."""

    integration: GlobalApiIntegration
    api_template: ApiTemplate


class ErrorResponse(ApiModel):
    error: str = Field(..., description="Error message")
