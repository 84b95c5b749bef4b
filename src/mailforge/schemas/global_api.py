"""Global API variable, transformation and integration models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from mailforge.schemas.sections import CamelModel

FilterOperator = Literal[
    "equals",
    "not_equals",
    "contains",
    "not_contains",
    "greater_than",
    "less_than",
    "is_empty",
    "is_not_empty",
]
GlobalDataType = Literal["object", "list", "stringList"]
ParamLocation = Literal["path", "query", "header", "body"]


class FilterCondition(CamelModel):
    id: str | None = None
    field: str
    operator: FilterOperator
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        return v


class FieldMapping(CamelModel):
    id: str | None = None
    source_field: str
    target_field: str
    enabled: bool = True


class DataTransformation(CamelModel):
    """Filter/sort/limit/select configuration attached to one integration."""

    filters: list[FilterCondition] = Field(default_factory=list)
    filter_logic: Literal["and", "or"] = "and"
    field_mappings: list[FieldMapping] = Field(default_factory=list)
    select_fields: list[str] = Field(default_factory=list)
    limit: int | None = None
    sort_field: str | None = None
    sort_order: Literal["asc", "desc"] = "asc"


class GlobalApiVariable(CamelModel):
    """A named value populated from an external data fetch."""

    name: str
    data: Any = None
    data_type: GlobalDataType = "object"
    last_fetched: str | None = None
    field_schema: dict[str, str] | None = Field(default=None, alias="schema")
    raw_data: Any = None


class ApiParam(CamelModel):
    name: str
    label: str = ""
    required: bool = True
    location: ParamLocation = "query"
    description: str | None = None


class ApiTemplate(CamelModel):
    """A reusable description of an external API call."""

    id: str
    name: str
    url: str
    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    required_params: list[ApiParam] = Field(default_factory=list)
    body_template: str | None = None


class ApiRequest(CamelModel):
    url: str
    method: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None


class GlobalApiIntegration(CamelModel):
    """One template-level integration whose response becomes a global variable."""

    id: str
    name: str
    template_id: str
    param_values: dict[str, str] = Field(default_factory=dict)
    variable_name: str
    enabled: bool = True
    transformation: DataTransformation | None = None
