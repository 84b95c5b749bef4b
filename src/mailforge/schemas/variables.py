"""Template variable registry models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

VariableType = Literal["text", "number", "date", "email", "url", "list", "table"]
VariableSource = Literal["subject", "header", "section", "footer"]

# Display priority when the same name appears in several places.
SOURCE_ORDER: dict[str, int] = {"subject": 0, "header": 1, "section": 2, "footer": 3}


class TemplateVariable(BaseModel):
    """A registry entry discovered by scanning a template.

    Attributes:
        name: Unique key within one template.
        label: Human-readable label derived from the name.
        type: Inferred value type.
        default_value: The first defining section's value, serialized.
        is_required: True only for variables found in the subject line.
        source_section_id: Section the variable was first seen in.
        source: Where the variable was first seen.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="variableName")
    label: str = Field(..., alias="variableLabel")
    type: VariableType = Field(default="text", alias="variableType")
    default_value: str | None = Field(default=None, alias="defaultValue")
    is_required: bool = Field(default=False, alias="isRequired")
    placeholder: str | None = None
    source_section_id: str | None = Field(default=None, alias="sectionId")
    source: VariableSource = "section"

    def to_request(self) -> dict[str, Any]:
        """Payload shape used by the template-save request."""
        request: dict[str, Any] = {
            "variableName": self.name,
            "variableLabel": self.label,
            "variableType": self.type,
            "isRequired": self.is_required,
        }
        if self.default_value:
            request["defaultValue"] = self.default_value
        if self.placeholder:
            request["placeholder"] = self.placeholder
        if self.source_section_id:
            request["sectionId"] = self.source_section_id
        return request
