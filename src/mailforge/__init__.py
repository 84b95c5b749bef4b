"""mailforge: compile section-tree email templates into preview and production markup."""

from mailforge.compiler import compile_template, load_template
from mailforge.exceptions import FetchError, MailforgeError, TemplateLoadError
from mailforge.global_variables import resolve_global_variables
from mailforge.registry import build_registry
from mailforge.renderer import render_preview, render_production
from mailforge.schemas import (
    CompiledTemplate,
    DataTransformation,
    EmailTemplate,
    GlobalApiVariable,
    Section,
    SectionKind,
    TemplateVariable,
    ValidationIssue,
)
from mailforge.transform import apply_transformation
from mailforge.validation import validate

__all__ = [
    "CompiledTemplate",
    "DataTransformation",
    "EmailTemplate",
    "FetchError",
    "GlobalApiVariable",
    "MailforgeError",
    "Section",
    "SectionKind",
    "TemplateLoadError",
    "TemplateVariable",
    "ValidationIssue",
    "apply_transformation",
    "build_registry",
    "compile_template",
    "load_template",
    "render_preview",
    "render_production",
    "resolve_global_variables",
    "validate",
]
