"""Template compilation endpoints."""

from fastapi import APIRouter

from mailforge.compiler import compile_template, load_template, render_subject_preview
from mailforge.global_variables import resolve_global_variables
from mailforge.integrations import fetch_global_variable
from mailforge.placeholders import to_production_syntax
from mailforge.registry import build_registry
from mailforge.renderer import render_preview, render_production
from mailforge.schemas import CompiledTemplate, GlobalApiVariable
from mailforge.transform import apply_transformation
from mailforge.utils.logging_config import get_logger
from mailforge.validation import format_validation_errors, has_blocking_errors, validate
from server.models import (
    ErrorResponse,
    FetchRequest,
    RenderResponse,
    ResolveRequest,
    ResolveResponse,
    TemplateRequest,
    TransformRequest,
    TransformResponse,
    ValidateResponse,
    VariablesResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api")

COMMON_RESPONSES = {422: {"model": ErrorResponse, "description": "Invalid template document"}}


@router.post("/variables", response_model=VariablesResponse, responses=COMMON_RESPONSES)
async def api_variables(request: TemplateRequest) -> VariablesResponse:
    """Return the deduplicated variable registry of a template.

    **Returns**

    - **VariablesResponse**: Variables ordered subject, header, sections, footer

    """
    template = load_template(request.template)
    variables = build_registry(template.subject, template.header, template.sections, template.footer)
    return VariablesResponse(variables=variables)


@router.post("/render/preview", response_model=RenderResponse, responses=COMMON_RESPONSES)
async def api_render_preview(request: TemplateRequest) -> RenderResponse:
    """Render the human-readable preview with defaults and runtime overrides substituted."""
    template = load_template(request.template)
    return RenderResponse(
        subject=render_subject_preview(
            template.subject, request.runtime_values, global_variables=template.global_variables
        ),
        html=render_preview(
            template.all_sections(), request.runtime_values, global_variables=template.global_variables
        ),
    )


@router.post("/render/production", response_model=RenderResponse, responses=COMMON_RESPONSES)
async def api_render_production(request: TemplateRequest) -> RenderResponse:
    """Render the server-template markup with loop and interpolation directives."""
    template = load_template(request.template)
    return RenderResponse(
        subject=to_production_syntax(template.subject, subject=True),
        html=render_production(template.all_sections()),
    )


@router.post("/validate", response_model=ValidateResponse, responses=COMMON_RESPONSES)
async def api_validate(request: TemplateRequest) -> ValidateResponse:
    """Validate a template; ``valid`` is false when any issue blocks saving."""
    template = load_template(request.template)
    issues = validate(
        template.name,
        template.subject,
        template.all_sections(),
        global_variables=template.global_variables,
    )
    if issues:
        logger.info("Template {!r} has {} validation issues", template.name, len(issues))
    return ValidateResponse(
        valid=not has_blocking_errors(issues),
        issues=issues,
        summary=format_validation_errors(issues),
    )


@router.post("/compile", response_model=CompiledTemplate, responses=COMMON_RESPONSES)
async def api_compile(request: TemplateRequest) -> CompiledTemplate:
    """Compile registry, preview, production markup, bindings and issues in one call."""
    return compile_template(load_template(request.template), request.runtime_values)


@router.post("/transform", response_model=TransformResponse)
async def api_transform(request: TransformRequest) -> TransformResponse:
    """Apply a filter/sort/limit/select transformation to a collection."""
    return TransformResponse(data=apply_transformation(request.data, request.transformation))


@router.post("/resolve", response_model=ResolveResponse)
async def api_resolve(request: ResolveRequest) -> ResolveResponse:
    """Resolve global-variable placeholders inside a text."""
    return ResolveResponse(text=resolve_global_variables(request.text, request.global_variables))


@router.post(
    "/integrations/fetch",
    response_model=GlobalApiVariable,
    responses={502: {"model": ErrorResponse, "description": "Upstream API failure"}},
)
async def api_fetch_integration(request: FetchRequest) -> GlobalApiVariable:
    """Call an integration's API once and return the resulting global variable."""
    return await fetch_global_variable(request.integration, request.api_template)
