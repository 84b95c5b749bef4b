"""External API integrations that populate global variables."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Final, Mapping
from urllib.parse import quote

import httpx

from mailforge.config import MAILFORGE_FETCH_TIMEOUT_S, MAILFORGE_USER_AGENT
from mailforge.exceptions import FetchError
from mailforge.global_variables import detect_schema
from mailforge.schemas import (
    ApiRequest,
    ApiTemplate,
    DataTransformation,
    GlobalApiIntegration,
    GlobalApiVariable,
)
from mailforge.transform import apply_transformation

logger = logging.getLogger(__name__)

_PARAM_RE = re.compile(r"\{(\w+)\}")
_MAX_REDIRECTS: Final[int] = 5


def replace_params(template: str, params: Mapping[str, str]) -> str:
    """Fill ``{param}`` slots; unknown or empty params keep their slot."""
    return _PARAM_RE.sub(lambda match: params.get(match.group(1)) or match.group(0), template)


def build_api_request(template: ApiTemplate, param_values: Mapping[str, str]) -> ApiRequest:
    """Build the concrete request for ``template`` from user-supplied parameters.

    Path params fill ``{name}`` slots in the URL, query params are appended
    URL-encoded, header params fill header templates and body params fill
    ``body_template`` (POST/PUT) or become a JSON object.
    """
    by_location: dict[str, dict[str, str]] = {"path": {}, "query": {}, "header": {}, "body": {}}
    for param in template.required_params:
        value = param_values.get(param.name)
        if value:
            by_location[param.location][param.name] = value

    url = replace_params(template.url, by_location["path"])
    query = "&".join(
        f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in by_location["query"].items()
    )
    if query:
        url += ("&" if "?" in url else "?") + query

    headers = {key: replace_params(value, by_location["header"]) for key, value in template.headers.items()}

    body: str | None = None
    if template.body_template and template.method in ("POST", "PUT"):
        body = replace_params(template.body_template, by_location["body"])
    elif by_location["body"]:
        body = json.dumps(by_location["body"])

    return ApiRequest(url=url, method=template.method, headers=headers, body=body)


def missing_required_params(template: ApiTemplate, param_values: Mapping[str, str]) -> list[str]:
    """Labels of required params without a value."""
    return [
        param.label or param.name
        for param in template.required_params
        if param.required and not param_values.get(param.name)
    ]


def data_type_for(data: Any) -> str:
    if isinstance(data, list):
        if data and all(isinstance(item, str) for item in data):
            return "stringList"
        return "list"
    return "object"


def build_global_variable(
    name: str,
    raw_data: Any,
    transformation: DataTransformation | None = None,
    *,
    fetched_at: datetime | None = None,
) -> GlobalApiVariable:
    """Run the transformation over a fetched payload and wrap it as a global variable."""
    data = apply_transformation(raw_data, transformation)
    fetched_at = fetched_at or datetime.now(timezone.utc)
    return GlobalApiVariable(
        name=name,
        data=data,
        data_type=data_type_for(data),
        last_fetched=fetched_at.isoformat(),
        field_schema=detect_schema(data),
        raw_data=raw_data,
    )


async def fetch_global_variable(
    integration: GlobalApiIntegration,
    template: ApiTemplate,
    *,
    client: httpx.AsyncClient | None = None,
) -> GlobalApiVariable:
    """Fetch one integration's payload and turn it into a global variable.

    A single request is made; there is no retry.

    Raises:
        FetchError: On missing params, transport errors, HTTP errors or a
            non-JSON response.
    """
    missing = missing_required_params(template, integration.param_values)
    if missing:
        raise FetchError(f"Missing required parameters for {template.name}: {', '.join(missing)}")

    request = build_api_request(template, integration.param_values)

    async def do_fetch(http_client: httpx.AsyncClient) -> Any:
        try:
            response = await http_client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
            response.raise_for_status()
        except (httpx.RequestError, httpx.HTTPStatusError) as exc:
            raise FetchError(f"Failed to fetch {request.url}: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Response from {request.url} is not valid JSON") from exc

    if client is not None:
        payload = await do_fetch(client)
    else:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(MAILFORGE_FETCH_TIMEOUT_S),
            headers={"User-Agent": MAILFORGE_USER_AGENT},
            follow_redirects=True,
            max_redirects=_MAX_REDIRECTS,
        ) as new_client:
            payload = await do_fetch(new_client)

    logger.info("Fetched global variable %s from %s", integration.variable_name, template.name)
    return build_global_variable(integration.variable_name, payload, integration.transformation)
