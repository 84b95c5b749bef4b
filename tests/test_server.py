"""Tests for the FastAPI template service."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from mailforge.exceptions import FetchError
from mailforge.schemas import GlobalApiVariable
from server.main import app

pytestmark = pytest.mark.api


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealth:
    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestTemplateEndpoints:
    """Tests for the /api template endpoints."""

    def test_variables(self, client: TestClient, template_document: dict[str, Any]) -> None:
        response = client.post("/api/variables", json={"template": template_document})
        assert response.status_code == 200
        variables = response.json()["variables"]
        assert variables[0]["variableName"] == "projectName"
        assert variables[0]["source"] == "subject"

    def test_render_preview_with_runtime_values(self, client: TestClient, template_document: dict[str, Any]) -> None:
        response = client.post(
            "/api/render/preview",
            json={"template": template_document, "runtimeValues": {"reportDate": "Monday"}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["subject"] == "Status for {{projectName}} on Monday"
        assert "<h1>Apollo update</h1>" in body["html"]

    def test_render_production(self, client: TestClient, template_document: dict[str, Any]) -> None:
        response = client.post("/api/render/production", json={"template": template_document})
        assert response.status_code == 200
        body = response.json()
        assert body["subject"].startswith('Status for <th:block th:utext="${projectName}"/>')
        assert '<li th:each="item : ${items_actions}">' in body["html"]

    def test_validate_reports_blocking_errors(self, client: TestClient, template_document: dict[str, Any]) -> None:
        template_document["sections"][0]["content"] = "<h1>{{unknown}}</h1>"
        response = client.post("/api/validate", json={"template": template_document})
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is False
        assert body["issues"][0]["category"] == "binding"
        assert body["issues"][0]["sectionId"] == "sec-title"
        assert body["summary"].startswith("Section: heading1:")

    def test_compile(self, client: TestClient, template_document: dict[str, Any]) -> None:
        response = client.post("/api/compile", json={"template": template_document})
        assert response.status_code == 200
        body = response.json()
        assert body["issues"] == []
        assert body["bindings"]["items_actions"] == ["Ship it", "Write docs"]
        assert "productionHtml" in body

    def test_invalid_template_returns_error_body(self, client: TestClient) -> None:
        response = client.post("/api/compile", json={"template": {"sections": [{"id": "s1", "type": "marquee"}]}})
        assert response.status_code == 422
        assert "Invalid template document" in response.json()["error"]

    def test_oversized_body_is_rejected(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("server.main.MAX_BODY_BYTES", 10)
        response = client.post("/api/compile", json={"template": {"name": "far too long for the limit"}})
        assert response.status_code == 413
        assert "error" in response.json()


class TestDataEndpoints:
    """Tests for transform, resolve and integration fetch."""

    def test_transform(self, client: TestClient) -> None:
        response = client.post(
            "/api/transform",
            json={
                "data": [{"n": "b", "v": 2}, {"n": "a", "v": 1}, {"n": "c", "v": 3}],
                "transformation": {
                    "filters": [{"field": "v", "operator": "greater_than", "value": "1"}],
                    "sortField": "n",
                    "limit": 1,
                },
            },
        )
        assert response.status_code == 200
        assert response.json() == {"data": [{"n": "b", "v": 2}]}

    def test_resolve(self, client: TestClient) -> None:
        response = client.post(
            "/api/resolve",
            json={
                "text": "{{acct.name}} / {{acct}}",
                "globalVariables": {"acct": {"name": "acct", "data": {"name": "Acme", "id": 7}}},
            },
        )
        assert response.json() == {"text": 'Acme / {"name":"Acme","id":7}'}

    def test_fetch_integration(self, client: TestClient) -> None:
        payload = {
            "integration": {"id": "i", "name": "n", "templateId": "t", "variableName": "issues"},
            "apiTemplate": {"id": "t", "name": "T", "url": "https://api.example.com/issues"},
        }
        variable = GlobalApiVariable(name="issues", data=[{"key": "A-1"}], data_type="list")
        with patch("server.routers.templates.fetch_global_variable", AsyncMock(return_value=variable)):
            response = client.post("/api/integrations/fetch", json=payload)
        assert response.status_code == 200
        assert response.json()["data"] == [{"key": "A-1"}]

    def test_fetch_failure_maps_to_bad_gateway(self, client: TestClient) -> None:
        payload = {
            "integration": {"id": "i", "name": "n", "templateId": "t", "variableName": "issues"},
            "apiTemplate": {"id": "t", "name": "T", "url": "https://api.example.com/issues"},
        }
        with patch(
            "server.routers.templates.fetch_global_variable",
            AsyncMock(side_effect=FetchError("Failed to fetch https://api.example.com/issues")),
        ):
            response = client.post("/api/integrations/fetch", json=payload)
        assert response.status_code == 502
        assert response.json() == {"error": "Failed to fetch https://api.example.com/issues"}
