"""Test setup for mailforge."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mailforge.schemas import Section  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running the HTTP API tests selectively:
        pytest -m api         # run only API tests
        pytest -m "not api"   # skip API tests
    """
    config.addinivalue_line(
        "markers",
        "api: marks tests that exercise the FastAPI application",
    )


def make_section(section_id: str, kind: str, content: str = "", **variables: Any) -> Section:
    """Build a section from editor-shaped JSON."""
    return Section.model_validate(
        {"id": section_id, "type": kind, "content": content, "variables": variables}
    )


@pytest.fixture
def section_factory():
    """Factory for sections built from editor-shaped JSON."""
    return make_section


@pytest.fixture
def template_document() -> dict[str, Any]:
    """A small but complete template document as the editor stores it."""
    return {
        "name": "Weekly Status",
        "subject": "Status for {{projectName}} on {{reportDate}}",
        "header": {"id": "header", "type": "header", "content": "<div>ACME Corp</div>"},
        "footer": {"id": "footer", "type": "footer", "content": "<div>Sent by {{senderName}}</div>"},
        "sections": [
            {
                "id": "sec-title",
                "type": "heading1",
                "content": "<h1>{{projectName}} update</h1>",
                "variables": {"projectName": "Apollo"},
            },
            {
                "id": "sec-items",
                "type": "labeled-content",
                "content": "",
                "variables": {
                    "label": "Action Items",
                    "contentType": "list",
                    "listVariableName": "items_actions",
                    "items": ["Ship it", "Write docs"],
                },
            },
        ],
        "globalVariables": {},
    }
