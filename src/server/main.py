"""FastAPI application for the mailforge template service."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from mailforge.exceptions import FetchError, TemplateLoadError
from mailforge.utils.logging_config import get_logger
from server.routers import templates_router
from server.server_config import APP_DESCRIPTION, APP_TITLE, APP_VERSION, MAX_BODY_BYTES

logger = get_logger(__name__)

app = FastAPI(title=APP_TITLE, description=APP_DESCRIPTION, version=APP_VERSION)
app.include_router(templates_router)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    """Reject requests whose declared body exceeds ``MAX_BODY_BYTES``."""
    content_length = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit() and int(content_length) > MAX_BODY_BYTES:
        return JSONResponse(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            content={"error": f"Request body exceeds {MAX_BODY_BYTES} bytes"},
        )
    return await call_next(request)


@app.exception_handler(TemplateLoadError)
async def template_load_error_handler(request: Request, exc: TemplateLoadError) -> JSONResponse:
    logger.warning("Rejected template on {}: {}", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, content={"error": str(exc)})


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
    logger.warning("Upstream fetch failed on {}: {}", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"error": str(exc)})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify that the server is running."""
    return {"status": "healthy"}
