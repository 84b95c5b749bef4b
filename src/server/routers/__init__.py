"""API routers."""

from server.routers.templates import router as templates_router

__all__ = ["templates_router"]
