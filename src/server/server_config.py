"""Configuration for the server."""

from __future__ import annotations

import os

HOST = os.getenv("HOST", "0.0.0.0")  # noqa: S104
PORT = int(os.getenv("PORT", "8000"))
RELOAD = os.getenv("RELOAD", "false").lower() == "true"

# Requests with a larger declared body are rejected before parsing.
MAX_BODY_BYTES = int(os.getenv("MAILFORGE_MAX_BODY_BYTES", str(2 * 1024 * 1024)))

APP_TITLE = "mailforge"
APP_DESCRIPTION = "Compile section-based email templates into preview and server-template markup."
APP_VERSION = "0.1.0"
