"""Local configuration for mailforge."""

from __future__ import annotations

import os


DEFAULT_MAX_NESTING_DEPTH = 16
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_USER_AGENT = "mailforge/0.1"

# Length of the section-id suffix used in generated collection names.
VARIABLE_SUFFIX_LENGTH = 8

# Containers and layout tables deeper than this are not traversed.
MAILFORGE_MAX_NESTING_DEPTH = int(os.getenv("MAILFORGE_MAX_NESTING_DEPTH", str(DEFAULT_MAX_NESTING_DEPTH)))
MAILFORGE_LOG_LEVEL = os.getenv("MAILFORGE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
MAILFORGE_FETCH_TIMEOUT_S = float(os.getenv("MAILFORGE_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
MAILFORGE_USER_AGENT = os.getenv("MAILFORGE_USER_AGENT", DEFAULT_USER_AGENT)
