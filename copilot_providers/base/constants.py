"""Base shared constants for the client and completion pipeline.

Central location to avoid scattering magic strings and default numbers.

Security
--------
This module contains only generic key names and sentinel strings. There are
no credentials or tokens embedded.

# pragma: allowlist secret
"""
from __future__ import annotations

from .. import __version__

# Provider slug used in errors and log contexts
PROVIDER_NAME = "openai_compat"

# Credential store key under which the API key lives
SECRET_KEY = "copilot.apiKey"  # pragma: allowlist secret - key name, not a secret

# Missing credential message (user-visible)
MISSING_API_KEY_ERROR = "API key not configured. Set COPILOT_API_KEY or store 'copilot.apiKey' in the credential store."
MISSING_BASE_URL_ERROR = "API base URL not configured (api.baseUrl)."

# Fixed User-Agent attached to every upstream request
USER_AGENT = f"copilot-providers/{__version__}"

# Keyed-store namespaces recognized by the TTL cache
COMPLETION_CACHE_PREFIX = "copilot.completion:"
CHAT_CACHE_PREFIX = "copilot.chat:"

# SSE framing
SSE_DATA_PREFIX = "data: "
SSE_DONE_SENTINEL = "[DONE]"

# Hasher sentinel for empty input
EMPTY_HASH_SENTINEL = "0"

# Circuit breaker defaults
CIRCUIT_MAX_FAILURES = 5
CIRCUIT_COOLDOWN_SECONDS = 60.0

# Completion context windows (lines)
CACHE_KEY_CONTEXT_LINES = 30
PROMPT_LINES_BEFORE = 50
PROMPT_LINES_AFTER = 5

__all__ = [
    "PROVIDER_NAME",
    "SECRET_KEY",
    "MISSING_API_KEY_ERROR",
    "MISSING_BASE_URL_ERROR",
    "USER_AGENT",
    "COMPLETION_CACHE_PREFIX",
    "CHAT_CACHE_PREFIX",
    "SSE_DATA_PREFIX",
    "SSE_DONE_SENTINEL",
    "EMPTY_HASH_SENTINEL",
    "CIRCUIT_MAX_FAILURES",
    "CIRCUIT_COOLDOWN_SECONDS",
    "CACHE_KEY_CONTEXT_LINES",
    "PROMPT_LINES_BEFORE",
    "PROMPT_LINES_AFTER",
]
