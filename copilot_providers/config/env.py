"""copilot_providers.config.env
===========================

Environment variable mapping for settings and the API credential.

Purpose
-------
- Single source of truth mapping configuration keys to ``COPILOT_*``
  environment variables, with the parser used for each.
- ``EnvCredentialStore``: a ``CredentialStore`` that resolves the API key from
  ``COPILOT_API_KEY`` (alias ``OPENAI_API_KEY``), canonical name first.

Failure Modes
-------------
- Helpers never raise on unset variables; lookups return ``None``.
- Placeholder values (``changeme``, ``example``...) are treated as unset.
- Values that fail to parse are skipped by the caller with a warning.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from ..base.constants import SECRET_KEY


def parse_list(raw: str) -> list:
    """Split a comma-separated value into trimmed, non-empty items."""
    return [item.strip() for item in raw.split(",") if item.strip()]


# Configuration key -> (env var, parser)
ENV_SETTINGS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    "api.baseUrl": ("COPILOT_API_BASE_URL", str),
    "api.model": ("COPILOT_API_MODEL", str),
    "api.maxTokens": ("COPILOT_API_MAX_TOKENS", int),
    "api.temperature": ("COPILOT_API_TEMPERATURE", float),
    "autocomplete.debounceMs": ("COPILOT_DEBOUNCE_MS", int),
    "autocomplete.supportedLanguages": ("COPILOT_SUPPORTED_LANGUAGES", parse_list),
    "cache.ttlSeconds": ("COPILOT_CACHE_TTL_SECONDS", int),
    "chat.maxHistoryMessages": ("COPILOT_CHAT_MAX_HISTORY", int),
    "logging.level": ("COPILOT_LOG_LEVEL", str),
}

CONFIG_FILE_ENV = "COPILOT_CONFIG_FILE"

# Secret name -> ordered env var candidates (canonical first)
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    SECRET_KEY: ("COPILOT_API_KEY", "OPENAI_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_env_var_candidates(name: str) -> Iterable[str]:
    """Yield acceptable environment variable names for a secret, canonical first."""
    yield from ENV_ALIASES.get(name, ())


def resolve_secret(name: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first real value, else ``(None, None)``."""
    env = os.environ if environ is None else environ
    for var in get_env_var_candidates(name):
        val = env.get(var)
        if val and val.strip() and not is_placeholder(val):
            return val.strip(), var
    return None, None


class EnvCredentialStore:
    """``CredentialStore`` backed by the process environment.

    ``store``/``delete`` write to the canonical variable of this process only;
    they exist so the CLI can set a key for the current run.
    """

    def __init__(self, environ: Optional[Dict[str, str]] = None) -> None:
        self._env = os.environ if environ is None else environ

    def get(self, name: str) -> Optional[str]:
        value, _ = resolve_secret(name, self._env)
        return value

    def store(self, name: str, value: str) -> None:
        candidates = tuple(get_env_var_candidates(name))
        if not candidates:
            raise KeyError(name)
        self._env[candidates[0]] = value.strip()

    def delete(self, name: str) -> None:
        for var in get_env_var_candidates(name):
            self._env.pop(var, None)


__all__ = [
    "ENV_SETTINGS",
    "parse_list",
    "ENV_ALIASES",
    "CONFIG_FILE_ENV",
    "EnvCredentialStore",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_secret",
]
