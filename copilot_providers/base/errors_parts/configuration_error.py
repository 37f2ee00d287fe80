"""Configuration error raised before any network call is attempted.

Signals a missing credential or endpoint setting. The operation cannot
proceed until the user fixes their settings, so callers surface it verbatim.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class ConfigurationError(ProviderError):
    """Missing or unusable configuration (API key, base URL)."""

    def __init__(self, message: str, *, setting: Optional[str] = None, provider: str = "openai_compat") -> None:
        super().__init__(code=ErrorCode.CONFIGURATION, message=message, provider=provider)
        self.setting = setting


__all__ = ["ConfigurationError"]
