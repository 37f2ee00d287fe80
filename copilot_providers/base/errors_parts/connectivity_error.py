"""Connectivity error for transport failures and non-success HTTP statuses.

Carries the HTTP ``status`` when the upstream answered, so the circuit breaker
and the classification helpers can tell rate limits and server faults apart
from client-side misuse.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


def _code_for_status(status: Optional[int]) -> ErrorCode:
    """Map an optional HTTP status to a normalized code."""
    # Local import keeps the status table in one place.
    from .classification import _HTTP_STATUS_MAP

    if status is None:
        return ErrorCode.TRANSIENT
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    return ErrorCode.SERVER_ERROR if status >= 500 else ErrorCode.UNKNOWN


class ConnectivityError(ProviderError):
    """Timeout, DNS/TLS failure, invalid probe body, or non-2xx HTTP status."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        provider: str = "openai_compat",
        model: Optional[str] = None,
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=_code_for_status(status),
            message=message,
            provider=provider,
            model=model,
            retryable=status is None or status >= 500 or status == 429,
            raw=raw,
        )
        self.status = status


__all__ = ["ConnectivityError"]
