"""Fail-fast error raised while the circuit breaker is cooling down."""
from __future__ import annotations

from .error_code import ErrorCode
from .provider_error import ProviderError


class CircuitOpenError(ProviderError):
    """Request rejected locally; no network I/O was attempted.

    Attributes:
        retry_after_seconds: Remaining cooldown at the time of rejection.
    """

    def __init__(self, message: str, *, retry_after_seconds: float = 0.0, provider: str = "openai_compat") -> None:
        super().__init__(code=ErrorCode.CIRCUIT_OPEN, message=message, provider=provider, retryable=True)
        self.retry_after_seconds = retry_after_seconds


__all__ = ["CircuitOpenError"]
