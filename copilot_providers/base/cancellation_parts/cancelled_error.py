"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
in client operations. Kept isolated to satisfy one-class-per-file policy.
"""

from __future__ import annotations

from typing import Optional


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    This specialized error distinguishes cooperative cancellation from other
    runtime failures, enabling targeted handling (e.g., suppress log noise,
    degrade to an empty completion, or avoid reporting to the circuit breaker).

    Attributes:
        reason: Short machine-friendly cause. The client uses ``"cancelled"``
            for caller aborts, ``"timeout"`` for deadline aborts and
            ``"superseded"`` when a newer request replaced this one.
    """

    def __init__(self, message: str = "operation cancelled", *, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.reason = reason or "cancelled"

    @property
    def timed_out(self) -> bool:
        """Whether the cancellation was triggered by a deadline."""
        return self.reason == "timeout"


__all__ = ["CancelledError"]
