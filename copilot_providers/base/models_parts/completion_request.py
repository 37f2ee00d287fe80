"""
CompletionRequest DTO for single-shot ``/completions`` calls.

One instance is built per fetch attempt and never mutated. ``cancellation``
is the request token owned by the completion pipeline; the client merges it
with its own deadline.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..cancellation import CancellationToken

MAX_TEMPERATURE = 2.0


def validate_sampling(max_tokens: int, temperature: float) -> None:
    """Reject sampling parameters the endpoint would refuse.

    Raises:
        ValueError: ``max_tokens`` is not a positive integer or
            ``temperature`` is outside ``[0, 2]``.
    """
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
        raise ValueError(f"max_tokens must be a positive integer, got {max_tokens!r}")
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        raise ValueError(f"temperature must be a number, got {temperature!r}")
    if not 0.0 <= temperature <= MAX_TEMPERATURE:
        raise ValueError(f"temperature must be within [0, {MAX_TEMPERATURE:g}], got {temperature!r}")


@dataclass(frozen=True)
class CompletionRequest:
    """Single-shot completion request.

    Attributes:
        prompt: Full prompt text.
        max_tokens: Upper bound on generated tokens.
        temperature: Sampling temperature.
        cancellation: Optional token that aborts the request when cancelled.
    """

    prompt: str
    max_tokens: int
    temperature: float
    cancellation: Optional[CancellationToken] = None

    def __post_init__(self) -> None:
        if not isinstance(self.prompt, str):
            raise ValueError("prompt must be a string")
        validate_sampling(self.max_tokens, self.temperature)

    def to_payload(self, model: str) -> Dict[str, Any]:
        """Return the JSON body for ``POST /completions``."""
        return {
            "model": model,
            "prompt": self.prompt,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": False,
        }


__all__ = [
    "CompletionRequest",
    "validate_sampling",
]
