"""
ChatRequest DTO for streamed chat invocations.

The client maps this request to the ``/chat/completions`` body. The model is
not part of the request; it is read from configuration at send time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .completion_request import validate_sampling
from .message import ChatMessage


@dataclass(frozen=True)
class ChatRequest:
    """Streamed chat request.

    Attributes:
        messages: Ordered chat turns.
        max_tokens: Upper bound on generated tokens.
        temperature: Sampling temperature.
        stream: Whether the endpoint should stream (always True for chat).
    """

    messages: Tuple[ChatMessage, ...]
    max_tokens: int
    temperature: float
    stream: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.messages:
            raise ValueError("chat request needs at least one message")
        validate_sampling(self.max_tokens, self.temperature)

    def to_payload(self, model: str) -> Dict[str, Any]:
        """Return the JSON body for ``POST /chat/completions``."""
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [m.to_dict() for m in self.messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": self.stream,
        }
        payload.update(self.extra)
        return payload


__all__ = [
    "ChatRequest",
]
