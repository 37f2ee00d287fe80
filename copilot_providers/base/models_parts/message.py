"""
Chat message DTO sent to the ``/chat/completions`` endpoint.

Defines the ``ChatMessage`` dataclass and the ``Role`` literal. Messages are
plain text only; an ordered sequence of them forms a ``ChatRequest``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal


# Message roles accepted by OpenAI-compatible chat endpoints.
Role = Literal["system", "user", "assistant"]

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    """A single chat turn.

    Attributes:
        role: Author of the message (``"system"``, ``"user"`` or ``"assistant"``).
        content: Plain text body.
    """

    role: Role
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"unsupported chat role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


__all__ = [
    "ChatMessage",
    "Role",
    "ROLES",
]
