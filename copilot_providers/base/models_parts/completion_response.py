"""
Pydantic models for upstream completion payloads.

``CompletionResponse`` parses the ``/completions`` body
(``{"choices": [{"text": ...}]}``) and ``StreamChunk`` parses one SSE record
from ``/chat/completions`` (``{"choices": [{"delta": {"content": ...}}]}``).
Unknown fields are ignored so provider-specific extras do not fail parsing.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Delta(_Upstream):
    content: Optional[str] = None
    role: Optional[str] = None


class Choice(_Upstream):
    index: int = 0
    text: Optional[str] = None
    delta: Optional[Delta] = None
    finish_reason: Optional[str] = None


class CompletionResponse(_Upstream):
    """Body of a non-streamed completion."""

    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[Choice] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Text of the first choice, or ``""`` when absent."""
        if not self.choices:
            return ""
        return self.choices[0].text or ""


class StreamChunk(_Upstream):
    """One decoded ``data:`` record of a streamed chat completion."""

    choices: List[Choice] = Field(default_factory=list)

    @property
    def content(self) -> str:
        """``choices[0].delta.content`` or ``""``."""
        if not self.choices or self.choices[0].delta is None:
            return ""
        return self.choices[0].delta.content or ""


__all__ = [
    "Choice",
    "CompletionResponse",
    "Delta",
    "StreamChunk",
]
