"""Models parts package public surface.

Re-exports individual DTOs so callers can import from
``copilot_providers.base.models_parts`` if needed, while
``copilot_providers.base.models`` remains the primary stable import path.
"""

from .message import ChatMessage, Role
from .chat_request import ChatRequest
from .completion_request import CompletionRequest
from .completion_response import Choice, CompletionResponse, Delta, StreamChunk

__all__ = [
    "ChatMessage",
    "Role",
    "ChatRequest",
    "CompletionRequest",
    "Choice",
    "CompletionResponse",
    "Delta",
    "StreamChunk",
]
