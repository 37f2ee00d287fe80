"""
Request and response models (public surface).

This module re-exports the one-class-per-file implementations under
``copilot_providers.base.models_parts``.
"""

from .models_parts.message import ChatMessage, Role
from .models_parts.chat_request import ChatRequest
from .models_parts.completion_request import CompletionRequest
from .models_parts.completion_response import Choice, CompletionResponse, Delta, StreamChunk

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
