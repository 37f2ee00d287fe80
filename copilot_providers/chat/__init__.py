"""Chat session package."""

from .request_build import CodeSelection, build_chat_messages
from .session import ChatSession, ChatTurnResult
from .workspace import StaticWorkspaceContext

__all__ = [
    "CodeSelection",
    "build_chat_messages",
    "ChatSession",
    "ChatTurnResult",
    "StaticWorkspaceContext",
]
