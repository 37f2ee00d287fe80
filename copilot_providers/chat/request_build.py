"""Chat request construction.

Builds the ordered message list sent to ``/chat/completions``: a system
message describing the assistant and the active command, the most recent
history turns, and one user message carrying the optional context sections
(selected code, referenced file, workspace tree) followed by the prompt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..base.models import ChatMessage, ChatRequest
from ..config.defaults import CHAT_DEFAULT_ASSISTANT_NAME

DEFAULT_COMMAND = "general chat"


@dataclass(frozen=True)
class CodeSelection:
    """Text selected in the active editor."""

    text: str
    language_id: str


def build_system_prompt(command: Optional[str], assistant_name: str = CHAT_DEFAULT_ASSISTANT_NAME) -> str:
    return (
        f"You are {assistant_name}, a code assistant in your editor.\n"
        "- Be concise and accurate\n"
        "- Use markdown code blocks with language tags\n"
        "- When suggesting code, make it ready to insert\n"
        f"- Command: {command or DEFAULT_COMMAND}"
    )


def recent_history(history: Sequence[ChatMessage], max_history: int) -> List[ChatMessage]:
    """Return the last ``max_history`` user/assistant turns (none when <= 0)."""
    if max_history <= 0:
        return []
    turns = [m for m in history if m.role in ("user", "assistant")]
    return turns[-max_history:]


def build_context_prompt(
    selection: Optional[CodeSelection] = None,
    file_context: Optional[str] = None,
    workspace_tree: Optional[str] = None,
) -> str:
    parts: List[str] = []
    if selection is not None and selection.text:
        lang = selection.language_id
        parts.append(f"## Selected Code ({lang}):\n```{lang}\n{selection.text}\n```\n\n")
    if file_context is not None:
        parts.append(f"## File Context:\n{file_context}\n\n")
    if workspace_tree is not None:
        parts.append(f"## Workspace Structure:\n{workspace_tree}\n\n")
    return "".join(parts)


def build_chat_messages(
    prompt: str,
    *,
    command: Optional[str] = None,
    history: Sequence[ChatMessage] = (),
    max_history: int = 5,
    selection: Optional[CodeSelection] = None,
    file_context: Optional[str] = None,
    workspace_tree: Optional[str] = None,
    assistant_name: str = CHAT_DEFAULT_ASSISTANT_NAME,
) -> List[ChatMessage]:
    """Return ``[system, *history, user]`` for one chat turn."""
    messages = [ChatMessage("system", build_system_prompt(command, assistant_name))]
    messages.extend(recent_history(history, max_history))
    context = build_context_prompt(selection, file_context, workspace_tree)
    messages.append(ChatMessage("user", f"{context}User: {prompt}"))
    return messages


def build_chat_request(messages: Sequence[ChatMessage], *, max_tokens: int, temperature: float) -> ChatRequest:
    return ChatRequest(messages=tuple(messages), max_tokens=max_tokens, temperature=temperature, stream=True)


__all__ = [
    "CodeSelection",
    "DEFAULT_COMMAND",
    "build_system_prompt",
    "recent_history",
    "build_context_prompt",
    "build_chat_messages",
    "build_chat_request",
]
