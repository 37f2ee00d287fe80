"""Inline completion pipeline package."""

from .document import (
    Command,
    InlineCompletionContext,
    InlineCompletionItem,
    InMemoryTextDocument,
    Position,
    Range,
    TextDocument,
    TriggerKind,
)
from .provider import ACCEPT_COMMAND, CompletionOutcome, InlineCompletionProvider

__all__ = [
    "Command",
    "InlineCompletionContext",
    "InlineCompletionItem",
    "InMemoryTextDocument",
    "Position",
    "Range",
    "TextDocument",
    "TriggerKind",
    "ACCEPT_COMMAND",
    "CompletionOutcome",
    "InlineCompletionProvider",
]
