"""Editor-facing document model for inline completion.

``TextDocument`` is the narrow accessor the pipeline needs from the host
editor. ``InMemoryTextDocument`` is the reference implementation used by the
CLI and tests; its ``get_text`` clamps positions to the document the same way
editors do (line to the last line, character to the line length).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable


@dataclass(frozen=True, order=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> "Range":
        return cls(Position(start_line, start_character), Position(end_line, end_character))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@runtime_checkable
class TextDocument(Protocol):
    """Read access to one open document."""

    @property
    def language_id(self) -> str:  # pragma: no cover - interface
        ...

    @property
    def uri(self) -> str:  # pragma: no cover - interface
        ...

    @property
    def line_count(self) -> int:  # pragma: no cover - interface
        ...

    def get_text(self, range: Optional[Range] = None) -> str:  # pragma: no cover - interface
        ...


class InMemoryTextDocument:
    """A ``TextDocument`` over a string."""

    def __init__(self, text: str, language_id: str, uri: str = "untitled:Untitled-1") -> None:
        self._text = text
        self._language_id = language_id
        self._uri = uri
        self._lines: List[str] = text.split("\n")
        offsets = [0]
        for line in self._lines[:-1]:
            offsets.append(offsets[-1] + len(line) + 1)
        self._offsets = offsets

    @property
    def language_id(self) -> str:
        return self._language_id

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_at(self, line: int) -> str:
        return self._lines[line]

    def validate_position(self, position: Position) -> Position:
        if position.line < 0:
            return Position(0, 0)
        if position.line >= len(self._lines):
            last = len(self._lines) - 1
            return Position(last, len(self._lines[last]))
        length = len(self._lines[position.line])
        return Position(position.line, min(max(position.character, 0), length))

    def offset_at(self, position: Position) -> int:
        pos = self.validate_position(position)
        return self._offsets[pos.line] + pos.character

    def get_text(self, range: Optional[Range] = None) -> str:
        if range is None:
            return self._text
        start, end = self.offset_at(range.start), self.offset_at(range.end)
        if end < start:
            start, end = end, start
        return self._text[start:end]


class TriggerKind(IntEnum):
    """How the completion request was triggered."""

    INVOKE = 0  # explicit user request; bypasses debounce
    AUTOMATIC = 1  # typing


@dataclass(frozen=True)
class InlineCompletionContext:
    trigger_kind: TriggerKind = TriggerKind.AUTOMATIC


@dataclass(frozen=True)
class Command:
    """Host command invoked when a suggestion is accepted."""

    title: str
    command: str
    arguments: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class InlineCompletionItem:
    insert_text: str
    range: Range
    command: Optional[Command] = field(default=None)


__all__ = [
    "Position",
    "Range",
    "TextDocument",
    "InMemoryTextDocument",
    "TriggerKind",
    "InlineCompletionContext",
    "Command",
    "InlineCompletionItem",
]
