"""Tests for the in-memory text document used by the completion pipeline."""

from __future__ import annotations

from copilot_providers.completion import InMemoryTextDocument, Position, Range

TEXT = "line0\nline1 text\n\nline3"


def test_line_access_and_count():
    doc = InMemoryTextDocument(TEXT, "python", uri="file:///a.py")
    assert doc.line_count == 4
    assert doc.line_at(1) == "line1 text"
    assert doc.uri == "file:///a.py"
    assert doc.language_id == "python"


def test_get_text_by_range_and_whole():
    doc = InMemoryTextDocument(TEXT, "python")
    assert doc.get_text() == TEXT
    assert doc.get_text(Range.of(0, 2, 1, 5)) == "ne0\nline1"
    assert doc.get_text(Range(Position(1, 0), Position(1, 0))) == ""


def test_positions_are_clamped():
    doc = InMemoryTextDocument(TEXT, "python")
    assert doc.validate_position(Position(1, 99)) == Position(1, 10)
    assert doc.validate_position(Position(42, 0)) == Position(3, 5)
    assert doc.validate_position(Position(-1, 3)) == Position(0, 0)
    assert doc.get_text(Range.of(3, 0, 99, 0)) == "line3"


def test_reversed_range_is_normalized():
    doc = InMemoryTextDocument(TEXT, "python")
    assert doc.get_text(Range.of(1, 5, 0, 2)) == "ne0\nline1"
    assert Range.of(2, 0, 2, 0).is_empty
