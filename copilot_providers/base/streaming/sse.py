"""Server-sent-event framing for streamed chat completions.

Two pure pieces, no I/O:

``SSELineDecoder``
    Turns arbitrary byte chunks into complete text lines. UTF-8 decoding is
    incremental, so a multi-byte character split across chunks is decoded
    once both halves arrive. The trailing partial line is carried over to the
    next ``feed``.

``parse_data_line``
    Classifies one complete line: lines without the ``data: `` prefix are
    skipped, ``data: [DONE]`` terminates the stream, anything else is parsed
    as a ``StreamChunk`` and yields ``choices[0].delta.content``.
"""
from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import List, Literal

from pydantic import ValidationError

from ..constants import SSE_DATA_PREFIX, SSE_DONE_SENTINEL
from ..errors import ProtocolError
from ..models import StreamChunk

EventKind = Literal["skip", "content", "done"]


@dataclass(frozen=True)
class SSEEvent:
    kind: EventKind
    text: str = ""


SKIP = SSEEvent("skip")
DONE = SSEEvent("done")


class SSELineDecoder:
    """Incremental bytes-to-lines decoder splitting on ``\\n`` or ``\\r\\n``."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> List[str]:
        """Decode ``chunk`` and return every line it completed."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return [_strip_cr(line) for line in lines]

    def flush(self) -> List[str]:
        """Return the final unterminated line, if any, and reset."""
        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        return [_strip_cr(rest)] if rest else []


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def parse_data_line(line: str) -> SSEEvent:
    """Classify one SSE line.

    Raises:
        ProtocolError: the ``data:`` payload is not a valid stream chunk.
    """
    if not line.startswith(SSE_DATA_PREFIX):
        return SKIP
    payload = line[len(SSE_DATA_PREFIX):]
    if payload == SSE_DONE_SENTINEL:
        return DONE
    try:
        chunk = StreamChunk.model_validate_json(payload)
    except ValidationError as exc:
        raise ProtocolError("Malformed SSE data", payload=payload, raw=exc) from exc
    content = chunk.content
    return SSEEvent("content", content) if content else SKIP


__all__ = ["SSEEvent", "SSELineDecoder", "parse_data_line", "SKIP", "DONE"]
