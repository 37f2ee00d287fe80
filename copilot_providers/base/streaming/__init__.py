"""Streaming package.

Exposes the SSE framing helpers and the ``ChatStream`` iterator under a
single namespace.
"""

from .sse import SSEEvent, SSELineDecoder, parse_data_line
from .chat_stream import ChatStream

__all__ = [
    "SSEEvent",
    "SSELineDecoder",
    "parse_data_line",
    "ChatStream",
]
