"""Protocol error for malformed upstream payloads.

Raised for a single unparseable SSE record or an unparseable JSON body. Stream
consumers log and skip it at the record level.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class ProtocolError(ProviderError):
    """Upstream sent data that does not match the OpenAI-compatible shape."""

    def __init__(self, message: str, *, payload: Optional[str] = None, raw: Optional[Exception] = None) -> None:
        super().__init__(code=ErrorCode.PROTOCOL, message=message, raw=raw)
        self.payload = payload


__all__ = ["ProtocolError"]
