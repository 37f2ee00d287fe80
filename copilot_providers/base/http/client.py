"""Async HTTP client factory for the OpenAI-compatible client.

Purpose:
    Build ``httpx.AsyncClient`` instances with the shared baseline transport
    timeout from :func:`get_timeout_config`. Per-request deadlines are not
    enforced here; the API client arms its own deadline tokens.

External dependencies:
    - ``httpx`` for the underlying asynchronous HTTP client.

Lifecycle & cleanup:
    - The caller that creates a client owns it and must ``aclose()`` it.
      ``OpenAICompatClient`` does this for clients it created itself and
      leaves injected clients alone.
    - Tests inject ``httpx.MockTransport`` through ``transport``.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ..timeouts import get_timeout_config


def create_async_client(
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[float] = None,
) -> httpx.AsyncClient:
    """Return a new ``httpx.AsyncClient``.

    Parameters:
        transport: Optional transport override (e.g. ``httpx.MockTransport``).
        timeout: Transport timeout in seconds; defaults to
            ``get_timeout_config().http_timeout_seconds``.
    """
    if timeout is None:
        timeout = get_timeout_config().http_timeout_seconds
    if transport is not None:
        return httpx.AsyncClient(transport=transport, timeout=timeout)
    return httpx.AsyncClient(timeout=timeout)


__all__ = ["create_async_client"]
