"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose stable cancellation constructs via the canonical
``copilot_providers.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts`` for organization.

Notes
-----
- ``CancellationToken`` enables cooperative cancellation signalling across
	completion requests and chat streams. Cancellation is monotonic: a token
	cannot be un-cancelled and keeps the first reason it received.
- ``CancellationToken.any_of`` merges sources with first-wins semantics.
- ``deadline_token`` / ``wait_cancellable`` bridge tokens into ``asyncio``.
- ``CancelledError`` is raised by operations that observe a cancellation request.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken
from .cancellation_parts.async_support import TIMEOUT_REASON, deadline_token, wait_cancellable

__all__ = [
    "CancellationToken",
    "CancelledError",
    "TIMEOUT_REASON",
    "deadline_token",
    "wait_cancellable",
]
