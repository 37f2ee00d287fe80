"""Trailing-edge debounce with a single pending slot.

``Debouncer.wait(delay)`` parks the caller until ``delay`` elapses without a
newer ``wait`` call. Arming replaces the pending slot: the previous waiter is
released immediately with ``False`` (superseded) instead of being left
pending, and only the most recent waiter resolves ``True``.
"""
from __future__ import annotations

import asyncio
from typing import Optional


class Debouncer:
    """Coalesce bursts of events; only the last caller in a burst proceeds."""

    def __init__(self) -> None:
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def pending(self) -> bool:
        """Whether a waiter is currently armed."""
        return self._pending is not None and not self._pending.done()

    def cancel(self) -> None:
        """Disarm the slot, releasing the pending waiter as superseded."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(False)
        self._pending = None

    async def wait(self, delay_seconds: float) -> bool:
        """Arm the slot and wait; return True if this call survived the burst."""
        self.cancel()
        loop = asyncio.get_running_loop()
        fut: asyncio.Future = loop.create_future()
        self._pending = fut
        self._handle = loop.call_later(max(0.0, delay_seconds), _fire, fut)
        try:
            return await fut
        finally:
            if self._pending is fut:
                # Fired, or the awaiting task itself was cancelled.
                if self._handle is not None:
                    self._handle.cancel()
                self._handle = None
                self._pending = None


def _fire(fut: asyncio.Future) -> None:
    if not fut.done():
        fut.set_result(True)


__all__ = ["Debouncer"]
