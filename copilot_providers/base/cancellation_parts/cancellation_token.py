"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class used by the API client and the
completion pipeline to terminate in-flight requests and streams. Tokens are
monotonic: once cancelled they stay cancelled and keep the first reason.
"""

from __future__ import annotations

from contextlib import suppress
from threading import Lock
from typing import Callable, List, Optional

from .state import State
from .cancelled_error import CancelledError


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe for basic ``cancel`` + ``raise_if_cancelled`` usage. Child tokens
    inherit cancellation when the parent is cancelled, and listeners registered
    through ``add_callback`` are invoked once on the cancel transition.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @classmethod
    def any_of(cls, *sources: "CancellationToken | None") -> "CancellationToken":
        """Return a token cancelled by whichever source fires first.

        ``None`` sources are ignored so callers can pass an optional external
        token directly. The merged token keeps the reason of the first source.
        """
        merged = cls()
        for source in sources:
            if source is not None:
                source.link_child(merged)
        return merged

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation and cascade to children."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = list(self._children)
            callbacks = list(self._state.callbacks)
            self._state.callbacks.clear()
        for callback in callbacks:
            with suppress(Exception):
                callback(reason)
        for child in children:
            child.cancel(reason)

    def add_callback(self, callback: Callable[[Optional[str]], None]) -> Callable[[], None]:
        """Register ``callback(reason)`` for the cancel transition.

        Invoked immediately when the token is already cancelled. Returns a
        zero-argument function that unregisters the callback.
        """
        with self._lock:
            if not self._state.cancelled:
                self._state.callbacks.append(callback)

                def _remove() -> None:
                    with self._lock:
                        with suppress(ValueError):
                            self._state.callbacks.remove(callback)

                return _remove
            reason = self._state.reason
        callback(reason)
        return lambda: None

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            reason = self._state.reason or "cancelled"
            raise CancelledError(f"operation cancelled ({reason})", reason=reason)

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken"]
