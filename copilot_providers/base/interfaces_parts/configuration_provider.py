"""ConfigurationProvider Protocol (single-class module).

Synchronous settings lookup with change notification.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class ConfigurationProvider(Protocol):
    """Settings source consumed by the client and the completion pipeline.

    Keys use dotted names (``api.baseUrl``, ``autocomplete.debounceMs``...).
    """

    def get(self, key: str) -> Any:  # pragma: no cover - interface
        """Return the current value for ``key`` (``None`` when unset)."""
        ...

    def on_did_change(self, key: str, listener: Callable[[], None]) -> Callable[[], None]:  # pragma: no cover - interface
        """Invoke ``listener`` when ``key`` (or a child key) changes.

        Returns a zero-argument function that unsubscribes the listener.
        """
        ...
