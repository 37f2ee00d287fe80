"""KeyedStore Protocol (single-class module).

Persistent key/value store backing the TTL cache (workspace-scoped state).
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyedStore(Protocol):
    """Workspace-scoped key/value store with best-effort durability.

    Values must be JSON-compatible (dicts, lists, strings, numbers) so that
    persistent implementations can serialize them. Implementations may raise
    on write failures; the TTL cache logs and swallows those.
    """

    def get(self, key: str) -> Optional[Any]:  # pragma: no cover - interface
        """Return the stored value or ``None`` when absent."""
        ...

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - interface
        """Store ``value`` under ``key``, overwriting unconditionally."""
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - interface
        """Remove ``key``; a missing key is not an error."""
        ...

    def list_keys(self) -> List[str]:  # pragma: no cover - interface
        """Return every key currently stored."""
        ...
