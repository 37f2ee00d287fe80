"""In-memory implementations of KeyedStore and CredentialStore.

Simple reference implementations using Python dictionaries. Suitable for
development, testing, and single-process sessions where workspace state does
not need to survive a restart.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional


class InMemoryKeyedStore:
    """Dictionary-backed workspace state.

    Values are deep-copied on the way in and out so callers cannot mutate
    stored entries in place, mirroring the behavior of a serializing store.

    Thread safety: Not thread-safe. Use locks if accessing from multiple threads.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        """Initialize the store, optionally seeded with ``initial`` entries."""
        self._data: Dict[str, Any] = {k: copy.deepcopy(v) for k, v in (initial or {}).items()}

    def get(self, key: str) -> Optional[Any]:
        """Return a copy of the value stored under ``key`` or ``None``."""
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        """Store a copy of ``value`` under ``key``."""
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._data.pop(key, None)

    def list_keys(self) -> List[str]:
        """Return all stored keys in insertion order."""
        return list(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)


class InMemoryCredentialStore:
    """Dictionary-backed secret store (tests, CLI sessions)."""

    def __init__(self, secrets: Optional[Mapping[str, str]] = None) -> None:
        self._secrets: Dict[str, str] = dict(secrets or {})

    def get(self, name: str) -> Optional[str]:
        value = self._secrets.get(name)
        return value or None

    def store(self, name: str, value: str) -> None:
        self._secrets[name] = value

    def delete(self, name: str) -> None:
        self._secrets.pop(name, None)

    def names(self) -> Iterable[str]:
        return tuple(self._secrets)


__all__ = ["InMemoryKeyedStore", "InMemoryCredentialStore"]
