"""Expiring key/value cache layered over a workspace ``KeyedStore``.

Entries are stored as ``{"value": ..., "expiry": <epoch ms>}`` under a
namespace prefix. Reads evict lazily: an entry whose expiry has passed is
deleted on the read that observes it and reported absent. Writes are
best-effort: store failures are logged and never propagate, since correctness
never depends on a write having landed before the next read.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, Tuple, TypeVar

from ..constants import CHAT_CACHE_PREFIX, COMPLETION_CACHE_PREFIX
from ..interfaces import KeyedStore
from ..logging import get_logger, log_event

T = TypeVar("T")

CACHE_PREFIXES: Tuple[str, ...] = (COMPLETION_CACHE_PREFIX, CHAT_CACHE_PREFIX)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and its absolute expiry (epoch milliseconds)."""

    value: T
    expiry: float

    def is_expired(self, now_ms: float) -> bool:
        return now_ms > self.expiry

    def to_record(self) -> dict:
        return {"value": self.value, "expiry": self.expiry}

    @classmethod
    def from_record(cls, record: Any) -> Optional["CacheEntry[Any]"]:
        """Rebuild an entry from its stored shape; ``None`` if unrecognized."""
        if isinstance(record, CacheEntry):
            return record
        if not isinstance(record, Mapping) or "expiry" not in record:
            return None
        try:
            return cls(value=record.get("value"), expiry=float(record["expiry"]))
        except (TypeError, ValueError):
            return None


class TTLCache(Generic[T]):
    """Namespaced expiring cache scoped to one workspace session.

    Parameters:
        store: Backing ``KeyedStore`` (shared with other workspace state).
        namespace: Key prefix for this cache; must be one of ``CACHE_PREFIXES``
            for ``clear`` to reach its entries.
        clock: Returns the current time in seconds (``time.time`` by default).
        logger: Optional logger override.
    """

    def __init__(
        self,
        store: KeyedStore,
        *,
        namespace: str = COMPLETION_CACHE_PREFIX,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._namespace = namespace
        self._clock = clock
        self._logger = logger or get_logger("copilot.cache")

    @property
    def namespace(self) -> str:
        return self._namespace

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _full_key(self, key: str) -> str:
        return self._namespace + key

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or ``None`` when absent or expired."""
        full_key = self._full_key(key)
        entry = CacheEntry.from_record(self._store.get(full_key))
        if entry is None:
            return None
        if entry.is_expired(self._now_ms()):
            self._delete(full_key)
            return None
        return entry.value

    def set(self, key: str, value: T, ttl_seconds: float) -> None:
        """Store ``value`` for ``ttl_seconds``; failures are logged, not raised."""
        entry = CacheEntry(value=value, expiry=self._now_ms() + ttl_seconds * 1000.0)
        try:
            self._store.set(self._full_key(key), entry.to_record())
        except Exception as exc:  # noqa: BLE001 - cache writes are best-effort
            log_event(self._logger, "cache.write_failed", level=logging.ERROR, key=key, error=str(exc))

    def clear(self) -> int:
        """Remove every completion/chat cache entry; return how many were removed.

        Keys outside the recognized prefixes are untouched. A failure on one
        key is logged and the remaining keys are still processed.
        """
        try:
            keys = [k for k in self._store.list_keys() if k.startswith(CACHE_PREFIXES)]
        except Exception as exc:  # noqa: BLE001
            log_event(self._logger, "cache.clear_failed", level=logging.ERROR, error=str(exc))
            return 0
        removed = 0
        for k in keys:
            if self._delete(k):
                removed += 1
        log_event(self._logger, "cache.cleared", removed=removed, failed=len(keys) - removed)
        return removed

    def _delete(self, full_key: str) -> bool:
        try:
            self._store.delete(full_key)
            return True
        except Exception as exc:  # noqa: BLE001
            log_event(self._logger, "cache.delete_failed", level=logging.ERROR, key=full_key, error=str(exc))
            return False


__all__ = ["CacheEntry", "TTLCache", "CACHE_PREFIXES"]
