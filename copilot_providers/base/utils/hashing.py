"""Deterministic content hashing for cache partitioning.

``compute_hash`` is a coroutine so callers on the event loop can treat it the
same way regardless of which primitive produced the digest. SHA-256 from
``hashlib`` is the primary primitive; when it is unavailable (for example a
restricted crypto policy raising on construction) the djb2 accumulator below
produces a digest of the same shape. Collision resistance is best-effort only.
"""
from __future__ import annotations

import hashlib
import logging

from ..constants import EMPTY_HASH_SENTINEL
from ..logging import get_logger, log_event

_logger = get_logger("copilot.hashing")

_DIGEST_HEX_LEN = 64
_MASK_64 = (1 << 64) - 1


def djb2_hex(content: str) -> str:
    """Return a 64-char hex djb2 digest of ``content`` (``h = h * 33 ^ c``)."""
    h = 5381
    for ch in content:
        h = ((h * 33) ^ ord(ch)) & _MASK_64
    return format(h, "x").zfill(_DIGEST_HEX_LEN)


async def compute_hash(content: str) -> str:
    """Return a hex digest of ``content``; never raises.

    Empty input maps to the fixed sentinel ``"0"``.
    """
    if not content:
        return EMPTY_HASH_SENTINEL
    try:
        return hashlib.sha256(content.encode("utf-8")).hexdigest()
    except Exception as exc:  # noqa: BLE001 - any primitive failure falls back
        log_event(_logger, "hash.fallback", level=logging.WARNING, error=str(exc), algorithm="djb2")
        return djb2_hex(content)


__all__ = ["compute_hash", "djb2_hex"]
