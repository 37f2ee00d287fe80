"""CredentialStore Protocol (single-class module).

Secret lookup used by the client to resolve the bearer token.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class CredentialStore(Protocol):
    """Named secret lookup. Absence is reported as ``None``, never raised."""

    def get(self, name: str) -> Optional[str]:  # pragma: no cover - interface
        """Return the secret stored under ``name`` or ``None``."""
        ...
