"""Notifier Protocol (single-class module).

User-visible notification surface (status/warning popups in the host editor).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Surface a short message to the user."""

    def warn(self, message: str) -> None:  # pragma: no cover - interface
        """Show a warning message."""
        ...
