"""WorkspaceContext Protocol (single-class module).

Narrow file/workspace accessor consumed by chat context assembly.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class WorkspaceContext(Protocol):
    """Read-only view of the workspace used to enrich chat prompts.

    Implementations own size limits, ignore rules and error rendering; both
    methods return text that is inserted into the prompt as-is.
    """

    async def get_file_context(self, path: str) -> str:  # pragma: no cover - interface
        """Return (possibly truncated) content of ``path``."""
        ...

    async def get_workspace_tree(self) -> str:  # pragma: no cover - interface
        """Return a rendered directory tree of the workspace."""
        ...
