"""Static ``WorkspaceContext`` implementation for the CLI and tests.

Real file and tree access belongs to the host editor; this implementation
serves fixed text, optionally reading files from a root directory with the
same 50-line and 30 KB limits the editor-side accessor applies.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional

MAX_FILE_BYTES = 30 * 1024
MAX_FILE_LINES = 50


class StaticWorkspaceContext:
    def __init__(
        self,
        files: Optional[Mapping[str, str]] = None,
        tree: str = "// No workspace open",
        root: Optional[str] = None,
    ) -> None:
        self._files: Dict[str, str] = dict(files or {})
        self._tree = tree
        self._root = Path(root) if root else None

    async def get_file_context(self, path: str) -> str:
        if path in self._files:
            return _head(self._files[path])
        if self._root is None:
            return f"// File not found or inaccessible: {path}"
        target = Path(path) if Path(path).is_absolute() else self._root / path
        try:
            size = target.stat().st_size
            if size > MAX_FILE_BYTES:
                return f"// File too large: {path} ({size / 1024:.1f}KB)"
            return _head(target.read_text(encoding="utf-8", errors="replace"))
        except OSError as exc:
            return f"// File not found or inaccessible: {path}\n// Error: {exc.strerror or exc}"

    async def get_workspace_tree(self) -> str:
        return self._tree


def _head(text: str) -> str:
    return "\n".join(text.splitlines()[:MAX_FILE_LINES])


__all__ = ["StaticWorkspaceContext"]
