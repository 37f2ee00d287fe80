"""copilot-providers CLI (package entrypoint).

This package wires argument parsing to action handlers kept in small, focused
modules. It performs no client or pipeline logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable
- ``validate_config``: settings check shared with embedding hosts
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import (
    handle_chat,
    handle_clear_cache,
    handle_complete,
    handle_config,
    handle_diagnostic,
    validate_config,
)
from .cli_parser import build_parser

_HANDLERS = {
    "diagnostic": handle_diagnostic,
    "config": handle_config,
    "complete": handle_complete,
    "chat": handle_chat,
    "clear-cache": handle_clear_cache,
}


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    p = build_parser()
    args = p.parse_args(list(sys.argv[1:] if argv is None else argv))
    return _HANDLERS[args.cmd](args)


__all__ = ["main", "validate_config"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
