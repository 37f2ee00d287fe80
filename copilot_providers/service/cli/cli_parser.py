"""CLI parser construction for copilot-providers.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions`` to keep files small and testable.
"""

from __future__ import annotations

import argparse

COMMANDS = ("diagnostic", "config", "complete", "chat", "clear-cache")


def _non_negative_int(value: str) -> int:
    """argparse type for zero-based line/character positions."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {parsed}")
    return parsed


def add_common_flags(parser: argparse.ArgumentParser) -> None:
    """Attach settings-source flags shared by every subcommand."""
    parser.add_argument("--config-file", default=None, help="JSON or YAML settings file")
    parser.add_argument("--base-url", default=None, help="Override api.baseUrl")
    parser.add_argument("--model", default=None, help="Override api.model")
    parser.add_argument("--log-level", default=None, help="debug, info, warning, error")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable output")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with ``diagnostic``, ``config``, ``complete``,
        ``chat`` and ``clear-cache`` subcommands.
    """
    p = argparse.ArgumentParser(
        prog="copilot-providers",
        description="Headless driver for the completion and chat pipelines",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # diagnostic
    p_diag = sub.add_parser("diagnostic", help="Probe GET {baseUrl}/models with the configured key")
    add_common_flags(p_diag)

    # config
    p_cfg = sub.add_parser("config", help="Show the merged settings and report missing keys")
    add_common_flags(p_cfg)

    # complete
    p_complete = sub.add_parser("complete", help="Request an inline completion at a file position")
    add_common_flags(p_complete)
    p_complete.add_argument("--file", required=True)
    p_complete.add_argument("--line", type=_non_negative_int, required=True, help="Zero-based line")
    p_complete.add_argument("--character", type=_non_negative_int, required=True, help="Zero-based column")
    p_complete.add_argument("--language", default=None, help="Language id (inferred from the extension)")
    p_complete.add_argument("--db", default=None, help="SQLite cache database; in-memory when omitted")

    # chat
    p_chat = sub.add_parser("chat", help="Stream one chat answer to stdout")
    add_common_flags(p_chat)
    p_chat.add_argument("--prompt", required=True)
    p_chat.add_argument("--command", dest="chat_command", default=None, help="Chat slash command name")
    p_chat.add_argument("--file-ref", default=None, help="File included as context")
    p_chat.add_argument("--workspace-root", default=None, help="Root used to resolve --file-ref")

    # clear-cache
    p_clear = sub.add_parser("clear-cache", help="Remove cached completion and chat entries")
    add_common_flags(p_clear)
    p_clear.add_argument("--db", required=True, help="SQLite database holding workspace state")
    p_clear.add_argument("--scope", default=None, help="Workspace scope (default scope when omitted)")

    return p


__all__ = ["COMMANDS", "build_parser"]
