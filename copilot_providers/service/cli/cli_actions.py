"""CLI action handlers.

Purpose
-------
Subcommand handlers for ``copilot-providers``. Each handler builds the
settings layer from the parsed arguments, drives one library operation and
maps its outcome to an exit code. The entrypoint module stays a thin
dispatcher; this module has no top-level side effects and is safe to import
in tests.

Exit Codes
----------
- ``0`` success
- ``1`` the operation failed (connectivity, protocol, cooling down)
- ``2`` usage or configuration problem (missing key/base URL, unreadable file)

Output
------
Results go to stdout (plain text, or JSON with ``--json``); errors go to
stderr as JSON objects, matching the structured log events emitted alongside.

Testing
-------
Handlers accept a ``client_factory`` so tests can inject an
``OpenAICompatClient`` bound to an ``httpx.MockTransport``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from ... import create_client
from ...base.errors import ConfigurationError, ProviderError
from ...base.interfaces import ConfigurationProvider
from ...base.logging import LogContext, configure_logger, get_logger, log_event, normalized_log_event
from ...base.memory.in_memory_store import InMemoryKeyedStore
from ...base.resilience.ttl_cache import TTLCache
from ...chat import ChatSession, StaticWorkspaceContext
from ...completion import (
    InlineCompletionContext,
    InlineCompletionProvider,
    InMemoryTextDocument,
    Position,
    TriggerKind,
)
from ...config import SettingsConfiguration
from ...openai_compat import OpenAICompatClient
from ...persistence.sqlite import DEFAULT_SCOPE, SqliteKeyedStore

ClientFactory = Callable[[ConfigurationProvider], OpenAICompatClient]

REQUIRED_SETTINGS = ("api.baseUrl", "api.model")
INCOMPLETE_CONFIG_MESSAGE = "Check settings (baseUrl, model)"

EXTENSION_LANGUAGES: Dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
}

_logger = get_logger("copilot.cli")


def _default_client_factory(config: ConfigurationProvider) -> OpenAICompatClient:
    return create_client(config)


def build_config(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> SettingsConfiguration:
    """Create the settings layer for one CLI invocation.

    ``--base-url`` and ``--model`` become in-code overrides, so they win over
    the settings file and the environment.
    """
    overrides: Dict[str, Any] = {}
    if getattr(args, "base_url", None):
        overrides["api.baseUrl"] = args.base_url
    if getattr(args, "model", None):
        overrides["api.model"] = args.model
    return SettingsConfiguration(
        overrides,
        config_file=getattr(args, "config_file", None),
        environ=environ,
    )


def apply_log_level(args: argparse.Namespace, config: ConfigurationProvider) -> None:
    """Set the shared logger level from ``--log-level`` or ``logging.level``."""
    level = getattr(args, "log_level", None) or config.get("logging.level")
    if level:
        configure_logger(level=level)


def validate_config(config: ConfigurationProvider, logger: Optional[logging.Logger] = None) -> List[str]:
    """Return the required settings that are unset, warning when any are.

    Parameters
    ----------
    config: ConfigurationProvider
        Settings source to inspect.
    logger: Optional[logging.Logger]
        Destination for the ``config.incomplete`` warning.

    Returns
    -------
    List[str]
        Missing keys among ``api.baseUrl`` and ``api.model`` (empty when the
        configuration is complete).
    """
    missing = [key for key in REQUIRED_SETTINGS if not config.get(key)]
    if missing:
        log_event(
            logger or _logger,
            "config.incomplete",
            level=logging.WARNING,
            message=INCOMPLETE_CONFIG_MESSAGE,
            missing=missing,
        )
    return missing


def infer_language(path: str, explicit: Optional[str] = None) -> str:
    """Language id for ``path``: ``explicit`` if given, else by extension."""
    if explicit:
        return explicit
    return EXTENSION_LANGUAGES.get(Path(path).suffix.lower(), "plaintext")


def _print_error(message: str, **fields: Any) -> None:
    print(json.dumps({"error": message, **fields}), file=sys.stderr)


def _error_exit_code(exc: ProviderError) -> int:
    return 2 if isinstance(exc, ConfigurationError) else 1


# --------------------------------------------------------------- diagnostic
async def _run_diagnostic(config: ConfigurationProvider, client_factory: ClientFactory) -> None:
    async with client_factory(config) as client:
        await client.test_connection()


def handle_diagnostic(args: argparse.Namespace, *, client_factory: ClientFactory = _default_client_factory) -> int:
    """Execute the ``diagnostic`` subcommand (connection probe).

    Returns
    -------
    int
        ``0`` when ``GET /models`` answers 2xx with JSON; ``2`` on missing
        configuration; ``1`` on any connectivity failure.
    """
    config = build_config(args)
    apply_log_level(args, config)
    validate_config(config)
    ctx = LogContext(operation="diagnostic", model=config.get("api.model"))
    normalized_log_event(_logger, "cli.start", ctx, phase="start", level=logging.DEBUG)
    try:
        asyncio.run(_run_diagnostic(config, client_factory))
    except ProviderError as exc:
        normalized_log_event(
            _logger, "cli.error", ctx, phase="finalize", emitted=False, error_code=exc.code.value, level=logging.ERROR
        )
        _print_error(exc.message, code=exc.code.value)
        return _error_exit_code(exc)
    normalized_log_event(_logger, "cli.finalize", ctx, phase="finalize", emitted=True, level=logging.DEBUG)
    if args.json:
        print(json.dumps({"ok": True, "baseUrl": config.get("api.baseUrl")}))
    else:
        print("Connected successfully")
    return 0


# ------------------------------------------------------------------- config
def handle_config(args: argparse.Namespace) -> int:
    """Execute the ``config`` subcommand.

    Prints the merged settings and returns ``2`` when a required key is
    missing. The API key is never printed.
    """
    config = build_config(args)
    apply_log_level(args, config)
    missing = validate_config(config)
    settings = config.as_dict()
    if args.json:
        print(json.dumps({"settings": settings, "missing": missing}, default=str))
    else:
        for key in sorted(settings):
            print(f"{key} = {settings[key]!r}")
        if missing:
            print(f"missing: {', '.join(missing)} ({INCOMPLETE_CONFIG_MESSAGE})")
    return 2 if missing else 0


# ----------------------------------------------------------------- complete
async def _run_complete(
    config: ConfigurationProvider,
    client_factory: ClientFactory,
    document: InMemoryTextDocument,
    position: Position,
    cache: TTLCache,
) -> Optional[str]:
    async with client_factory(config) as client:
        provider = InlineCompletionProvider(config, client, cache)
        try:
            items = await provider.provide_inline_completion_items(
                document,
                position,
                InlineCompletionContext(trigger_kind=TriggerKind.INVOKE),
            )
        finally:
            provider.dispose()
        log_event(_logger, "cli.complete.outcome", level=logging.DEBUG, outcome=getattr(provider.last_outcome, "value", None))
        return items[0].insert_text if items else None


def handle_complete(args: argparse.Namespace, *, client_factory: ClientFactory = _default_client_factory) -> int:
    """Execute the ``complete`` subcommand.

    Reads ``--file``, runs one explicitly-invoked completion at
    ``--line``/``--character`` and prints the suggestion. An empty result
    prints nothing and still exits ``0``, since the pipeline degrades rather
    than fails.
    """
    config = build_config(args)
    apply_log_level(args, config)
    try:
        text = Path(args.file).read_text(encoding="utf-8")
    except OSError as exc:
        _print_error(f"cannot read {args.file}: {exc.strerror or exc}")
        return 2
    language = infer_language(args.file, args.language)
    document = InMemoryTextDocument(text, language, uri=Path(args.file).resolve().as_uri())
    position = document.validate_position(Position(args.line, args.character))

    store = SqliteKeyedStore.open(args.db) if args.db else InMemoryKeyedStore()
    try:
        suggestion = asyncio.run(_run_complete(config, client_factory, document, position, TTLCache(store)))
    finally:
        if isinstance(store, SqliteKeyedStore):
            store.close()

    if args.json:
        print(json.dumps({"language": language, "line": position.line, "character": position.character, "completion": suggestion}))
    elif suggestion:
        print(suggestion)
    return 0


# --------------------------------------------------------------------- chat
async def _run_chat(
    args: argparse.Namespace,
    config: ConfigurationProvider,
    client_factory: ClientFactory,
    on_delta: Callable[[str], None],
):
    workspace = StaticWorkspaceContext(root=args.workspace_root or str(Path.cwd()))
    async with client_factory(config) as client:
        session = ChatSession(config, client, workspace)
        return await session.respond(
            args.prompt,
            on_delta=on_delta,
            command=args.chat_command,
            file_ref=args.file_ref,
        )


def handle_chat(args: argparse.Namespace, *, client_factory: ClientFactory = _default_client_factory) -> int:
    """Execute the ``chat`` subcommand, streaming fragments to stdout.

    Returns
    -------
    int
        ``0`` when the answer streamed (or was cancelled); ``1`` when the
        session rendered an error.
    """
    config = build_config(args)
    apply_log_level(args, config)
    validate_config(config)

    def _write(fragment: str) -> None:
        if not args.json:
            sys.stdout.write(fragment)
            sys.stdout.flush()

    result = asyncio.run(_run_chat(args, config, client_factory, _write))
    if args.json:
        print(json.dumps({"text": result.text, "fragments": result.fragments, "cancelled": result.cancelled, "error": result.error}))
    else:
        sys.stdout.write("\n")
    return 1 if result.error else 0


# -------------------------------------------------------------- clear-cache
def handle_clear_cache(args: argparse.Namespace) -> int:
    """Execute the ``clear-cache`` subcommand against a SQLite state file."""
    config = build_config(args)
    apply_log_level(args, config)
    store = SqliteKeyedStore.open(args.db, scope=args.scope or DEFAULT_SCOPE)
    try:
        removed = TTLCache(store).clear()
    finally:
        store.close()
    if args.json:
        print(json.dumps({"removed": removed}))
    else:
        print(f"Removed {removed} cached entr{'y' if removed == 1 else 'ies'}")
    return 0


__all__ = [
    "build_config",
    "validate_config",
    "infer_language",
    "handle_diagnostic",
    "handle_config",
    "handle_complete",
    "handle_chat",
    "handle_clear_cache",
]
