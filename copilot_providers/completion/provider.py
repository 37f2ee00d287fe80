"""Inline completion pipeline.

One ``InlineCompletionProvider`` serves the editor's inline-suggestion
requests for a session. Per request:

1. Language gate (``autocomplete.supportedLanguages``), before anything else.
2. Automatic triggers are debounced (trailing edge, single slot); a waiter
   superseded by a newer event ends as ``cancelled``. Explicit invocations
   skip the debounce.
3. Cache lookup keyed on language, document and the preceding 30 lines.
4. On a miss the previous in-flight fetch is cancelled (``"superseded"``) and
   a new request token, child of the editor token, drives the call.
5. The suggestion is cleaned, cached and returned as a single item.

Failures never reach the editor: cancellations end silently, anything else
is logged, and both produce an empty result.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import CircuitOpenError
from ..base.constants import CACHE_KEY_CONTEXT_LINES, PROMPT_LINES_AFTER, PROMPT_LINES_BEFORE
from ..base.interfaces import ConfigurationProvider
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.models import CompletionRequest
from ..base.resilience.ttl_cache import TTLCache
from ..base.utils.debounce import Debouncer
from ..base.utils.hashing import compute_hash
from ..config.defaults import (
    API_DEFAULT_MAX_TOKENS,
    API_DEFAULT_TEMPERATURE,
    AUTOCOMPLETE_DEFAULT_DEBOUNCE_MS,
    CACHE_DEFAULT_TTL_SECONDS,
)
from ..config.env import parse_list
from ..openai_compat import OpenAICompatClient
from .document import (
    Command,
    InlineCompletionContext,
    InlineCompletionItem,
    Position,
    Range,
    TextDocument,
    TriggerKind,
)
from .prompts import build_completion_prompt, clean_completion

ACCEPT_COMMAND = "copilot.completionAccepted"
SUPERSEDED_REASON = "superseded"
CACHE_KEY_PREFIX = "completion:"


class CompletionOutcome(str, Enum):
    """Terminal state of one completion request."""

    SERVED_CACHE = "served_cache"
    SERVED_FRESH = "served_fresh"
    EMPTY = "empty"
    CANCELLED = "cancelled"
    UNSUPPORTED = "unsupported"


class InlineCompletionProvider:
    """Debounced, cached inline completion source.

    Parameters:
        config: Settings (debounce, languages, sampling, cache TTL).
        client: API client used for ``create_completion``.
        cache: TTL cache for cleaned suggestions.
    """

    def __init__(
        self,
        config: ConfigurationProvider,
        client: OpenAICompatClient,
        cache: TTLCache,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._client = client
        self._cache = cache
        self._logger = logger or get_logger("copilot.completion")
        self._debouncer = Debouncer()
        self._inflight: Optional[CancellationToken] = None
        self._last_outcome: Optional[CompletionOutcome] = None

    @property
    def last_outcome(self) -> Optional[CompletionOutcome]:
        return self._last_outcome

    def _setting(self, key: str, default):
        value = self._config.get(key)
        return default if value is None else value

    def is_language_supported(self, language_id: str) -> bool:
        supported = self._config.get("autocomplete.supportedLanguages") or []
        if isinstance(supported, str):
            supported = parse_list(supported)
        return language_id in supported

    async def provide_inline_completion_items(
        self,
        document: TextDocument,
        position: Position,
        context: InlineCompletionContext,
        token: Optional[CancellationToken] = None,
    ) -> List[InlineCompletionItem]:
        """Return zero or one suggestion for ``position``; never raises."""
        if not self.is_language_supported(document.language_id):
            return self._finish(CompletionOutcome.UNSUPPORTED, [])

        if context.trigger_kind == TriggerKind.AUTOMATIC:
            delay_ms = self._setting("autocomplete.debounceMs", AUTOCOMPLETE_DEFAULT_DEBOUNCE_MS)
            if not await self._debouncer.wait(float(delay_ms) / 1000.0):
                return self._finish(CompletionOutcome.CANCELLED, [])
            if token is not None and token.cancelled:
                return self._finish(CompletionOutcome.CANCELLED, [])

        return await self._fetch_completion(document, position, token)

    async def cache_key(self, document: TextDocument, position: Position) -> str:
        """Deterministic key over language, document and the preceding lines."""
        start_line = max(0, position.line - CACHE_KEY_CONTEXT_LINES)
        preceding = document.get_text(Range(Position(start_line, 0), position))
        digest = await compute_hash(f"{document.language_id}:{document.uri}:{preceding}")
        return CACHE_KEY_PREFIX + digest

    def build_prompt(self, document: TextDocument, position: Position) -> str:
        before = document.get_text(Range(Position(max(0, position.line - PROMPT_LINES_BEFORE), 0), position))
        after_end = Position(min(document.line_count, position.line + PROMPT_LINES_AFTER), 0)
        after = document.get_text(Range(position, after_end))
        return build_completion_prompt(document.language_id, before, after)

    async def _fetch_completion(
        self,
        document: TextDocument,
        position: Position,
        token: Optional[CancellationToken],
    ) -> List[InlineCompletionItem]:
        ctx = LogContext(operation="inline_completion", extra={"language": document.language_id})
        request_token: Optional[CancellationToken] = None
        try:
            key = await self.cache_key(document, position)
            cached = self._cache.get(key)
            if cached:
                log_event(self._logger, "completion.cache_hit", ctx, level=logging.DEBUG, cache_key=key)
                return self._finish(CompletionOutcome.SERVED_CACHE, [self._make_item(cached, position, key)])

            prompt = self.build_prompt(document, position)
            if self._inflight is not None:
                self._inflight.cancel(SUPERSEDED_REASON)
            request_token = token.child() if token is not None else CancellationToken()
            self._inflight = request_token

            response = await self._client.create_completion(
                CompletionRequest(
                    prompt=prompt,
                    max_tokens=int(self._setting("api.maxTokens", API_DEFAULT_MAX_TOKENS)),
                    temperature=float(self._setting("api.temperature", API_DEFAULT_TEMPERATURE)),
                    cancellation=request_token,
                )
            )
            cleaned = clean_completion(response.text)
            if not cleaned:
                return self._finish(CompletionOutcome.EMPTY, [])

            self._cache.set(key, cleaned, float(self._setting("cache.ttlSeconds", CACHE_DEFAULT_TTL_SECONDS)))
            normalized_log_event(self._logger, "completion.served", ctx, phase="finalize", emitted=True, level=logging.DEBUG, chars=len(cleaned))
            return self._finish(CompletionOutcome.SERVED_FRESH, [self._make_item(cleaned, position, key)])
        except CancelledError as exc:
            log_event(self._logger, "completion.cancelled", ctx, level=logging.DEBUG, reason=exc.reason)
            return self._finish(CompletionOutcome.CANCELLED, [])
        except Exception as exc:  # noqa: BLE001 - completion failures must never interrupt typing
            normalized_log_event(
                self._logger,
                "completion.failed",
                ctx,
                phase="finalize",
                emitted=False,
                error_code=getattr(getattr(exc, "code", None), "value", None),
                level=logging.DEBUG if isinstance(exc, CircuitOpenError) else logging.ERROR,
                error=getattr(exc, "message", None) or str(exc),
            )
            return self._finish(CompletionOutcome.EMPTY, [])
        finally:
            if request_token is not None and self._inflight is request_token:
                self._inflight = None

    def _make_item(self, text: str, position: Position, key: str) -> InlineCompletionItem:
        return InlineCompletionItem(
            insert_text=text,
            range=Range(position, position),
            command=Command(title="Completion Accepted", command=ACCEPT_COMMAND, arguments=(key,)),
        )

    def _finish(self, outcome: CompletionOutcome, items: List[InlineCompletionItem]) -> List[InlineCompletionItem]:
        self._last_outcome = outcome
        return items

    def completion_accepted(self, cache_key: str) -> None:
        """Acceptance hook bound to ``ACCEPT_COMMAND``."""
        log_event(self._logger, "completion.accepted", level=logging.DEBUG, cache_key=cache_key)

    def dispose(self) -> None:
        """Release the debounce slot and cancel any in-flight fetch."""
        self._debouncer.cancel()
        if self._inflight is not None:
            self._inflight.cancel(SUPERSEDED_REASON)
            self._inflight = None


__all__ = ["InlineCompletionProvider", "CompletionOutcome", "ACCEPT_COMMAND"]
