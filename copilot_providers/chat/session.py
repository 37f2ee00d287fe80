"""Streamed chat turns rendered through a delta callback.

``ChatSession.respond`` assembles the message list, opens a chat stream and
forwards every fragment to ``on_delta``. It never raises: failures are
rendered inline as ``"Error: <message>"`` through the same callback, and
cancellation (caller or deadline) simply ends the turn.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import ProviderError, classify_exception
from ..base.interfaces import ConfigurationProvider, WorkspaceContext
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.models import ChatMessage
from ..config.defaults import (
    API_DEFAULT_MAX_TOKENS,
    API_DEFAULT_TEMPERATURE,
    CHAT_DEFAULT_ASSISTANT_NAME,
    CHAT_DEFAULT_MAX_HISTORY_MESSAGES,
)
from ..openai_compat import OpenAICompatClient
from .request_build import DEFAULT_COMMAND, CodeSelection, build_chat_messages, build_chat_request

DeltaCallback = Callable[[str], Union[None, Awaitable[None]]]


@dataclass
class ChatTurnResult:
    """Outcome of one ``respond`` call."""

    text: str
    fragments: int
    cancelled: bool = False
    error: Optional[str] = None


class ChatSession:
    """Chat participant backed by :class:`OpenAICompatClient`.

    Parameters:
        config: Settings (sampling, history depth, assistant name).
        client: API client used for ``create_chat_completion``.
        workspace: Optional accessor for ``file_ref`` and workspace context.
    """

    def __init__(
        self,
        config: ConfigurationProvider,
        client: OpenAICompatClient,
        workspace: Optional[WorkspaceContext] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._client = client
        self._workspace = workspace
        self._logger = logger or get_logger("copilot.chat")

    def _setting(self, key: str, default: Any) -> Any:
        value = self._config.get(key)
        return default if value is None else value

    async def build_messages(
        self,
        prompt: str,
        *,
        command: Optional[str] = None,
        history: Sequence[ChatMessage] = (),
        selection: Optional[CodeSelection] = None,
        file_ref: Optional[str] = None,
        include_workspace: bool = False,
    ) -> List[ChatMessage]:
        file_context = None
        workspace_tree = None
        if self._workspace is not None:
            if file_ref:
                file_context = await self._workspace.get_file_context(file_ref)
            if include_workspace:
                workspace_tree = await self._workspace.get_workspace_tree()
        return build_chat_messages(
            prompt,
            command=command,
            history=history,
            max_history=int(self._setting("chat.maxHistoryMessages", CHAT_DEFAULT_MAX_HISTORY_MESSAGES)),
            selection=selection,
            file_context=file_context,
            workspace_tree=workspace_tree,
            assistant_name=str(self._setting("chat.assistantName", CHAT_DEFAULT_ASSISTANT_NAME)),
        )

    async def respond(
        self,
        prompt: str,
        *,
        on_delta: DeltaCallback,
        command: Optional[str] = None,
        history: Sequence[ChatMessage] = (),
        selection: Optional[CodeSelection] = None,
        file_ref: Optional[str] = None,
        include_workspace: bool = False,
        token: Optional[CancellationToken] = None,
    ) -> ChatTurnResult:
        """Stream one assistant reply to ``on_delta``; never raises."""
        ctx = LogContext(operation="chat", extra={"command": command or DEFAULT_COMMAND})
        log_event(self._logger, "chat.request", ctx)
        collected: List[str] = []
        try:
            messages = await self.build_messages(
                prompt,
                command=command,
                history=history,
                selection=selection,
                file_ref=file_ref,
                include_workspace=include_workspace,
            )
            request = build_chat_request(
                messages,
                max_tokens=int(self._setting("api.maxTokens", API_DEFAULT_MAX_TOKENS)),
                temperature=float(self._setting("api.temperature", API_DEFAULT_TEMPERATURE)),
            )
            stream = await self._client.create_chat_completion(request, token)
            async with stream:
                async for fragment in stream:
                    if token is not None and token.cancelled:
                        break
                    collected.append(fragment)
                    await _emit(on_delta, fragment)
            cancelled = stream.finish_reason == "cancelled" or (token is not None and token.cancelled)
            normalized_log_event(
                self._logger,
                "chat.response",
                ctx,
                phase="finalize",
                emitted=bool(collected),
                finish_reason=stream.finish_reason,
                fragments=len(collected),
            )
            return ChatTurnResult(text="".join(collected), fragments=len(collected), cancelled=cancelled)
        except CancelledError as exc:
            log_event(self._logger, "chat.cancelled", ctx, level=logging.DEBUG, reason=exc.reason)
            return ChatTurnResult(text="".join(collected), fragments=len(collected), cancelled=True)
        except Exception as exc:  # noqa: BLE001 - errors are rendered inline, the session keeps going
            message = exc.message if isinstance(exc, ProviderError) else (str(exc) or "Unknown error")
            normalized_log_event(
                self._logger,
                "chat.failed",
                ctx,
                phase="finalize",
                emitted=bool(collected),
                error_code=classify_exception(exc).value,
                level=logging.ERROR,
                error=message,
            )
            try:
                await _emit(on_delta, f"Error: {message}")
            except Exception as render_exc:  # noqa: BLE001
                log_event(self._logger, "chat.render_failed", ctx, level=logging.ERROR, error=str(render_exc))
            return ChatTurnResult(text="".join(collected), fragments=len(collected), error=message)


async def _emit(on_delta: DeltaCallback, text: str) -> None:
    result = on_delta(text)
    if inspect.isawaitable(result):
        await result


__all__ = ["ChatSession", "ChatTurnResult", "DeltaCallback"]
