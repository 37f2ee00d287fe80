"""Pull-based stream of text fragments over a streamed chat response.

``ChatStream`` owns one ``httpx.Response`` opened with ``stream=True`` and
turns its body into text fragments via :mod:`.sse`. It is single-pass and is
released exactly once on every exit path: ``[DONE]``, end of body, transport
error, cancellation, ``aclose()`` and context-manager exit.

Each network read is raced against the stream's cancellation token (see
``wait_cancellable``), so a cancel unblocks a pending read. A cancel that
arrives while nobody is pulling schedules the release itself. An ``async for``
loop that stops early (``break``, or the loop object being dropped) releases
the response when its iterator is closed or finalized; a stream that is never
iterated at all is released no later than its deadline timer.

Finish reasons:
    ``done``      upstream sent ``data: [DONE]``
    ``eof``       body ended without the sentinel
    ``cancelled`` the caller's token (or ``cancel()``) fired; iteration ends silently
    ``timeout``   the deadline fired; iteration raises ``CancelledError(reason="timeout")``
    ``error``     a transport error; iteration raises ``ConnectivityError``
    ``closed``    ``aclose()`` before any of the above
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import AsyncIterator, Deque, Optional

import httpx

from ..cancellation import TIMEOUT_REASON, CancellationToken, CancelledError, wait_cancellable
from ..errors import ConnectivityError, ProtocolError
from ..log_support import LogContext
from ..logging import get_logger, log_event, normalized_log_event
from .sse import SSELineDecoder, parse_data_line


class ChatStream:
    """Async iterator of text fragments from a streamed chat completion.

    Parameters:
        response: Open streaming response; ownership passes to the stream.
        token: Cancellation token merging the caller's token and the deadline.
        deadline: Timer handle armed for ``token``; disarmed on release.
        ctx: Log context for lifecycle events.
    """

    def __init__(
        self,
        response: httpx.Response,
        token: CancellationToken,
        *,
        deadline: Optional[asyncio.TimerHandle] = None,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._response = response
        self._token = token
        self._deadline = deadline
        self._ctx = ctx
        self._logger = logger or get_logger("copilot.stream")
        self._loop = asyncio.get_running_loop()
        self._chunks: AsyncIterator[bytes] = response.aiter_bytes()
        self._decoder = SSELineDecoder()
        self._lines: Deque[str] = deque()
        self._eof = False
        self._done = False
        self._reading = False
        self._released = False
        self._release_task: Optional[asyncio.Task] = None
        self._finish_reason: Optional[str] = None
        self._fragments = 0
        self._remove_callback = token.add_callback(self._on_token_cancelled)

    # ------------------------------------------------------------------ state
    @property
    def closed(self) -> bool:
        return self._released

    @property
    def finish_reason(self) -> Optional[str]:
        return self._finish_reason

    @property
    def token(self) -> CancellationToken:
        return self._token

    # ---------------------------------------------------------------- control
    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation; idempotent and safe after completion."""
        self._token.cancel(reason or "cancelled")

    async def aclose(self) -> None:
        """Release the response now; further iteration ends immediately."""
        if self._release_task is not None:
            await self._release_task
            return
        await self._release("closed")

    async def __aenter__(self) -> "ChatStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        # Closing or finalizing an unfinished loop releases the response.
        try:
            while True:
                try:
                    fragment = await self.__anext__()
                except StopAsyncIteration:
                    return
                yield fragment
        finally:
            await self.aclose()

    async def __anext__(self) -> str:
        while True:
            if self._token.cancelled:
                await self._finish_cancelled()
            if self._released:
                raise StopAsyncIteration
            fragment = self._next_buffered()
            if fragment is not None:
                return fragment
            if self._done:
                await self._release("done")
                raise StopAsyncIteration
            if self._eof:
                await self._release("eof")
                raise StopAsyncIteration
            await self._read_chunk()

    # --------------------------------------------------------------- internals
    def _next_buffered(self) -> Optional[str]:
        while self._lines:
            line = self._lines.popleft()
            try:
                event = parse_data_line(line)
            except ProtocolError as exc:
                log_event(
                    self._logger,
                    "stream.malformed_record",
                    self._ctx,
                    level=logging.WARNING,
                    payload=exc.payload,
                )
                continue
            if event.kind == "done":
                self._lines.clear()
                self._done = True
                return None
            if event.kind == "content":
                self._fragments += 1
                return event.text
        return None

    async def _read_chunk(self) -> None:
        self._reading = True
        try:
            chunk = await wait_cancellable(self._chunks.__anext__(), self._token)
        except StopAsyncIteration:
            self._eof = True
            self._lines.extend(self._decoder.flush())
            return
        except CancelledError:
            await self._finish_cancelled()
        except asyncio.CancelledError:
            self._schedule_release("cancelled")
            raise
        except httpx.HTTPError as exc:
            await self._release("error")
            raise ConnectivityError(f"Stream interrupted: {exc}", raw=exc) from exc
        finally:
            self._reading = False
        self._lines.extend(self._decoder.feed(chunk))

    async def _finish_cancelled(self) -> None:
        timed_out = self._token.reason == TIMEOUT_REASON
        await self._release("timeout" if timed_out else "cancelled")
        if self._finish_reason == "timeout":
            raise CancelledError("chat stream timed out", reason=TIMEOUT_REASON)
        raise StopAsyncIteration

    def _schedule_release(self, reason: str) -> None:
        if self._released or self._release_task is not None:
            return
        self._release_task = self._loop.create_task(self._release(reason))

    def _on_token_cancelled(self, _reason: Optional[str]) -> None:
        try:
            self._loop.call_soon_threadsafe(self._release_if_idle)
        except RuntimeError:
            # Loop already closed; nothing left to release on.
            return

    def _release_if_idle(self) -> None:
        if not self._reading:
            reason = "timeout" if self._token.reason == TIMEOUT_REASON else "cancelled"
            self._schedule_release(reason)

    async def _release(self, reason: str) -> None:
        if self._released:
            return
        self._released = True
        if self._finish_reason is None:
            self._finish_reason = reason
        if self._deadline is not None:
            self._deadline.cancel()
        self._remove_callback()
        try:
            await self._response.aclose()
        except Exception as exc:  # noqa: BLE001 - release must not mask the terminal outcome
            log_event(self._logger, "stream.release_failed", self._ctx, level=logging.WARNING, error=str(exc))
        normalized_log_event(
            self._logger,
            "stream.released",
            self._ctx,
            phase="finalize",
            emitted=self._fragments > 0,
            finish_reason=self._finish_reason,
            fragments=self._fragments,
        )


__all__ = ["ChatStream"]
