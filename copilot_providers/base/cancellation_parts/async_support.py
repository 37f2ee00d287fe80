"""Asyncio bridges for cooperative cancellation tokens.

``deadline_token`` arms a loop timer that cancels a token with reason
``"timeout"``; ``wait_cancellable`` races an awaitable against a token so a
cancel unblocks a pending network call instead of waiting for it to finish.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, Tuple, TypeVar

from .cancellation_token import CancellationToken
from .cancelled_error import CancelledError

T = TypeVar("T")

TIMEOUT_REASON = "timeout"


def deadline_token(
    seconds: float,
    *,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Tuple[CancellationToken, asyncio.TimerHandle]:
    """Return ``(token, handle)`` where ``token`` fires after ``seconds``.

    The caller owns ``handle`` and must ``cancel()`` it once the guarded work
    finishes so the timer does not outlive the request.
    """
    loop = loop or asyncio.get_running_loop()
    token = CancellationToken()
    handle = loop.call_later(seconds, token.cancel, TIMEOUT_REASON)
    return token, handle


async def wait_cancellable(awaitable: Awaitable[T], token: CancellationToken) -> T:
    """Await ``awaitable`` unless ``token`` is cancelled first.

    On cancellation the inner task is cancelled and awaited, then
    ``CancelledError`` is raised carrying the token's reason.
    """
    if token.cancelled:
        # Close a coroutine that will never be awaited.
        close = getattr(awaitable, "close", None)
        if callable(close):
            close()
        token.raise_if_cancelled()

    loop = asyncio.get_running_loop()
    fired = asyncio.Event()
    remove = token.add_callback(lambda _reason: loop.call_soon_threadsafe(fired.set))
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(fired.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise
    finally:
        remove()

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    reason = token.reason or "cancelled"
    raise CancelledError(f"operation cancelled ({reason})", reason=reason)


__all__ = ["deadline_token", "wait_cancellable", "TIMEOUT_REASON"]
