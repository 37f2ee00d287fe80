"""Unit tests for cooperative cancellation primitives.

Covers idempotent cancel, cascade to children, late link of child after
parent cancel, listeners, first-wins merging and the asyncio bridges.
"""
from __future__ import annotations

import asyncio

import pytest

from copilot_providers.base.cancellation import (
    TIMEOUT_REASON,
    CancellationToken,
    CancelledError,
    deadline_token,
    wait_cancellable,
)


def test_cancel_cascades_to_children_and_is_idempotent():
    parent = CancellationToken()
    child1 = parent.child()
    child2 = parent.child()

    parent.cancel(reason="stop")
    # idempotent second call
    parent.cancel(reason="ignored")

    assert parent.cancelled is True and parent.reason == "stop"  # nosec B101 - pytest assert in tests
    assert child1.cancelled is True and child1.reason == "stop"  # nosec B101 - pytest assert in tests
    assert child2.cancelled is True and child2.reason == "stop"  # nosec B101 - pytest assert in tests


def test_link_child_after_parent_cancel_immediately_cancels_child():
    parent = CancellationToken()
    parent.cancel("done")
    late_child = CancellationToken(parent=parent)
    assert late_child.cancelled is True and late_child.reason == "done"  # nosec B101 - pytest assert in tests


def test_child_cancel_does_not_reach_parent():
    parent = CancellationToken()
    child = parent.child()
    child.cancel("superseded")
    assert child.cancelled
    assert not parent.cancelled


def test_raise_if_cancelled_raises_with_reason():
    token = CancellationToken()
    token.cancel("terminate")
    with pytest.raises(CancelledError) as info:
        token.raise_if_cancelled()
    assert info.value.reason == "terminate"
    assert info.value.timed_out is False


def test_callbacks_fire_once_and_can_be_removed():
    token = CancellationToken()
    seen = []
    token.add_callback(seen.append)
    remove = token.add_callback(lambda r: seen.append(f"removed:{r}"))
    remove()

    token.cancel("first")
    token.cancel("second")

    assert seen == ["first"]


def test_callback_registered_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel("late")
    seen = []
    token.add_callback(seen.append)
    assert seen == ["late"]


def test_any_of_is_first_wins_and_ignores_none():
    caller = CancellationToken()
    deadline = CancellationToken()
    merged = CancellationToken.any_of(deadline, None, caller)

    caller.cancel("cancelled")
    deadline.cancel(TIMEOUT_REASON)

    assert merged.cancelled
    assert merged.reason == "cancelled"


@pytest.mark.anyio
async def test_deadline_token_fires_with_timeout_reason():
    token, handle = deadline_token(0.01)
    await asyncio.sleep(0.05)
    assert token.cancelled
    assert token.reason == TIMEOUT_REASON
    handle.cancel()


@pytest.mark.anyio
async def test_disarmed_deadline_never_fires():
    token, handle = deadline_token(0.01)
    handle.cancel()
    await asyncio.sleep(0.03)
    assert not token.cancelled


@pytest.mark.anyio
async def test_wait_cancellable_returns_result_when_not_cancelled():
    token = CancellationToken()

    async def work():
        return 42

    assert await wait_cancellable(work(), token) == 42


@pytest.mark.anyio
async def test_wait_cancellable_unblocks_pending_await():
    token = CancellationToken()
    blocker = asyncio.Event()
    started = asyncio.Event()
    finished = []

    async def work():
        started.set()
        try:
            await blocker.wait()
        finally:
            finished.append("inner-cleaned-up")

    async def cancel_soon():
        await started.wait()
        token.cancel("cancelled")

    canceller = asyncio.ensure_future(cancel_soon())
    with pytest.raises(CancelledError) as info:
        await wait_cancellable(work(), token)
    await canceller

    assert info.value.reason == "cancelled"
    assert finished == ["inner-cleaned-up"]


@pytest.mark.anyio
async def test_wait_cancellable_rejects_already_cancelled_token():
    token = CancellationToken()
    token.cancel(TIMEOUT_REASON)

    async def work():  # pragma: no cover - never awaited
        return 1

    with pytest.raises(CancelledError) as info:
        await wait_cancellable(work(), token)
    assert info.value.timed_out
