"""Contract tests for ChatStream: fragments, terminal states and release."""

from __future__ import annotations

import asyncio
import gc
import json

import httpx
import pytest

from copilot_providers.base.cancellation import CancellationToken, CancelledError
from copilot_providers.base.errors import ConnectivityError
from copilot_providers.base.models import ChatMessage, ChatRequest
from copilot_providers.base.timeouts import TimeoutConfig


class TrackingStream(httpx.AsyncByteStream):
    """Response body that yields ``chunks`` and optionally hangs or fails after."""

    def __init__(self, chunks, *, hang=False, fail=False):
        self.chunks = list(chunks)
        self.hang = hang
        self.fail = fail
        self.closed = 0
        self.reads = 0

    async def __aiter__(self):
        for chunk in self.chunks:
            self.reads += 1
            yield chunk
        if self.fail:
            raise httpx.ReadError("connection reset")
        if self.hang:
            await asyncio.Event().wait()

    async def aclose(self):
        self.closed += 1


def _request():
    return ChatRequest(messages=(ChatMessage("user", "hi"),), max_tokens=64, temperature=0.2)


def _released_events(caplog):
    events = []
    for record in caplog.records:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            continue
        if payload.get("event") == "stream.released":
            events.append(payload)
    return events


async def _open(make_client, body, **client_kwargs):
    client = make_client(lambda request: httpx.Response(200, stream=body), **client_kwargs)
    return client, await client.create_chat_completion(_request())


@pytest.mark.anyio
async def test_yields_fragments_until_done(make_client, sse_body, delta, copilot_caplog):
    body = TrackingStream([sse_body(delta("Hel"), delta("lo"))])
    client, stream = await _open(make_client, body)

    fragments = [f async for f in stream]

    assert fragments == ["Hel", "lo"]
    assert stream.finish_reason == "done"
    assert stream.closed
    assert body.closed == 1
    (released,) = _released_events(copilot_caplog)
    assert released["finish_reason"] == "done" and released["fragments"] == 2


@pytest.mark.anyio
async def test_nothing_after_done_is_yielded(make_client, delta):
    raw = f"data: {delta('a')}\n\ndata: [DONE]\n\ndata: {delta('late')}\n\n".encode()
    client, stream = await _open(make_client, TrackingStream([raw]))
    assert [f async for f in stream] == ["a"]


@pytest.mark.anyio
async def test_record_split_across_network_chunks(make_client):
    body = TrackingStream(
        [
            b'data: {"choices":[{"delta":{"content":"ab"}}]}\n',
            b'\ndata: {"choices":[{"delta":{"content":"c',
            b'd"}}]}\n\ndata: [DONE]\n\n',
        ]
    )
    client, stream = await _open(make_client, body)
    assert [f async for f in stream] == ["ab", "cd"]
    assert stream.finish_reason == "done"
    assert body.closed == 1


@pytest.mark.anyio
async def test_body_ending_without_sentinel_finishes_with_eof(make_client, sse_body, delta):
    client, stream = await _open(make_client, TrackingStream([sse_body(delta("x"), done=False)]))
    assert [f async for f in stream] == ["x"]
    assert stream.finish_reason == "eof"


@pytest.mark.anyio
async def test_malformed_record_is_skipped_with_warning(make_client, sse_body, delta, copilot_caplog):
    body = TrackingStream([sse_body("{broken", delta("ok"))])
    client, stream = await _open(make_client, body)

    assert [f async for f in stream] == ["ok"]
    assert any("stream.malformed_record" in r.getMessage() for r in copilot_caplog.records)


@pytest.mark.anyio
async def test_cancel_mid_stream_ends_silently_and_releases_once(make_client, delta, copilot_caplog):
    body = TrackingStream([f"data: {delta('first')}\n\n".encode()], hang=True)
    token = CancellationToken()
    client = make_client(lambda request: httpx.Response(200, stream=body))
    stream = await client.create_chat_completion(_request(), token)

    received = []

    async def consume():
        async for fragment in stream:
            received.append(fragment)
            asyncio.get_running_loop().call_later(0.01, token.cancel, "cancelled")

    await asyncio.wait_for(consume(), timeout=2.0)
    await stream.aclose()

    assert received == ["first"]
    assert stream.finish_reason == "cancelled"
    assert body.closed == 1
    assert len(_released_events(copilot_caplog)) == 1


@pytest.mark.anyio
async def test_cancel_while_idle_schedules_release(make_client, delta):
    body = TrackingStream([f"data: {delta('x')}\n\n".encode()], hang=True)
    client, stream = await _open(make_client, body)

    stream.cancel()
    for _ in range(5):
        await asyncio.sleep(0)

    assert stream.closed
    assert stream.finish_reason == "cancelled"
    assert [f async for f in stream] == []
    assert body.closed == 1


@pytest.mark.anyio
async def test_deadline_raises_timeout_cancellation(make_client):
    body = TrackingStream([], hang=True)
    timeouts = TimeoutConfig(connect_test_seconds=1, completion_seconds=1, chat_seconds=0.05, http_timeout_seconds=5)
    client, stream = await _open(make_client, body, timeouts=timeouts)

    with pytest.raises(CancelledError) as info:
        async for _ in stream:
            pass

    assert info.value.reason == "timeout"
    assert stream.finish_reason == "timeout"
    assert body.closed == 1


@pytest.mark.anyio
async def test_transport_error_surfaces_as_connectivity_error(make_client, delta):
    body = TrackingStream([f"data: {delta('partial')}\n\n".encode()], fail=True)
    client, stream = await _open(make_client, body)

    received = []
    with pytest.raises(ConnectivityError) as info:
        async for fragment in stream:
            received.append(fragment)

    assert received == ["partial"]
    assert info.value.message.startswith("Stream interrupted")
    assert stream.finish_reason == "error"
    assert body.closed == 1


@pytest.mark.anyio
async def test_context_manager_exit_releases_undrained_stream(make_client, sse_body, delta, copilot_caplog):
    body = TrackingStream([sse_body(delta("a"), delta("b"))])
    client, stream = await _open(make_client, body)

    async with stream:
        assert await stream.__anext__() == "a"

    assert stream.finish_reason == "closed"
    assert body.closed == 1
    await stream.aclose()
    assert len(_released_events(copilot_caplog)) == 1
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()


@pytest.mark.anyio
async def test_release_disarms_deadline(make_client, sse_body, delta):
    timeouts = TimeoutConfig(connect_test_seconds=1, completion_seconds=1, chat_seconds=0.05, http_timeout_seconds=5)
    client, stream = await _open(make_client, TrackingStream([sse_body(delta("a"))]), timeouts=timeouts)
    assert [f async for f in stream] == ["a"]

    await asyncio.sleep(0.1)

    assert not stream.token.cancelled


LONG_DEADLINE = TimeoutConfig(connect_test_seconds=1, completion_seconds=1, chat_seconds=30, http_timeout_seconds=60)


@pytest.mark.anyio
async def test_break_out_of_loop_releases_before_deadline(make_client, sse_body, delta, copilot_caplog):
    body = TrackingStream([sse_body(delta("a"), delta("b"), done=False)], hang=True)
    client, stream = await _open(make_client, body, timeouts=LONG_DEADLINE)

    async for fragment in stream:
        assert fragment == "a"
        break
    gc.collect()
    for _ in range(20):
        if body.closed:
            break
        await asyncio.sleep(0.01)

    assert body.closed == 1
    assert stream.closed
    assert stream.finish_reason == "closed"
    assert not stream.token.cancelled
    assert len(_released_events(copilot_caplog)) == 1


@pytest.mark.anyio
async def test_dropped_stream_is_released(make_client, sse_body, delta):
    body = TrackingStream([sse_body(delta("a"), done=False)], hang=True)
    client, stream = await _open(make_client, body, timeouts=LONG_DEADLINE)

    async for _ in stream:
        break
    del stream
    gc.collect()
    for _ in range(20):
        if body.closed:
            break
        await asyncio.sleep(0.01)

    assert body.closed == 1


@pytest.mark.anyio
async def test_closing_the_iterator_releases_once(make_client, sse_body, delta):
    body = TrackingStream([sse_body(delta("a"), delta("b"))])
    client, stream = await _open(make_client, body, timeouts=LONG_DEADLINE)

    iterator = stream.__aiter__()
    assert await iterator.__anext__() == "a"
    await iterator.aclose()
    await stream.aclose()

    assert body.closed == 1
    assert stream.finish_reason == "closed"
    assert [f async for f in stream] == []
