"""Inline completion pipeline: gating, debounce, cache and cancellation."""

from __future__ import annotations

import asyncio
import logging

import pytest

from copilot_providers.base.cancellation import CancellationToken, CancelledError
from copilot_providers.base.errors import CircuitOpenError, ConnectivityError
from copilot_providers.base.memory.in_memory_store import InMemoryKeyedStore
from copilot_providers.base.models import CompletionResponse
from copilot_providers.base.resilience.ttl_cache import TTLCache
from copilot_providers.completion import (
    ACCEPT_COMMAND,
    CompletionOutcome,
    InlineCompletionContext,
    InlineCompletionProvider,
    InMemoryTextDocument,
    Position,
    TriggerKind,
)

INVOKE = InlineCompletionContext(trigger_kind=TriggerKind.INVOKE)
AUTOMATIC = InlineCompletionContext(trigger_kind=TriggerKind.AUTOMATIC)


class FakeClient:
    """Stands in for OpenAICompatClient.create_completion."""

    def __init__(self, text="return a + b", *, delay=0.0, error=None):
        self.text = text
        self.delay = delay
        self.error = error
        self.requests = []

    async def create_completion(self, request):
        self.requests.append(request)
        if self.delay:
            token = request.cancellation
            for _ in range(int(self.delay / 0.005)):
                if token is not None and token.cancelled:
                    raise CancelledError(reason=token.reason)
                await asyncio.sleep(0.005)
        if self.error is not None:
            raise self.error
        return CompletionResponse.model_validate({"choices": [{"text": self.text}]})


def _doc(text="def add(a, b):\n    ", language="python", uri="file:///w/add.py"):
    return InMemoryTextDocument(text, language, uri=uri)


def _end(doc):
    last = doc.line_count - 1
    return Position(last, len(doc.line_at(last)))


@pytest.fixture
def store():
    return InMemoryKeyedStore()


@pytest.fixture
def provider_for(config, store):
    def _make(client, **config_updates):
        for key, value in config_updates.items():
            config.update(key, value)
        return InlineCompletionProvider(config, client, TTLCache(store))

    return _make


@pytest.mark.anyio
async def test_invoke_fetches_cleans_and_returns_single_item(provider_for):
    client = FakeClient("```python\nreturn a + b\n```")
    provider = provider_for(client)
    doc = _doc()
    position = _end(doc)

    items = await provider.provide_inline_completion_items(doc, position, INVOKE)

    assert len(items) == 1
    item = items[0]
    assert item.insert_text == "return a + b"
    assert item.range.start == item.range.end == position
    assert item.command.command == ACCEPT_COMMAND
    assert item.command.arguments[0].startswith("completion:")
    assert provider.last_outcome is CompletionOutcome.SERVED_FRESH

    (request,) = client.requests
    assert "def add(a, b):\n    [CURSOR]" in request.prompt
    assert request.max_tokens == 256
    assert request.temperature == 0.2


@pytest.mark.anyio
async def test_second_request_is_served_from_cache(provider_for):
    client = FakeClient()
    provider = provider_for(client)
    doc = _doc()

    first = await provider.provide_inline_completion_items(doc, _end(doc), INVOKE)
    second = await provider.provide_inline_completion_items(doc, _end(doc), INVOKE)

    assert first[0].insert_text == second[0].insert_text
    assert len(client.requests) == 1
    assert provider.last_outcome is CompletionOutcome.SERVED_CACHE


@pytest.mark.anyio
async def test_cache_key_is_deterministic_and_position_sensitive(provider_for):
    provider = provider_for(FakeClient())
    doc = _doc("a = 1\nb = 2\nc = 3")

    k1 = await provider.cache_key(doc, Position(2, 5))
    k2 = await provider.cache_key(doc, Position(2, 5))
    k3 = await provider.cache_key(doc, Position(1, 5))
    other_file = await provider.cache_key(_doc("a = 1\nb = 2\nc = 3", uri="file:///w/b.py"), Position(2, 5))

    assert k1 == k2
    assert len({k1, k3, other_file}) == 3


@pytest.mark.anyio
async def test_cache_key_only_sees_preceding_thirty_lines(provider_for):
    provider = provider_for(FakeClient())
    head_a = "\n".join(f"a{i}" for i in range(10))
    head_b = "\n".join(f"b{i}" for i in range(10))
    body = "\n".join(f"line{i}" for i in range(40))
    doc_a, doc_b = _doc(head_a + "\n" + body), _doc(head_b + "\n" + body)

    position = _end(doc_a)
    assert await provider.cache_key(doc_a, position) == await provider.cache_key(doc_b, position)


@pytest.mark.anyio
async def test_unsupported_language_makes_no_request(provider_for, store):
    client = FakeClient()
    provider = provider_for(client)
    doc = _doc("fn main() {}", language="rust", uri="file:///w/main.rs")

    assert await provider.provide_inline_completion_items(doc, _end(doc), INVOKE) == []
    assert client.requests == []
    assert store.list_keys() == []
    assert provider.last_outcome is CompletionOutcome.UNSUPPORTED


@pytest.mark.anyio
async def test_supported_languages_follow_configuration(provider_for):
    client = FakeClient()
    provider = provider_for(client, **{"autocomplete.supportedLanguages": ["rust"]})
    doc = _doc("fn main() {", language="rust")
    assert await provider.provide_inline_completion_items(doc, _end(doc), INVOKE)
    assert provider.is_language_supported("rust")
    assert not provider.is_language_supported("python")


@pytest.mark.anyio
async def test_burst_of_automatic_triggers_fetches_once_with_last_context(provider_for):
    client = FakeClient()
    provider = provider_for(client)
    docs = [_doc("x = " + "1" * n) for n in range(1, 4)]

    async def trigger(i):
        await asyncio.sleep(i * 0.002)
        return await provider.provide_inline_completion_items(docs[i], _end(docs[i]), AUTOMATIC)

    results = await asyncio.gather(*(trigger(i) for i in range(3)))

    assert results[0] == [] and results[1] == []
    assert len(results[2]) == 1
    assert len(client.requests) == 1
    assert "x = 111[CURSOR]" in client.requests[0].prompt


@pytest.mark.anyio
async def test_invoke_bypasses_debounce(provider_for):
    client = FakeClient()
    provider = provider_for(client, **{"autocomplete.debounceMs": 10_000})
    doc = _doc()
    items = await asyncio.wait_for(provider.provide_inline_completion_items(doc, _end(doc), INVOKE), timeout=1.0)
    assert items


@pytest.mark.anyio
async def test_token_cancelled_during_debounce_skips_fetch(provider_for):
    client = FakeClient()
    provider = provider_for(client)
    token = CancellationToken()
    doc = _doc()
    asyncio.get_running_loop().call_later(0.005, token.cancel, "cancelled")

    assert await provider.provide_inline_completion_items(doc, _end(doc), AUTOMATIC, token) == []
    assert client.requests == []
    assert provider.last_outcome is CompletionOutcome.CANCELLED


@pytest.mark.anyio
async def test_new_fetch_supersedes_in_flight_request(provider_for):
    client = FakeClient(delay=0.5)
    provider = provider_for(client)
    doc_a, doc_b = _doc("a = "), _doc("b = ")

    first = asyncio.ensure_future(provider.provide_inline_completion_items(doc_a, _end(doc_a), INVOKE))
    await asyncio.sleep(0.02)
    client.delay = 0.0
    second = await provider.provide_inline_completion_items(doc_b, _end(doc_b), INVOKE)

    assert await first == []
    assert client.requests[0].cancellation.cancelled
    assert client.requests[0].cancellation.reason == "superseded"
    assert len(second) == 1


@pytest.mark.anyio
async def test_editor_token_cascades_to_request(provider_for):
    client = FakeClient(delay=0.5)
    provider = provider_for(client)
    token = CancellationToken()
    doc = _doc()
    asyncio.get_running_loop().call_later(0.02, token.cancel, "cancelled")

    assert await provider.provide_inline_completion_items(doc, _end(doc), INVOKE, token) == []
    assert client.requests[0].cancellation.reason == "cancelled"
    assert provider.last_outcome is CompletionOutcome.CANCELLED


@pytest.mark.parametrize(
    "error",
    [
        ConnectivityError("API Error 500: Internal Server Error", status=500),
        CircuitOpenError("Service is cooling down due to repeated failures", retry_after_seconds=30),
        RuntimeError("unexpected"),
    ],
)
@pytest.mark.anyio
async def test_failures_degrade_to_empty_and_are_logged(provider_for, store, error, copilot_caplog):
    provider = provider_for(FakeClient(error=error))
    doc = _doc()

    assert await provider.provide_inline_completion_items(doc, _end(doc), INVOKE) == []
    assert provider.last_outcome is CompletionOutcome.EMPTY
    assert store.list_keys() == []
    assert any("completion.failed" in r.getMessage() for r in copilot_caplog.records)


@pytest.mark.anyio
async def test_blank_suggestion_is_not_cached(provider_for, store):
    provider = provider_for(FakeClient("```\n\n```"))
    doc = _doc()
    assert await provider.provide_inline_completion_items(doc, _end(doc), INVOKE) == []
    assert store.list_keys() == []
    assert provider.last_outcome is CompletionOutcome.EMPTY


@pytest.mark.anyio
async def test_cached_entry_expires_with_configured_ttl(config, store, clock):
    client = FakeClient()
    config.update("cache.ttlSeconds", 5)
    provider = InlineCompletionProvider(config, client, TTLCache(store, clock=clock))
    doc = _doc()

    await provider.provide_inline_completion_items(doc, _end(doc), INVOKE)
    clock.advance(6)
    await provider.provide_inline_completion_items(doc, _end(doc), INVOKE)

    assert len(client.requests) == 2


@pytest.mark.anyio
async def test_dispose_releases_pending_debounce(provider_for):
    client = FakeClient()
    provider = provider_for(client, **{"autocomplete.debounceMs": 10_000})
    doc = _doc()
    pending = asyncio.ensure_future(provider.provide_inline_completion_items(doc, _end(doc), AUTOMATIC))
    await asyncio.sleep(0.01)

    provider.dispose()

    assert await asyncio.wait_for(pending, timeout=1.0) == []
    assert client.requests == []


def test_completion_accepted_logs_key(provider_for, copilot_caplog):
    provider = provider_for(FakeClient())
    provider.completion_accepted("completion:abc")
    assert any("completion.accepted" in r.getMessage() for r in copilot_caplog.records)


@pytest.mark.anyio
async def test_open_circuit_is_logged_quietly(provider_for, copilot_caplog):
    provider = provider_for(FakeClient(error=CircuitOpenError("Service is cooling down due to repeated failures")))
    doc = _doc()

    for _ in range(3):
        assert await provider.provide_inline_completion_items(doc, _end(doc), INVOKE) == []

    failures = [r for r in copilot_caplog.records if "completion.failed" in r.getMessage()]
    assert len(failures) == 3
    assert all(r.levelno == logging.DEBUG for r in failures)


@pytest.mark.anyio
async def test_other_failures_stay_at_error_level(provider_for, copilot_caplog):
    provider = provider_for(FakeClient(error=ConnectivityError("API Error 502: Bad Gateway", status=502)))
    doc = _doc()
    await provider.provide_inline_completion_items(doc, _end(doc), INVOKE)

    (failure,) = [r for r in copilot_caplog.records if "completion.failed" in r.getMessage()]
    assert failure.levelno == logging.ERROR


def test_supported_languages_given_as_comma_string(provider_for):
    provider = provider_for(FakeClient(), **{"autocomplete.supportedLanguages": "python, rust"})
    assert provider.is_language_supported("python")
    assert provider.is_language_supported("rust")
    assert not provider.is_language_supported("py")
    assert not provider.is_language_supported("ython")
