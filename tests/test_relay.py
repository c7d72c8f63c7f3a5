"""
Tests for the streaming relay core.
"""

import pytest

from supportdesk.errors import ProviderError
from supportdesk.models import Message
from supportdesk.relay import Relay

from conftest import FakeProvider

PERSONA = "You are the test support agent."


def _relay(provider) -> Relay:
    return Relay(provider=provider, system_prompt=PERSONA, model="gpt-4o-mini")


async def _drain(stream) -> list[bytes]:
    return [chunk async for chunk in stream]


def test_build_messages_prepends_persona():
    relay = _relay(FakeProvider())
    history = [Message("assistant", "Hi!"), Message("user", "What topics do you cover?")]
    assert relay.build_messages(history) == [
        {"role": "system", "content": PERSONA},
        {"role": "assistant", "content": "Hi!"},
        {"role": "user", "content": "What topics do you cover?"},
    ]


def test_build_messages_keeps_client_system_messages_after_persona():
    relay = _relay(FakeProvider())
    built = relay.build_messages([Message("system", "client note"), Message("user", "hi")])
    assert built[0] == {"role": "system", "content": PERSONA}
    assert built[1] == {"role": "system", "content": "client note"}


@pytest.mark.asyncio
async def test_stream_forwards_fragments_as_bytes(fake_provider):
    relay = _relay(fake_provider)
    stream = await relay.open_stream([Message("user", "What topics do you cover?")])
    chunks = await _drain(stream)

    assert chunks == [b"We cover ", b"algorithms, ", b"data structures..."]
    call = fake_provider.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["messages"] == [
        {"role": "system", "content": PERSONA},
        {"role": "user", "content": "What topics do you cover?"},
    ]


@pytest.mark.asyncio
async def test_stream_encodes_utf8():
    relay = _relay(FakeProvider(["naïve ", "café ☕"]))
    chunks = await _drain(await relay.open_stream([Message("user", "hi")]))
    assert b"".join(chunks).decode("utf-8") == "naïve café ☕"


@pytest.mark.asyncio
async def test_stream_skips_empty_fragments():
    relay = _relay(FakeProvider(["", "Hello", "", "!"]))
    chunks = await _drain(await relay.open_stream([Message("user", "hi")]))
    assert chunks == [b"Hello", b"!"]


@pytest.mark.asyncio
async def test_empty_provider_stream_closes_cleanly():
    relay = _relay(FakeProvider([]))
    assert await _drain(await relay.open_stream([Message("user", "hi")])) == []


@pytest.mark.asyncio
async def test_failure_before_first_fragment_raises_on_open():
    relay = _relay(FakeProvider(["never sent"], fail_after=0))
    with pytest.raises(ProviderError):
        await relay.open_stream([Message("user", "hi")])


@pytest.mark.asyncio
async def test_failure_mid_stream_raises_after_delivered_chunks():
    relay = _relay(FakeProvider(["Sorry, ", "more"], fail_after=1))
    stream = await relay.open_stream([Message("user", "hi")])
    received = []

    with pytest.raises(ProviderError):
        async for chunk in stream:
            received.append(chunk)

    assert received == [b"Sorry, "]


@pytest.mark.asyncio
async def test_calls_are_independent(fake_provider):
    relay = _relay(fake_provider)
    history = [Message("user", "What topics do you cover?")]

    first = await _drain(await relay.open_stream(history))
    second = await _drain(await relay.open_stream(history))

    assert first == second
    assert len(fake_provider.calls) == 2
    assert fake_provider.calls[0]["messages"] == fake_provider.calls[1]["messages"]
    # The caller's history is never modified
    assert history == [Message("user", "What topics do you cover?")]


@pytest.mark.asyncio
async def test_interleaved_streams_do_not_mix():
    relay = _relay(FakeProvider(["a", "b", "c"]))
    s1 = await relay.open_stream([Message("user", "one")])
    s2 = await relay.open_stream([Message("user", "two")])

    assert await anext(s1) == b"a"
    assert await anext(s2) == b"a"
    assert await _drain(s1) == [b"b", b"c"]
    assert await _drain(s2) == [b"b", b"c"]
