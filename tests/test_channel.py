"""Tests for per-document broadcast channels."""

import asyncio

import pytest

from tendril.core.channel import ChannelHub, channel_name
from tendril.core.errors import UnsupportedEnvironment
from tendril.core.model import Message


def test_channel_name():
    """Test channel names derive from the document path."""
    assert channel_name("/Home") == "tendril-wiki/Home"
    assert channel_name("/Home") == channel_name("/Home")
    assert channel_name("/Home") != channel_name("/Other")


def test_open_without_event_loop():
    """Test opening a channel outside a running loop is unsupported."""
    hub = ChannelHub()
    with pytest.raises(UnsupportedEnvironment):
        hub.open("/Home")


def test_open_on_closed_hub():
    """Test a closed hub refuses to open channels."""
    hub = ChannelHub()
    hub.close()

    async def scenario():
        hub.open("/Home")

    with pytest.raises(UnsupportedEnvironment):
        asyncio.run(scenario())


def test_same_path_same_channel():
    """Test one channel per document path."""
    hub = ChannelHub()

    async def scenario():
        return hub.open("/Home"), hub.open("/Home"), hub.open("/Other")

    a, b, other = asyncio.run(scenario())
    assert a is b
    assert a is not other
    assert sorted(hub.names()) == ["tendril-wiki/Home", "tendril-wiki/Other"]


def test_post_reaches_others_in_order():
    """Test delivery to every other receiver, FIFO, never to the sender."""
    hub = ChannelHub()

    async def scenario():
        channel = hub.open("/Home")
        first = channel.subscribe()
        second = channel.subscribe()
        pub = channel.publisher()

        assert pub.post(Message("REGISTER", {"id": "title", "content": "Home"})) == 2
        assert pub.post(Message("SAVE", None)) == 2
        assert first.post(Message("UNREGISTER", "title")) == 1

        got_first = [await first.get(), await first.get()]
        got_second = [await second.get(), await second.get(), await second.get()]
        for _ in got_first:
            first.task_done()
        await asyncio.wait_for(first.drain(), timeout=1)
        return got_first, got_second

    got_first, got_second = asyncio.run(scenario())

    assert [m.type for m in got_first] == ["REGISTER", "SAVE"]
    assert [m.type for m in got_second] == ["REGISTER", "SAVE", "UNREGISTER"]
    assert got_second[2].data == "title"


def test_channels_are_isolated():
    """Test documents on different paths never see each other."""
    hub = ChannelHub()

    async def scenario():
        home = hub.open("/Home").subscribe()
        other = hub.open("/Other").subscribe()
        reached = hub.open("/Home").publisher().post(Message("SAVE", None))
        got = await asyncio.wait_for(home.get(), timeout=1)
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(other.get(), timeout=0.05)
        return reached, got.type

    assert asyncio.run(scenario()) == (1, "SAVE")


def test_receivers_get_copies():
    """Test receivers cannot see later changes to the sent data."""
    hub = ChannelHub()

    async def scenario():
        channel = hub.open("/Home")
        a = channel.subscribe()
        b = channel.subscribe()
        data = {"id": "block-1", "content": "one"}
        channel.publisher().post(Message("SAVE", data))
        data["content"] = "changed"

        msg_a = await a.get()
        msg_a.data["content"] = "mutated by a"
        msg_b = await b.get()
        return msg_b

    msg = asyncio.run(scenario())
    assert msg.data == {"id": "block-1", "content": "one"}


def test_closed_subscription_detaches():
    """Test closed handles stop receiving and cannot send."""
    hub = ChannelHub()

    async def scenario():
        channel = hub.open("/Home")
        sub = channel.subscribe()
        sub.close()
        reached = channel.publisher().post(Message("SAVE", None))
        with pytest.raises(RuntimeError):
            sub.post(Message("SAVE", None))
        return reached, channel.subscribers

    assert asyncio.run(scenario()) == (0, 0)
