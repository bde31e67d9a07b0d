"""Per-document broadcast channels between editing contexts.

Every open view of a document, and every editable region inside it, holds
a handle on the channel named after the document path. A message posted on
one handle reaches every other receiving handle on the same channel, in the
order it was posted. The sender never receives its own messages.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from .errors import UnsupportedEnvironment
from .model import Message

log = logging.getLogger(__name__)

CHANNEL_PREFIX = "tendril-wiki"


def channel_name(path: str) -> str:
    """Channel name for a document path, e.g. ``/Home`` -> ``tendril-wiki/Home``."""
    return f"{CHANNEL_PREFIX}{path}"


class Publisher:
    """Send-only handle on a channel."""

    def __init__(self, channel: "Channel"):
        self.channel = channel
        self.closed = False

    def post(self, message: Message | Mapping[str, Any]) -> int:
        """Broadcast a message; returns the number of receivers reached."""
        if self.closed:
            raise RuntimeError(f"Handle on {self.channel.name} is closed")
        if isinstance(message, Message):
            payload = message.to_dict()
        else:
            payload = Message.from_dict(message).to_dict()
        return self.channel._deliver(payload, sender=self)

    def close(self) -> None:
        self.closed = True


class Subscription(Publisher):
    """Receiving handle on a channel."""

    def __init__(self, channel: "Channel"):
        super().__init__(channel)
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    def put(self, payload: dict[str, Any]) -> None:
        self._queue.put_nowait(payload)

    async def get(self) -> Message:
        payload = await self._queue.get()
        return Message.from_dict(payload)

    def task_done(self) -> None:
        self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every delivered message has been taken and marked done."""
        await self._queue.join()

    def close(self) -> None:
        super().close()
        self.channel._detach(self)


class Channel:
    def __init__(self, name: str):
        self.name = name
        self._subscribers: list[Subscription] = []

    def publisher(self) -> Publisher:
        return Publisher(self)

    def subscribe(self) -> Subscription:
        sub = Subscription(self)
        self._subscribers.append(sub)
        return sub

    @property
    def subscribers(self) -> int:
        return len(self._subscribers)

    def _deliver(self, payload: dict[str, Any], sender: Publisher) -> int:
        count = 0
        for sub in list(self._subscribers):
            if sub is sender:
                continue
            # Each receiver gets its own copy of the payload
            sub.put(Message.from_dict(payload).to_dict())
            count += 1
        log.debug("%s: %s -> %d receiver(s)", self.name, payload.get("type"), count)
        return count

    def _detach(self, sub: Subscription) -> None:
        if sub in self._subscribers:
            self._subscribers.remove(sub)


class ChannelHub:
    """
    Owns the channels of one process. Construct one and pass it to every
    view that should see the others; there is no global instance.
    """

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}
        self.closed = False

    def open(self, path: str) -> Channel:
        """Get the channel for a document path.

        Raises:
            UnsupportedEnvironment: when there is no running event loop or
                the hub has been closed
        """
        if self.closed:
            raise UnsupportedEnvironment("Channel hub is closed")
        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            raise UnsupportedEnvironment(
                "Broadcast channels need a running event loop"
            ) from e

        name = channel_name(path)
        channel = self._channels.get(name)
        if channel is None:
            channel = Channel(name)
            self._channels[name] = channel
        return channel

    def names(self) -> list[str]:
        return list(self._channels)

    def close(self) -> None:
        log.debug("Closing channels %s", self.names())
        self.closed = True
        self._channels.clear()
