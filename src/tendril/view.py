"""Document view: one editing context on one document."""

import asyncio
import logging
from typing import Any

from .core.channel import ChannelHub, Publisher, Subscription
from .core.coordinator import SaveCoordinator
from .core.model import REGISTER, SAVE, UNREGISTER, Component, Message
from .core.ports import DocumentWriter, RecentList
from .core.registry import ComponentRegistry

log = logging.getLogger(__name__)


class Region:
    """An editable region of a view, talking to the view over the channel."""

    def __init__(self, publisher: Publisher, id: str):
        self.publisher = publisher
        self.id = id
        self.content = ""

    def mount(self, content: str = "") -> None:
        self.content = content
        self.publisher.post(Message(REGISTER, Component(self.id, content)))

    def edit(self, content: str) -> None:
        """Local edit; reaches the registry on the next save."""
        self.content = content

    def save(self, content: str | None = None) -> None:
        if content is not None:
            self.content = content
        self.publisher.post(Message(SAVE, {"id": self.id, "content": self.content}))

    def unmount(self) -> None:
        self.publisher.post(Message(UNREGISTER, self.id))
        self.publisher.close()


class DocumentView:
    """
    Wires a registry and a save coordinator to the channel of one document.

    Usage::

        view = DocumentView(hub, writer, recent)
        await view.open("/Home", current_title="Home")
        title = view.region("title")
        title.mount("Home")
        ...
        await view.close()
    """

    def __init__(
        self,
        hub: ChannelHub,
        writer: DocumentWriter,
        recent: RecentList | None = None,
    ):
        self.hub = hub
        self.writer = writer
        self.recent = recent
        self.path: str | None = None
        self.registry: ComponentRegistry | None = None
        self.coordinator: SaveCoordinator | None = None
        self._subscription: Subscription | None = None
        self._pump: asyncio.Task[None] | None = None

    @property
    def is_open(self) -> bool:
        return self._pump is not None

    @property
    def state(self) -> str:
        return self._require_open().state

    async def open(self, path: str, current_title: str = "") -> "DocumentView":
        """Attach to the channel for ``path`` and start processing messages.

        Raises:
            UnsupportedEnvironment: when the channel cannot be created
        """
        if self.is_open:
            raise RuntimeError(f"View already open on {self.path}")
        channel = self.hub.open(path)

        self.path = path
        self.registry = ComponentRegistry()
        self.coordinator = SaveCoordinator(
            self.registry, self.writer, self.recent, current_title=current_title
        )
        self._subscription = channel.subscribe()
        self._pump = asyncio.get_running_loop().create_task(self._run())
        log.debug("Opened view on %s", channel.name)
        return self

    def region(self, id: str) -> Region:
        self._require_open()
        channel = self.hub.open(self.path)
        return Region(channel.publisher(), id)

    def reset(self) -> str:
        return self._require_open().reset()

    async def settle(self) -> None:
        """Let queued messages drain and the in-flight write finish."""
        coordinator = self._require_open()
        await self._subscription.drain()
        await coordinator.join()

    async def close(self) -> None:
        if not self.is_open:
            return
        self._pump.cancel()
        try:
            await self._pump
        except asyncio.CancelledError:
            pass
        self._pump = None
        await self.coordinator.join()
        self._subscription.close()
        log.debug(
            "Closed view on %s, %d receiver(s) left",
            self.path, self._subscription.channel.subscribers,
        )

    async def __aenter__(self) -> "DocumentView":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def _require_open(self) -> SaveCoordinator:
        if self.coordinator is None or not self.is_open:
            raise RuntimeError("View is not open")
        return self.coordinator

    async def _run(self) -> None:
        while True:
            message = await self._subscription.get()
            try:
                self.coordinator.handle(message)
            except Exception as e:
                log.error("Failed to handle %s message: %s", message.type, e)
            finally:
                self._subscription.task_done()
