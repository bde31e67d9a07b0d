"""Save coordination for one editing context.

A ``SaveCoordinator`` receives channel messages for one document view,
keeps the view's component registry current and turns SAVE requests into
document writes. Its state machine is the only serialisation mechanism:
a SAVE is accepted in ``idle`` alone, so at most one write per coordinator
is ever in flight. A SAVE arriving in any other state is dropped.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from .errors import WriteFailure
from .machine import StateMachine
from .model import REGISTER, SAVE, UNREGISTER, DocumentSnapshot, Message
from .ports import DocumentWriter, RecentList
from .registry import ComponentRegistry

log = logging.getLogger(__name__)

IDLE = "idle"
SUBMITTING = "submitting"
ERROR = "error"

SAVE_CHART = {
    "initial": IDLE,
    "states": {
        IDLE: {"on": {"SUBMITTING": SUBMITTING}},
        SUBMITTING: {"on": {"COMPLETE": IDLE, "ERROR": ERROR}},
        ERROR: {"on": {"RESET": IDLE}},
    },
}

# Component ids (or id fragments) that make up a document
TITLE_ID = "title"
BLOCK_PREFIX = "block"
TAG_ID = "tag"
METADATA_ID = "metadata"


def _is_partial(data: Any) -> bool:
    """A SAVE carries nothing or an {id, content} mapping with a string id."""
    if data is None:
        return True
    return isinstance(data, Mapping) and isinstance(data.get("id"), str)


class SaveCoordinator:
    def __init__(
        self,
        registry: ComponentRegistry,
        writer: DocumentWriter,
        recent: RecentList | None = None,
        current_title: str = "",
    ):
        self.registry = registry
        self.writer = writer
        self.recent = recent
        # Title as last loaded or saved; sent as old_title so renames can be tracked
        self.current_title = current_title
        self._machine = StateMachine(SAVE_CHART)
        self._inflight: asyncio.Task[None] | None = None

    @property
    def state(self) -> str:
        return self._machine.state

    def handle(self, message: Message | Mapping[str, Any]) -> None:
        """Apply one channel message. Each type is handled exactly once."""
        if not isinstance(message, Message):
            message = Message.from_dict(message)

        if message.type == SAVE:
            if self.state == IDLE:
                self.save(message.data)
            else:
                log.debug("Dropping SAVE while %s", self.state)
        elif message.type == REGISTER:
            self.registry.register(message.data)
        elif message.type == UNREGISTER:
            self.registry.unregister(message.data)
        else:
            log.warning("Ignoring message of unknown type %r", message.type)

    def save(self, partial: Mapping[str, Any] | None = None) -> "asyncio.Task[None] | None":
        """Start a save if idle.

        Merges ``partial`` ({id, content}) into the registry, assembles the
        snapshot and schedules the write on the running loop.

        Returns:
            The write task, or None when the coordinator is not idle or the
            payload is unusable
        """
        if not self._machine.can("SUBMITTING"):
            return None
        if not _is_partial(partial):
            log.warning("Ignoring malformed SAVE payload %r", partial)
            return None
        loop = asyncio.get_running_loop()

        self._machine.send("SUBMITTING")
        try:
            if partial:
                self._merge(partial)
            snapshot = self.snapshot()
        except Exception:
            log.exception("Could not assemble snapshot")
            self._machine.send("ERROR")
            return None

        self._inflight = loop.create_task(self._submit(snapshot))
        return self._inflight

    def reset(self) -> str:
        """Leave the error state so the next SAVE is accepted."""
        return self._machine.send("RESET")

    def snapshot(self) -> DocumentSnapshot:
        body = "\n".join(b.content for b in self.registry.get_by_prefix(BLOCK_PREFIX))
        return DocumentSnapshot(
            title=self._content(TITLE_ID),
            old_title=self.current_title,
            body=body,
            tags=self._content(TAG_ID),
            metadata=self._content(METADATA_ID),
        )

    async def join(self) -> None:
        """Wait for the in-flight write, if any."""
        if self._inflight is not None:
            await self._inflight

    def _content(self, id: str) -> str:
        comp = self.registry.get(id)
        return comp.content if comp is not None else ""

    def _merge(self, partial: Mapping[str, Any]) -> None:
        cid = partial.get("id")
        if cid not in self.registry:
            log.warning("SAVE for unknown component %r, content not merged", cid)
            return
        self.registry.update(cid, str(partial.get("content") or ""))

    async def _submit(self, snapshot: DocumentSnapshot) -> None:
        try:
            status = await self.writer.write(snapshot)
        except WriteFailure as e:
            log.error("Saving %r failed: %s", snapshot.title, e)
            self._machine.send("ERROR")
            return
        except Exception:
            log.exception("Unexpected error saving %r", snapshot.title)
            self._machine.send("ERROR")
            return

        log.info("Saved %r (status %s)", snapshot.title, status)
        if self.recent is not None:
            self.recent.touch(snapshot.title, snapshot.old_title)
        self.current_title = snapshot.title
        self._machine.send("COMPLETE")
