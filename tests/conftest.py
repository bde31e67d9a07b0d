"""Shared test doubles."""

import asyncio

import pytest

from tendril.core.model import DocumentSnapshot


class FakeWriter:
    """Records snapshots; can fail or hold writes until released."""

    def __init__(self, status: int = 200, error: Exception | None = None):
        self.status = status
        self.error = error
        self.calls: list[DocumentSnapshot] = []
        self.gate: asyncio.Event | None = None

    def hold(self) -> None:
        """Block writes until release(); call inside the running loop."""
        self.gate = asyncio.Event()

    def release(self) -> None:
        if self.gate is not None:
            self.gate.set()

    async def write(self, snapshot: DocumentSnapshot) -> int:
        self.calls.append(snapshot)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.status


@pytest.fixture
def writer():
    return FakeWriter()
