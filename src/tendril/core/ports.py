from typing import Protocol, Iterable
from .model import DocumentSnapshot, StoredDocument


class DocumentWriter(Protocol):
    """
    Persists one document snapshot. Returns the response status on success,
    raises NetworkFailure or RejectedWrite otherwise.
    """

    async def write(self, snapshot: DocumentSnapshot) -> int:
        pass


class RecentList(Protocol):
    """
    Most-recently-used titles, touched after every successful save.
    """

    def touch(self, title: str, old_title: str = "") -> None:
        pass

    def discard(self, title: str) -> None:
        pass

    def titles(self) -> list[str]:
        pass


class DocumentStore(Protocol):
    """
    Server-side persistence, one record per title.
    """

    def exists(self, title: str) -> bool:
        pass

    def read(self, title: str) -> StoredDocument | None:
        pass

    def write(self, snapshot: DocumentSnapshot) -> StoredDocument:
        pass

    def delete(self, title: str) -> None:
        pass

    def list_titles(self) -> Iterable[str]:
        pass
