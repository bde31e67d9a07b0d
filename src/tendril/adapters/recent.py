from ..core.ports import RecentList


class RecentTitles(RecentList):
    """In-memory most-recently-used titles, newest first."""

    def __init__(self, limit: int = 8, initial: list[str] | None = None):
        self.limit = limit
        self._titles: list[str] = list(initial or [])[:limit]

    def touch(self, title: str, old_title: str = "") -> None:
        # A rename replaces the old entry
        for t in (old_title, title):
            if t and t in self._titles:
                self._titles.remove(t)
        if title:
            self._titles.insert(0, title)
        del self._titles[self.limit:]

    def discard(self, title: str) -> None:
        if title in self._titles:
            self._titles.remove(title)

    def titles(self) -> list[str]:
        return list(self._titles)
