import logging
from pathlib import Path
from typing import Iterable

from ..core.model import DocumentSnapshot, StoredDocument
from ..core.ports import DocumentStore
from .yaml_codec import DocumentCodec, YamlFrontmatter

log = logging.getLogger(__name__)

_FORBIDDEN = ("/", "\\", "\x00")


def check_title(title: str) -> str:
    """Validate a title for use as a file name; returns it stripped."""
    title = title.strip()
    if not title:
        raise ValueError("Title must not be empty")
    if title.startswith(".") or any(c in title for c in _FORBIDDEN):
        raise ValueError(f"Invalid title: {title!r}")
    return title


class FsDocumentStore(DocumentStore):
    """Flat store: one directory, files named <title>.md"""

    def __init__(self, root: Path, codec: DocumentCodec | None = None):
        self.root = root
        self.codec = codec or DocumentCodec(YamlFrontmatter())

    def _path(self, title: str) -> Path:
        return self.root / f"{check_title(title)}.md"

    def exists(self, title: str) -> bool:
        return self._path(title).exists()

    def read(self, title: str) -> StoredDocument | None:
        p = self._path(title)
        if not p.exists():
            return None
        return self.codec.decode_file(p.read_text(encoding="utf-8"), p.stem)

    def write(self, snapshot: DocumentSnapshot) -> StoredDocument:
        """Write a snapshot; a changed title moves the old file away."""
        doc = self.codec.from_snapshot(snapshot)
        path = self._path(doc.title)
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_text(self.codec.encode_file(doc), encoding="utf-8")

        old_title = snapshot.old_title.strip()
        if old_title and old_title != doc.title:
            old_path = self._path(old_title)
            # Case-only renames on case-insensitive filesystems hit the same file
            if old_path.exists() and not old_path.samefile(path):
                old_path.unlink()
                log.info("Renamed %r -> %r", old_title, doc.title)
        return doc

    def delete(self, title: str) -> None:
        p = self._path(title)
        if p.exists():
            p.unlink()

    def list_titles(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.md"))
