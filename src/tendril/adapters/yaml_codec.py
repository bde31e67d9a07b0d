import re, io
import yaml
from typing import Any
from ..core.model import DocumentSnapshot, StoredDocument

_FM = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*\n?", re.DOTALL)
_TAG_SPLIT = re.compile(r"[,\s]+")


def parse_tags(raw: str) -> list[str]:
    """Split a tag string on commas and whitespace, dropping duplicates."""
    tags: list[str] = []
    for tag in _TAG_SPLIT.split(raw or ""):
        tag = tag.lstrip("#")
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def parse_metadata(raw: str) -> dict[str, str]:
    """Parse ``key: value`` lines; lines without a colon are ignored."""
    meta: dict[str, str] = {}
    for line in (raw or "").splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip():
            meta[key.strip()] = value.strip()
    return meta


def format_tags(tags: list[str]) -> str:
    return ", ".join(tags)


def format_metadata(meta: dict[str, str]) -> str:
    return "\n".join(f"{k}: {v}" for k, v in meta.items())


class YamlFrontmatter:
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        body = text[m.end() :]
        return (fm, body)

    def encode(self, meta: dict[str, Any]) -> str:
        if not meta:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True)
        return f"---\n{buf.getvalue()}---\n"


class DocumentCodec:
    """Stored document file: YAML frontmatter (title, tags, metadata) + body."""

    def __init__(self, fm: YamlFrontmatter):
        self.fm = fm

    def from_snapshot(self, snapshot: DocumentSnapshot) -> StoredDocument:
        return StoredDocument(
            title=snapshot.title.strip(),
            body=snapshot.body,
            tags=parse_tags(snapshot.tags),
            metadata=parse_metadata(snapshot.metadata),
        )

    def decode_file(self, text: str, title: str) -> StoredDocument:
        meta, body = self.fm.decode(text)
        tags = meta.get("tags") or []
        if isinstance(tags, str):
            tags = parse_tags(tags)
        metadata = meta.get("metadata") or {}
        return StoredDocument(
            # Filename remains the source of truth for the title
            title=title,
            body=body,
            tags=[str(t) for t in tags],
            metadata={str(k): str(v) for k, v in dict(metadata).items()},
        )

    def encode_file(self, doc: StoredDocument) -> str:
        meta: dict[str, Any] = {"title": doc.title}
        if doc.tags:
            meta["tags"] = list(doc.tags)
        if doc.metadata:
            meta["metadata"] = dict(doc.metadata)
        return self.fm.encode(meta) + doc.body
