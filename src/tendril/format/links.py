"""Span classification for wiki markup: wiki-links, URLs, emails and images."""

import re
from urllib.parse import urlsplit

from ..core.model import Span

WIKI_LINK_RE = re.compile(r"\[\[([a-zA-Z0-9\s?\-':_’|]+)\]\]")

_URL_CHAR = r"[-A-Z0-9+&@#/%=~_|$?!:.]"
_URL_END = r"[A-Z0-9+&@#/%=~_|$]"
_URL_PARENS = rf"\({_URL_CHAR}*\)"
URL_RE = re.compile(
    rf"(?:(?:https?|ftp)://|www\.|ftp\.)"
    rf"(?:{_URL_PARENS}|{_URL_CHAR})*"
    rf"(?:{_URL_PARENS}|{_URL_END})",
    re.IGNORECASE,
)

_LABEL = r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
EMAIL_RE = re.compile(
    rf"[a-zA-Z0-9.!#$%&'*+/=?^_`{{|}}~-]+@{_LABEL}(?:\.{_LABEL})*"
)

IMAGE_EXTENSIONS = (
    "jpg", "jpeg", "png", "gif", "webp", "apng", "avif", "jfif", "pjpeg", "pjp",
)
IMAGE_RE = re.compile(
    rf"\.(?:{'|'.join(IMAGE_EXTENSIONS)})$",
    re.IGNORECASE,
)

WIKI = "wiki"
URL = "url"
EMAIL = "email"

# Earlier patterns claim their text first; later ones only see what is left.
SPAN_PATTERNS = (
    (WIKI, WIKI_LINK_RE),
    (URL, URL_RE),
    (EMAIL, EMAIL_RE),
)


def is_image_url(url: str) -> bool:
    """Return True when the URL path ends with a raster image extension."""
    path = urlsplit(url).path
    return bool(IMAGE_RE.search(path))


def is_url(text: str) -> bool:
    """Return True when text contains a URL span."""
    return URL_RE.search(text) is not None


def split_alias(content: str) -> tuple[str, str]:
    """Split wiki-link content into (alias, target).

    ``alias|target`` splits at the first ``|``; a bare ``target`` is its
    own alias.
    """
    alias, sep, target = content.partition("|")
    if not sep:
        return content, content
    return alias, target


def _gaps(length: int, spans: list[Span]) -> list[tuple[int, int]]:
    """Stretches of a line not covered by spans (spans sorted by start)."""
    gaps = []
    pos = 0
    for span in spans:
        if span.start > pos:
            gaps.append((pos, span.start))
        pos = max(pos, span.end)
    if pos < length:
        gaps.append((pos, length))
    return gaps


def find_spans(line: str) -> list[Span]:
    """Find all presentation spans in a single line.

    Patterns run in priority order against the unmodified line. Each pass
    scans only the text earlier passes left unclaimed, so a URL or email
    pattern never fires inside a wiki-link.

    Returns:
        Non-overlapping spans sorted by start offset
    """
    spans: list[Span] = []
    for kind, pattern in SPAN_PATTERNS:
        found = []
        for start, end in _gaps(len(line), spans):
            for m in pattern.finditer(line, start, end):
                found.append(Span(kind=kind, start=m.start(), end=m.end(), text=m.group(0)))
        if found:
            spans = sorted(spans + found, key=lambda s: s.start)
    return spans
