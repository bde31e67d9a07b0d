"""Conversion between plain wiki markup and its HTML presentation form."""

import copy
import html
from urllib.parse import quote, unquote, urlsplit

from bs4 import BeautifulSoup, Tag

from ..core.model import Span
from .links import EMAIL, URL, WIKI, find_spans, is_image_url, is_url, split_alias

LINE_BREAK = "<br>"

# Characters encodeURIComponent leaves alone
URI_COMPONENT_SAFE = "-_.!~*'()"


def _text(value: str) -> str:
    return html.escape(value, quote=False)


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def _link(href: str, text: str) -> str:
    return f'<a href="{_attr(href)}">{_text(text)}</a>'


def _encode_span(span: Span) -> str:
    if span.kind == WIKI:
        alias, target = split_alias(span.text[2:-2])
        return _link("/" + quote(target, safe=URI_COMPONENT_SAFE), alias)
    if span.kind == URL:
        if is_image_url(span.text):
            return f'<img src="{_attr(span.text)}">'
        return _link(span.text, span.text)
    if span.kind == EMAIL:
        return _link("mailto:" + quote(span.text, safe="@"), span.text)
    # Unknown span kinds pass through unconverted
    return _text(span.text)


def encode_line(line: str) -> str:
    """Encode one line of markup, replacing spans by position."""
    out = []
    pos = 0
    for span in find_spans(line):
        out.append(_text(line[pos:span.start]))
        out.append(_encode_span(span))
        pos = span.end
    out.append(_text(line[pos:]))
    return "".join(out)


def encode_to_presentation(text: str) -> str:
    """Encode plain wiki markup to HTML.

    Lines are encoded independently and joined with ``<br>``. Within a
    line, wiki-links become internal links, URLs become links (or ``<img>``
    embeds for image URLs) and email addresses become ``mailto:`` links.
    Everything else is HTML-escaped text.

    Args:
        text: Plain markup, possibly multi-line

    Returns:
        Presentation HTML
    """
    return LINE_BREAK.join(encode_line(line) for line in text.split("\n"))


def _decode_anchor(anchor: Tag) -> str:
    href = anchor.get("href") or ""
    display = anchor.get_text()
    if "mailto:" in href:
        return display

    path = unquote(urlsplit(href).path)
    if path.startswith("/"):
        path = path[1:]

    # A URL-looking label wins over wiki-link syntax
    if is_url(display):
        return display
    if path == display:
        return f"[[{display}]]"
    return f"[[{display}|{path}]]"


def decode_from_presentation(tree: Tag) -> str:
    """Decode a presentation tree back to plain wiki markup.

    The tree is copied first; the caller's tree is left untouched.

    Args:
        tree: Parsed presentation document (see ``parse_presentation``)

    Returns:
        Plain markup text
    """
    tree = copy.copy(tree)

    for anchor in tree.find_all("a"):
        anchor.replace_with(_decode_anchor(anchor))

    # Images never carry explicit markup; the next encode detects them again
    for image in tree.find_all("img"):
        image.replace_with(image.get("src") or "")

    for br in tree.find_all("br"):
        br.replace_with("\n")

    return tree.get_text()


def parse_presentation(source: str) -> BeautifulSoup:
    """Parse presentation HTML into a tree."""
    return BeautifulSoup(source, "html.parser")


def markup_to_html(text: str) -> str:
    return encode_to_presentation(text)


def html_to_markup(source: str) -> str:
    return decode_from_presentation(parse_presentation(source))
