"""Wiki markup codec for tendril documents."""

from .links import find_spans, is_image_url, split_alias
from .markup import (
    decode_from_presentation,
    encode_to_presentation,
    html_to_markup,
    markup_to_html,
    parse_presentation,
)

__all__ = [
    "find_spans",
    "is_image_url",
    "split_alias",
    "encode_to_presentation",
    "decode_from_presentation",
    "parse_presentation",
    "markup_to_html",
    "html_to_markup",
]
