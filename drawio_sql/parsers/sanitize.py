"""Cleanup of raw diagram labels.

Labels typed into draw.io come back as HTML fragments, sometimes
percent-encoded, and occasionally with a whole serialized diagram pasted
into them by accident. Nothing in here raises: every function degrades
to a shorter (possibly empty) string instead.
"""

import html
import re
from urllib.parse import unquote

EMBEDDED_MODEL_TAG = "mxGraphModel"

_EMBEDDED_MODEL_RE = re.compile(r"<mxGraphModel\b[^>]*>.*?</mxGraphModel\s*>", re.IGNORECASE | re.DOTALL)
_EMBEDDED_MODEL_ENCODED_RE = re.compile(r"%3CmxGraphModel.*?%3E.*?%3C%2FmxGraphModel%3E", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_RE = re.compile(r"&(?:[a-z]+|#\d+|#x[0-9a-f]+);", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def html_to_text(value: str) -> str:
    """Flatten an HTML label to its text content.

    Line breaks become spaces, tags are dropped and entities decoded.
    """
    text = _LINE_BREAK_RE.sub(" ", value)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    return text.replace("\u00a0", " ").strip()


def _percent_decode(text: str) -> str:
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError:
        return text


def _sanitize_once(text: str) -> str:
    text = _percent_decode(text)
    text = _EMBEDDED_MODEL_ENCODED_RE.sub("", text)
    text = _EMBEDDED_MODEL_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = _ENTITY_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_label(text: str) -> str:
    """Strip markup and encoding artifacts from a label.

    Steps: percent-decode (kept as-is when the escapes are not valid UTF-8),
    drop embedded ``<mxGraphModel>`` fragments in raw and encoded form, drop
    remaining tags, drop HTML entities, collapse whitespace.

    The steps repeat until the text stops changing, so the result is a
    fixed point and sanitizing it again is a no-op. Every step only removes
    or shrinks, which bounds the loop by the input length.
    """
    if not isinstance(text, str):
        return ""
    previous = text
    for _ in range(len(text) + 2):
        current = _sanitize_once(previous)
        if current == previous:
            break
        previous = current
    return previous
