"""Column label parsing (``name: TYPE [PK] [FK] [UQ]``)."""

import logging
import re

from drawio_sql.models import Column
from drawio_sql.parsers.cells import parse_style
from drawio_sql.parsers.sanitize import EMBEDDED_MODEL_TAG, html_to_text, sanitize_label
from drawio_sql.parsers.types import map_data_type

logger = logging.getLogger(__name__)

MAX_COLUMN_NAME_LENGTH = 100

# Marker -> Column flag. Matched case-sensitively.
COLUMN_MARKERS: dict[str, str] = {
    "PK": "is_primary_key",
    "FK": "is_foreign_key",
    "UNIQUE": "is_unique",
    "UQ": "is_unique",
    "NN": "is_not_null",
}

FONT_STYLE_UNDERLINE = 4

_BRACKET_GROUP_RE = re.compile(r"\[([^\[\]]*)\]")
_UNDERLINE_TAG_RE = re.compile(r"<u[\s>]", re.IGNORECASE)


def _split_markers(type_text: str) -> tuple[str, set[str]]:
    """Remove marker tags from the type side and return the markers found.

    A bracket group counts as a marker tag when every comma-separated item
    in it is a known marker, so both ``[PK] [FK]`` and ``[PK, FK]`` work
    while ``INTEGER[]`` is left alone.
    """
    markers: set[str] = set()

    def _take(match: re.Match) -> str:
        items = [item.strip() for item in match[1].split(",")]
        if items and all(item in COLUMN_MARKERS for item in items):
            markers.update(items)
            return ""
        return match[0]

    remaining = _BRACKET_GROUP_RE.sub(_take, type_text)
    return remaining.strip(), markers


def _is_underlined(value: str, style: str) -> bool:
    """Underlined text is the diagram convention for a required column."""
    if _UNDERLINE_TAG_RE.search(value):
        return True
    font_style = parse_style(style).get("fontStyle", "0")
    return font_style.isdigit() and bool(int(font_style) & FONT_STYLE_UNDERLINE)


def _clean_name(name_text: str) -> str:
    name = name_text.strip()
    name = re.sub(r"^[+#]\s*", "", name)
    name = re.sub(r"[%<>]", "", name)
    return name.strip()


def parse_column(value: str, style: str = "") -> Column | None:
    """Parse one column label.

    Returns None when the label is not shaped like ``name: type`` or the
    name looks corrupted (empty, over 100 characters, leftover brackets, or
    a leaked diagram fragment). Markers on the name side are dropped, not applied.
    """
    text = sanitize_label(html_to_text(value))
    if ":" not in text:
        logger.debug("Skipping label without ':' separator: %r", text)
        return None

    name_part, type_part = text.split(":", 1)
    name, name_markers = _split_markers(_clean_name(name_part))
    if name_markers:
        logger.debug("Ignoring markers on the name side of %r", text)
    if "[" in name or "]" in name:
        logger.debug("Skipping column label with brackets in its name: %r", name[:40])
        return None

    if not name or len(name) > MAX_COLUMN_NAME_LENGTH or EMBEDDED_MODEL_TAG in name:
        logger.warning("Skipping column label with unusable name: %r", name[:40])
        return None

    type_text, markers = _split_markers(type_part.strip())
    flags = {COLUMN_MARKERS[marker]: True for marker in markers}

    column = Column(name=name, type=map_data_type(type_text), **flags)
    if column.is_primary_key or _is_underlined(value, style):
        column.is_not_null = True
    return column
