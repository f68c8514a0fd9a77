"""Reading draw.io XML into a flat list of cells."""

import base64
import binascii
import logging
import xml.etree.ElementTree as ET
import zlib
from dataclasses import dataclass
from urllib.parse import unquote

logger = logging.getLogger(__name__)

_WRAPPER_TAGS = ("object", "UserObject")


class DiagramParseError(ValueError):
    """The input is not a readable diagram document."""


@dataclass
class DiagramCell:
    """One ``mxCell`` with the attributes schema extraction looks at."""
    id: str
    parent: str | None = None
    value: str = ""
    style: str = ""
    source: str | None = None
    target: str | None = None
    x: float | None = None


def parse_style(style: str) -> dict[str, str]:
    """Split a ``key=value;flag;`` style string into a dict.

    Bare flags (``swimlane``, ``text``) map to "1".
    """
    out: dict[str, str] = {}
    for part in (style or "").split(";"):
        part = part.strip()
        if not part:
            continue
        if "=" in part:
            key, value = part.split("=", 1)
            out[key.strip()] = value.strip()
        else:
            out[part] = "1"
    return out


def decode_diagram_payload(payload: str) -> str:
    """Inflate a compressed ``<diagram>`` page into ``<mxGraphModel>`` XML.

    draw.io compresses pages as base64(deflate(urlencode(xml))).
    """
    text = payload.strip()
    if "<mxGraphModel" in text:
        return text
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DiagramParseError("Diagram page is neither XML nor base64 data") from e

    inflated: bytes | None = None
    for wbits in (-15, 15, 31):
        try:
            inflated = zlib.decompress(raw, wbits=wbits)
            break
        except zlib.error:
            continue
    if inflated is None:
        raise DiagramParseError("Failed to decompress diagram page")

    try:
        decoded = unquote(inflated.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise DiagramParseError("Decompressed diagram page is not UTF-8") from e
    if "<mxGraphModel" not in decoded:
        raise DiagramParseError("Decompressed diagram page has no <mxGraphModel>")
    return decoded


def _tag(elem: ET.Element) -> str:
    # Drop any namespace
    return elem.tag.rsplit("}", 1)[-1] if isinstance(elem.tag, str) else ""


def _geometry_x(cell: ET.Element) -> float | None:
    geometry = cell.find("mxGeometry")
    if geometry is None or geometry.get("x") is None:
        return None
    try:
        return float(geometry.get("x"))
    except ValueError:
        return None


def _make_cell(cell: ET.Element, wrapper: ET.Element | None = None) -> DiagramCell | None:
    if wrapper is not None:
        cell_id = wrapper.get("id") or cell.get("id")
        value = wrapper.get("label", cell.get("value", ""))
    else:
        cell_id = cell.get("id")
        value = cell.get("value", "")
    if not cell_id:
        return None
    return DiagramCell(
        id=cell_id,
        parent=cell.get("parent"),
        value=value or "",
        style=cell.get("style", ""),
        source=cell.get("source"),
        target=cell.get("target"),
        x=_geometry_x(cell),
    )


def _collect_cells(root: ET.Element, cells: list[DiagramCell]) -> None:
    consumed: set[ET.Element] = set()

    for elem in root.iter():
        tag = _tag(elem)

        if tag in _WRAPPER_TAGS:
            inner = next((child for child in elem if _tag(child) == "mxCell"), None)
            if inner is None:
                continue
            consumed.add(inner)
            cell = _make_cell(inner, wrapper=elem)
            if cell:
                cells.append(cell)

        elif tag == "diagram":
            has_model = any(_tag(child) == "mxGraphModel" for child in elem)
            if has_model or not (elem.text or "").strip():
                continue
            logger.debug("Decoding compressed page %r", elem.get("name"))
            page_xml = decode_diagram_payload(elem.text)
            try:
                page_root = ET.fromstring(page_xml)
            except ET.ParseError as e:
                raise DiagramParseError(f"Invalid XML in diagram page: {e}") from e
            _collect_cells(page_root, cells)

        elif tag == "mxCell" and elem not in consumed:
            cell = _make_cell(elem)
            if cell:
                cells.append(cell)


def read_cells(xml_content: str) -> list[DiagramCell]:
    """Read every cell of every page, in document order.

    Raises:
        DiagramParseError: the document (or one of its pages) is not
            well-formed or cannot be decoded.
    """
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise DiagramParseError(f"Invalid XML format: {e}") from e

    cells: list[DiagramCell] = []
    _collect_cells(root, cells)
    return cells
