"""Diagram parsers."""

from drawio_sql.parsers.cells import DiagramCell, DiagramParseError, read_cells
from drawio_sql.parsers.columns import parse_column
from drawio_sql.parsers.drawio import DrawioParser
from drawio_sql.parsers.sanitize import sanitize_label
from drawio_sql.parsers.types import map_data_type

__all__ = [
    "DrawioParser",
    "DiagramCell",
    "DiagramParseError",
    "read_cells",
    "parse_column",
    "sanitize_label",
    "map_data_type",
]
