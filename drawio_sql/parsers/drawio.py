"""Schema extraction from draw.io diagrams."""

import logging
import re

from drawio_sql.models import (
    Cardinality,
    Column,
    Edge,
    ForeignKey,
    ParseResult,
    Relationship,
    Table,
    UniqueConstraint,
    column_priority,
)
from drawio_sql.parsers.cells import DiagramCell, DiagramParseError, read_cells
from drawio_sql.parsers.columns import parse_column
from drawio_sql.parsers.sanitize import html_to_text, sanitize_label

logger = logging.getLogger(__name__)

TABLE_STYLE_MARKER = "swimlane"
COLUMN_STYLE_MARKER = "text"
EDGE_STYLE_MARKER = "edgeStyle"
EDGE_LABEL_STYLE_MARKER = "edgeLabel"
UNKNOWN_TABLE_NAME = "UnknownTable"

# Checked in order, first hit wins
CARDINALITY_MARKERS: list[tuple[str, Cardinality]] = [
    ("ERoneToMany", Cardinality.ONE_TO_MANY),
    ("ERmanyToOne", Cardinality.MANY_TO_ONE),
    ("ERmanyToMany", Cardinality.MANY_TO_MANY),
    ("ERoneToOne", Cardinality.ONE_TO_ONE),
]

JUNCTION_MIN_FOREIGN_KEYS = 2
JUNCTION_KEY_RATIO = 0.8
JUNCTION_MAX_COLUMNS = 6

_ID_SUFFIX_RE = re.compile(r"_ID$", re.IGNORECASE)
_LETTER_PREFIX_RE = re.compile(r"^[A-Z]_")


class DrawioParser:
    """Parser for database diagrams drawn in draw.io.

    Tables are swimlane containers titled with the table name; columns are
    text cells inside them labelled ``name: TYPE [PK] [FK] [UQ]``. Foreign
    keys are inferred from ``[FK]`` column names. Edges drawn between tables
    are kept as informational relationships only.
    """

    def parse(self, xml_content: str) -> ParseResult:
        """Parse draw.io XML and return the recovered schema.

        Raises:
            DiagramParseError: the document is malformed or extraction hit
                an unexpected fault. No partial result is returned.
        """
        try:
            cells = read_cells(xml_content)
            return self.extract(cells)
        except DiagramParseError:
            raise
        except Exception as e:
            raise DiagramParseError(f"Failed to extract schema: {e}") from e

    def extract(self, cells: list[DiagramCell]) -> ParseResult:
        """Build tables, edges and relationships from already-read cells."""
        table_map = self._discover_tables(cells)
        owner_map = self._collect_columns(cells, table_map)
        edges = self._collect_edges(cells)

        tables = list(table_map.values())
        self._detect_junction_tables(tables)
        self._infer_foreign_keys(tables)
        self._derive_unique_constraints(tables)
        relationships = self._build_relationships(edges, table_map, owner_map)

        logger.info(
            "Extracted %d tables, %d edges, %d relationships",
            len(tables), len(edges), len(relationships),
        )
        return ParseResult(tables=tables, edges=edges, relationships=relationships)

    def _discover_tables(self, cells: list[DiagramCell]) -> dict[str, Table]:
        """First pass: swimlane containers become tables."""
        table_map: dict[str, Table] = {}
        seen_names: set[str] = set()

        for cell in cells:
            if TABLE_STYLE_MARKER not in cell.style or not cell.value:
                continue

            name = sanitize_label(html_to_text(cell.value)) or UNKNOWN_TABLE_NAME
            if name in seen_names:
                logger.warning("Skipping duplicate table '%s' (cell %s)", name, cell.id)
                continue

            seen_names.add(name)
            table_map[cell.id] = Table(id=cell.id, name=name)

        return table_map

    def _collect_columns(
        self,
        cells: list[DiagramCell],
        table_map: dict[str, Table],
    ) -> dict[str, str]:
        """Second pass: text cells inside a table become columns.

        Returns a map of column cell id to owning table id.
        """
        owner_map: dict[str, str] = {}

        for cell in cells:
            table = table_map.get(cell.parent) if cell.parent else None
            if table is None or not cell.value or COLUMN_STYLE_MARKER not in cell.style:
                continue

            column = parse_column(cell.value, cell.style)
            if column is None:
                continue

            owner_map[cell.id] = table.id
            self._add_column(table, column)

        return owner_map

    def _add_column(self, table: Table, column: Column) -> None:
        """Append a column, or keep the stronger of two same-named columns."""
        existing = table.find_column(column.name)
        if existing is None:
            table.columns.append(column)
            return

        if column_priority(column) > column_priority(existing):
            index = table.columns.index(existing)
            table.columns[index] = column
            logger.debug("Replaced duplicate column '%s' on '%s'", column.name, table.name)
        else:
            logger.debug("Dropped duplicate column '%s' on '%s'", column.name, table.name)

    def _collect_edges(self, cells: list[DiagramCell]) -> list[Edge]:
        """Third pass: connector cells with both ends become edges."""
        edges: list[Edge] = []
        edge_index: dict[str, Edge] = {}

        for cell in cells:
            if EDGE_STYLE_MARKER in cell.style and cell.source and cell.target:
                edge = Edge(id=cell.id, source=cell.source, target=cell.target, style=cell.style)
                edges.append(edge)
                edge_index[cell.id] = edge

        # End labels are child cells of the edge, placed by relative x offset
        for cell in cells:
            edge = edge_index.get(cell.parent) if cell.parent else None
            if edge is None or EDGE_LABEL_STYLE_MARKER not in cell.style or cell.x is None:
                continue
            label = sanitize_label(html_to_text(cell.value))
            if not label:
                continue
            if cell.x < 0:
                edge.source_label = label
            elif cell.x > 0:
                edge.target_label = label

        return edges

    def _detect_junction_tables(self, tables: list[Table]) -> None:
        for table in tables:
            fk_count = sum(1 for col in table.columns if col.is_foreign_key)
            pk_count = sum(1 for col in table.columns if col.is_primary_key)
            total = len(table.columns)

            table.is_junction_table = (
                fk_count >= JUNCTION_MIN_FOREIGN_KEYS
                and (pk_count + fk_count) >= total * JUNCTION_KEY_RATIO
                and total <= JUNCTION_MAX_COLUMNS
            )

    def _infer_foreign_keys(self, tables: list[Table]) -> None:
        """Resolve ``[FK]`` columns to the tables their names point at.

        Each resolved column references the first primary key column of
        the matched table. Columns that match nothing, or match a table
        without a primary key, are left without a foreign key.
        """
        for table in tables:
            for column in table.columns:
                if not column.is_foreign_key:
                    continue

                ref_table = guess_referenced_table(column.name, tables)
                if ref_table is None:
                    logger.debug("No table found for FK column %s.%s", table.name, column.name)
                    continue

                ref_pk_columns = ref_table.primary_key_columns
                if not ref_pk_columns:
                    logger.debug(
                        "FK column %s.%s matches '%s', which has no primary key",
                        table.name, column.name, ref_table.name,
                    )
                    continue

                exists = any(
                    column.name in fk.columns and fk.referenced_table == ref_table.name
                    for fk in table.foreign_keys
                )
                if not exists:
                    table.foreign_keys.append(
                        ForeignKey(
                            columns=[column.name],
                            referenced_table=ref_table.name,
                            referenced_columns=[ref_pk_columns[0]],
                        )
                    )

    def _derive_unique_constraints(self, tables: list[Table]) -> None:
        for table in tables:
            declared = {name for uq in table.unique_constraints for name in uq.columns}
            for column in table.columns:
                if column.is_unique and not column.is_primary_key and column.name not in declared:
                    table.unique_constraints.append(
                        UniqueConstraint(
                            name=f"uq_{table.name.lower()}_{column.name.lower()}",
                            columns=[column.name],
                        )
                    )

    def _build_relationships(
        self,
        edges: list[Edge],
        table_map: dict[str, Table],
        owner_map: dict[str, str],
    ) -> list[Relationship]:
        """Turn edges between known tables into display relationships."""
        relationships: list[Relationship] = []

        for edge in edges:
            source = table_map.get(owner_map.get(edge.source, edge.source))
            target = table_map.get(owner_map.get(edge.target, edge.target))
            if source is None or target is None:
                continue
            relationships.append(
                Relationship(
                    from_table=source.name,
                    to_table=target.name,
                    cardinality=determine_cardinality(edge.style),
                    edge=edge,
                )
            )

        return relationships


def guess_referenced_table(column_name: str, tables: list[Table]) -> Table | None:
    """Guess which table a foreign key column points at.

    Rules, in order, each scanning tables in list order:
      1. name without a trailing ``_ID`` equals a table name
         (``USER_ID`` -> ``User``)
      2. either name contains the other (``CANDIDAT_ASD_ID`` -> ``Candidat``)
      3. names are equal once a single ``X_`` prefix is dropped from both
         (``D_DEMANDEUR_ID`` -> ``M_Demandeur``)
    Comparison ignores case.
    """
    clean_name = _ID_SUFFIX_RE.sub("", column_name.upper())
    if not clean_name:
        return None

    for table in tables:
        if table.name.upper() == clean_name:
            return table

    for table in tables:
        table_name = table.name.upper()
        if clean_name in table_name or table_name in clean_name:
            return table

    without_prefix = _LETTER_PREFIX_RE.sub("", clean_name)
    for table in tables:
        if _LETTER_PREFIX_RE.sub("", table.name.upper()) == without_prefix:
            return table

    return None


def determine_cardinality(style: str) -> Cardinality:
    """Read the cardinality marker from an edge style, defaulting to 1:N."""
    for marker, cardinality in CARDINALITY_MARKERS:
        if marker in style:
            return cardinality
    return Cardinality.ONE_TO_MANY
