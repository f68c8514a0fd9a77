"""Intermediate representation for schemas recovered from diagrams."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

ReferentialAction = Literal["CASCADE", "SET NULL", "SET DEFAULT", "RESTRICT", "NO ACTION"]

REFERENTIAL_ACTIONS: tuple[str, ...] = ("CASCADE", "SET NULL", "SET DEFAULT", "RESTRICT", "NO ACTION")


@dataclass
class Column:
    """Table column recovered from a diagram label."""
    name: str
    type: str
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_not_null: bool = False
    is_unique: bool = False
    default_value: str | None = None
    check_constraint: str | None = None


@dataclass
class ForeignKey:
    """Foreign key constraint (single or composite)."""
    columns: list[str]
    referenced_table: str
    referenced_columns: list[str]
    on_delete: ReferentialAction | None = None
    on_update: ReferentialAction | None = None
    name: str | None = None


@dataclass
class UniqueConstraint:
    """Named unique constraint."""
    name: str
    columns: list[str]


@dataclass
class CheckConstraint:
    """Named check constraint with a raw SQL expression."""
    name: str
    expression: str


@dataclass
class Table:
    """Database table definition.

    ``id`` is the diagram cell id the table was read from. It only matters
    while a diagram is being extracted and is never written to SQL.
    """
    name: str
    id: str = ""
    columns: list[Column] = field(default_factory=list)
    foreign_keys: list[ForeignKey] = field(default_factory=list)
    unique_constraints: list[UniqueConstraint] = field(default_factory=list)
    check_constraints: list[CheckConstraint] = field(default_factory=list)
    is_junction_table: bool = False

    @property
    def primary_key_columns(self) -> list[str]:
        """Names of the primary key columns, in column order."""
        return [col.name for col in self.columns if col.is_primary_key]

    def find_column(self, name: str) -> Column | None:
        """Look up a column by name, ignoring case."""
        wanted = name.upper()
        return next((col for col in self.columns if col.name.upper() == wanted), None)


@dataclass
class Edge:
    """Raw relationship line read from the diagram."""
    id: str
    source: str
    target: str
    style: str
    source_label: str | None = None
    target_label: str | None = None


class Cardinality(str, Enum):
    """Relationship cardinality drawn on an edge."""
    ONE_TO_ONE = "1:1"
    ONE_TO_MANY = "1:N"
    MANY_TO_ONE = "N:1"
    MANY_TO_MANY = "N:M"


@dataclass
class Relationship:
    """Table-to-table relationship derived from an edge, for display only."""
    from_table: str
    to_table: str
    cardinality: Cardinality
    edge: Edge


@dataclass
class ParseResult:
    """Everything recovered from one diagram."""
    tables: list[Table] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)


def qualified_name(name: str, schema: str | None = None) -> str:
    """Get a schema-qualified object name.

    Returns "schema.name" if schema is present, otherwise just "name".
    """
    return f"{schema}.{name}" if schema else name


def column_priority(column: Column) -> int:
    """Rank a column by its strongest constraint.

    Used to decide which of two same-named columns survives deduplication:
    PK (4) > FK (3) > UNIQUE (2) > NOT NULL (1) > plain (0).
    """
    if column.is_primary_key:
        return 4
    if column.is_foreign_key:
        return 3
    if column.is_unique:
        return 2
    if column.is_not_null:
        return 1
    return 0
