"""drawio-sql: Convert draw.io database diagrams to PostgreSQL DDL."""

from drawio_sql.models import (
    Cardinality,
    CheckConstraint,
    Column,
    Edge,
    ForeignKey,
    ParseResult,
    Relationship,
    Table,
    UniqueConstraint,
)

__version__ = "0.1.0"
__all__ = [
    "Table",
    "Column",
    "ForeignKey",
    "UniqueConstraint",
    "CheckConstraint",
    "Edge",
    "Relationship",
    "Cardinality",
    "ParseResult",
]
