"""Output generators for recovered schemas."""

from drawio_sql.generators.postgresql import DDLOptions, format_sql, generate_sql, validate_sql

__all__ = ["DDLOptions", "generate_sql", "format_sql", "validate_sql"]
