"""PostgreSQL DDL generator."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

import sqlglot
from sqlglot.errors import ParseError, TokenError

from drawio_sql.models import REFERENTIAL_ACTIONS, ForeignKey, ReferentialAction, Table, qualified_name

logger = logging.getLogger(__name__)


@dataclass
class DDLOptions:
    """Options for DDL generation."""
    include_drop_statements: bool = False
    include_indexes: bool = True
    include_foreign_keys: bool = True
    use_if_not_exists: bool = True
    include_comments: bool = False
    schema_name: str | None = None
    on_delete_action: ReferentialAction = "CASCADE"
    on_update_action: ReferentialAction = "CASCADE"

    def __post_init__(self) -> None:
        for option in ("on_delete_action", "on_update_action"):
            action = getattr(self, option)
            if action not in REFERENTIAL_ACTIONS:
                raise ValueError(
                    f"{option} must be one of {', '.join(REFERENTIAL_ACTIONS)}, got {action!r}"
                )


def generate_sql(
    tables: list[Table],
    options: DDLOptions | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Generate a PostgreSQL DDL script for the given tables.

    Statement order: header, schema setup, drops (reverse table order),
    CREATE TABLE (table order), foreign keys, indexes. The tables are only
    read, so the same list can be rendered repeatedly with other options.
    """
    opts = options or DDLOptions()
    timestamp = (generated_at or datetime.now(timezone.utc)).isoformat()
    schema = opts.schema_name

    sql = "-- PostgreSQL DDL Script\n"
    sql += "-- Generated from draw.io diagram by drawio-sql\n"
    sql += f"-- Date: {timestamp}\n\n"

    if schema:
        sql += f"CREATE SCHEMA IF NOT EXISTS {schema};\n"
        sql += f"SET search_path TO {schema};\n\n"

    if opts.include_drop_statements:
        sql += "-- Drop tables\n"
        for table in reversed(tables):
            sql += f"DROP TABLE IF EXISTS {qualified_name(table.name, schema)} CASCADE;\n"
        sql += "\n"

    sql += "-- Create tables\n"
    for table in tables:
        sql += _generate_create_table(table, opts)
        sql += "\n"

    if opts.include_foreign_keys:
        sql += "-- Foreign key constraints\n"
        for table in tables:
            sql += _generate_foreign_keys(table, tables, opts)
        sql += "\n"

    if opts.include_indexes:
        sql += "-- Indexes\n"
        for table in tables:
            sql += _generate_indexes(table, schema)

    return sql


def _generate_create_table(table: Table, opts: DDLOptions) -> str:
    """Generate the CREATE TABLE statement for one table."""
    full_name = qualified_name(table.name, opts.schema_name)
    if_not_exists = "IF NOT EXISTS " if opts.use_if_not_exists else ""

    sql = f"-- Table: {table.name}\n"
    sql += f"CREATE TABLE {if_not_exists}{full_name} (\n"

    lines: list[str] = []
    for col in table.columns:
        col_def = f"    {col.name} {col.type}"
        if col.default_value:
            col_def += f" DEFAULT {col.default_value}"
        # The primary key constraint already implies NOT NULL
        if col.is_not_null and not col.is_primary_key:
            col_def += " NOT NULL"
        if col.check_constraint:
            col_def += f" CHECK ({col.check_constraint})"
        lines.append(col_def)

    primary_keys = table.primary_key_columns
    if primary_keys:
        lines.append(
            f"    CONSTRAINT pk_{table.name.lower()} PRIMARY KEY ({', '.join(primary_keys)})"
        )

    for uq in table.unique_constraints:
        lines.append(f"    CONSTRAINT {uq.name} UNIQUE ({', '.join(uq.columns)})")

    for check in table.check_constraints:
        lines.append(f"    CONSTRAINT {check.name} CHECK ({check.expression})")

    sql += ",\n".join(lines)
    sql += "\n);\n"

    if opts.include_comments and table.is_junction_table:
        sql += f"COMMENT ON TABLE {full_name} IS 'Junction table';\n"

    return sql


def _alter_table_fk(
    table_name: str,
    constraint_name: str,
    columns: list[str],
    ref_table_name: str,
    ref_columns: list[str],
    on_delete: str,
    on_update: str,
) -> str:
    return (
        f"ALTER TABLE {table_name}\n"
        f"    ADD CONSTRAINT {constraint_name}\n"
        f"    FOREIGN KEY ({', '.join(columns)})\n"
        f"    REFERENCES {ref_table_name}({', '.join(ref_columns)})\n"
        f"    ON DELETE {on_delete}\n"
        f"    ON UPDATE {on_update};\n\n"
    )


def _generate_foreign_keys(table: Table, all_tables: list[Table], opts: DDLOptions) -> str:
    """Generate ALTER TABLE ... FOREIGN KEY statements for one table.

    Foreign keys are grouped by referenced table. A group whose distinct
    columns match a composite primary key becomes one composite constraint;
    anything else becomes one constraint per column, pointing at the first
    primary key column.
    """
    if not table.foreign_keys:
        return ""

    sql = ""
    schema = opts.schema_name
    full_name = qualified_name(table.name, schema)
    created: set[str] = set()

    groups: dict[str, list[ForeignKey]] = {}
    for fk in table.foreign_keys:
        groups.setdefault(fk.referenced_table, []).append(fk)

    for ref_table_name, fks in groups.items():
        ref_table = next((t for t in all_tables if t.name == ref_table_name), None)
        if ref_table is None:
            logger.warning(
                "Skipping FK from '%s' to unknown table '%s'", table.name, ref_table_name
            )
            continue

        ref_pk_columns = ref_table.primary_key_columns
        if not ref_pk_columns:
            logger.warning(
                "Skipping FK from '%s' to '%s', which has no primary key",
                table.name, ref_table_name,
            )
            continue

        fk_columns = list(dict.fromkeys(col for fk in fks for col in fk.columns))
        ref_full_name = qualified_name(ref_table_name, schema)
        on_delete = fks[0].on_delete or opts.on_delete_action
        on_update = fks[0].on_update or opts.on_update_action

        if len(ref_pk_columns) > 1 and len(fk_columns) == len(ref_pk_columns):
            constraint_name = f"fk_{table.name.lower()}_{ref_table_name.lower()}"
            if constraint_name in created:
                continue
            created.add(constraint_name)
            sql += _alter_table_fk(
                full_name, constraint_name, fk_columns,
                ref_full_name, ref_pk_columns, on_delete, on_update,
            )
            continue

        for fk_col in fk_columns:
            fk = next(fk for fk in fks if fk_col in fk.columns)
            if fk.name and len(fk.columns) == 1:
                constraint_name = fk.name
            else:
                constraint_name = f"fk_{table.name.lower()}_{fk_col.lower()}"
            if constraint_name in created:
                continue
            created.add(constraint_name)
            sql += _alter_table_fk(
                full_name, constraint_name, [fk_col],
                ref_full_name, [ref_pk_columns[0]],
                fk.on_delete or opts.on_delete_action,
                fk.on_update or opts.on_update_action,
            )

    return sql


def _generate_indexes(table: Table, schema: str | None) -> str:
    """One index per distinct foreign key column."""
    sql = ""
    full_name = qualified_name(table.name, schema)
    indexed: set[str] = set()

    for fk in table.foreign_keys:
        for col in fk.columns:
            if col in indexed:
                continue
            indexed.add(col)
            sql += f"CREATE INDEX IF NOT EXISTS idx_{table.name.lower()}_{col.lower()}\n"
            sql += f"    ON {full_name}({col});\n\n"

    return sql


def format_sql(sql: str) -> str:
    """Collapse runs of blank lines and trim the script."""
    return re.sub(r"\n{3,}", "\n\n", sql).strip()


def validate_sql(sql: str) -> list[str]:
    """Check that a DDL script parses with sqlglot's postgres dialect.

    Returns the parse problems found; an empty list means sqlglot accepted
    every statement. sqlglot tolerates some malformed DDL (empty column
    lists, stray commas), and semantics (types, references) are not checked.
    """
    try:
        statements = sqlglot.parse(sql, dialect="postgres")
    except (ParseError, TokenError) as e:
        return [str(e)]

    if not any(stmt is not None for stmt in statements):
        return ["Script contains no SQL statements"]

    return []
