"""Command-line interface for drawio-sql."""

import logging
from pathlib import Path

import click

from drawio_sql import __version__
from drawio_sql.models import REFERENTIAL_ACTIONS
from drawio_sql.parsers import DrawioParser
from drawio_sql.generators import DDLOptions, format_sql, generate_sql, validate_sql


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output SQL file (default: print to stdout).",
)
@click.option(
    "--schema", "schema_name",
    envvar="DRAWIO_SQL_SCHEMA",
    help="Create tables in this schema (or set DRAWIO_SQL_SCHEMA env var).",
)
@click.option("--drop/--no-drop", default=False, help="Emit DROP TABLE statements first.")
@click.option("--indexes/--no-indexes", default=True, help="Index foreign key columns.")
@click.option("--foreign-keys/--no-foreign-keys", default=True, help="Emit foreign key constraints.")
@click.option("--if-not-exists/--no-if-not-exists", default=True, help="Use CREATE TABLE IF NOT EXISTS.")
@click.option("--comments/--no-comments", default=False, help="Comment junction tables.")
@click.option(
    "--on-delete",
    type=click.Choice(REFERENTIAL_ACTIONS, case_sensitive=False),
    default="CASCADE",
    help="Foreign key ON DELETE action (default: CASCADE)",
)
@click.option(
    "--on-update",
    type=click.Choice(REFERENTIAL_ACTIONS, case_sensitive=False),
    default="CASCADE",
    help="Foreign key ON UPDATE action (default: CASCADE)",
)
@click.option("--validate", is_flag=True, help="Check the generated SQL parses before writing it.")
@click.option("-v", "--verbose", count=True, help="Log diagnostics (-v info, -vv debug).")
@click.version_option(version=__version__)
def main(
    input_file: Path,
    output: Path | None,
    schema_name: str | None,
    drop: bool,
    indexes: bool,
    foreign_keys: bool,
    if_not_exists: bool,
    comments: bool,
    on_delete: str,
    on_update: str,
    validate: bool,
    verbose: int,
) -> None:
    """Convert a draw.io database diagram to PostgreSQL DDL.

    INPUT_FILE is a .drawio/.xml file whose tables are swimlane containers
    and whose columns are text rows labelled "name: TYPE [PK] [FK] [UQ]".

    \b
    Examples:
      # Print DDL for a diagram
      drawio-sql schema.drawio

      # Write DDL into a schema, dropping existing tables first
      drawio-sql schema.drawio -o schema.sql --schema app --drop
    """
    _configure_logging(verbose)

    try:
        xml_content = input_file.read_text(encoding="utf-8")

        click.echo(f"Parsing {input_file.name}...", err=True)
        result = DrawioParser().parse(xml_content)
        if not result.tables:
            raise click.ClickException("No tables found in the diagram")
        click.echo(
            f"Found {len(result.tables)} tables and {len(result.relationships)} relationships",
            err=True,
        )

        options = DDLOptions(
            include_drop_statements=drop,
            include_indexes=indexes,
            include_foreign_keys=foreign_keys,
            use_if_not_exists=if_not_exists,
            include_comments=comments,
            schema_name=schema_name or None,
            on_delete_action=on_delete.upper(),
            on_update_action=on_update.upper(),
        )
        sql = format_sql(generate_sql(result.tables, options)) + "\n"

        if validate:
            problems = validate_sql(sql)
            if problems:
                raise click.ClickException("Generated SQL failed validation:\n" + "\n".join(problems))
            click.echo("Generated SQL parsed cleanly", err=True)

        if output:
            output.write_text(sql, encoding="utf-8")
            click.echo(f"SQL saved to: {output}", err=True)
        else:
            click.echo(sql, nl=False)

        # Print summary
        click.echo("\nSummary:", err=True)
        for table in result.tables:
            parts = [f"{len(table.columns)} columns"]
            if table.foreign_keys:
                parts.append(f"{len(table.foreign_keys)} FK")
            if table.is_junction_table:
                parts.append("junction")
            click.echo(f"  - {table.name}: {', '.join(parts)}", err=True)

    except click.ClickException:
        raise
    except Exception as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    main()
