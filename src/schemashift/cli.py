"""
Command-line interface for schemashift.

Export commands dump a catalog in its own dialect; convert commands
translate it into the other supported dialect.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from schemashift import __version__
from schemashift.config import Settings, load_settings
from schemashift.errors import ConfigError, SchemaShiftError
from schemashift.export import SchemaExporter
from schemashift.metadata import CatalogReader, OfflineCatalog, open_catalog
from schemashift.models import Diagnostic, Dialect
from schemashift.output import ScriptWriter
from schemashift.translation import TranslationEngine, adapter_for
from schemashift.translation.dialects import default_target
from schemashift.utils.review import ReviewReport

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@contextmanager
def handle_errors():
    """Print fatal errors in red and exit with status 1."""
    try:
        yield
    except (SchemaShiftError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


SOURCE_OPTIONS = [
    click.option(
        "--conn",
        type=str,
        default=None,
        help="Connection string (user/pwd@host:port/database)",
    ),
    click.option(
        "--dbtype",
        type=click.Choice([d.value for d in Dialect]),
        default=None,
        help="Database type of --conn",
    ),
    click.option(
        "--profile",
        type=str,
        default=None,
        help="Named connection from the settings file",
    ),
    click.option(
        "--catalog_file",
        type=click.Path(exists=True, path_type=Path),
        default=None,
        help="Offline YAML catalog instead of a live database",
    ),
]


def source_options(func):
    """Options selecting the source catalog, shared by every command."""
    for option in reversed(SOURCE_OPTIONS):
        func = option(func)
    return func


def open_source(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
) -> CatalogReader:
    """Build the source catalog from exactly one of the source options."""
    chosen = [opt for opt in (conn, profile, catalog_file) if opt]
    if len(chosen) != 1:
        raise click.UsageError("Specify exactly one of --conn, --profile or --catalog_file")

    if catalog_file:
        return OfflineCatalog.from_file(catalog_file)
    if profile:
        entry = settings.profile(profile)
        return open_catalog(entry.dialect, entry.dsn)
    if not dbtype:
        raise click.UsageError("--dbtype is required with --conn")
    return open_catalog(dbtype, conn)


def make_writer(settings: Settings) -> ScriptWriter:
    return ScriptWriter(
        output_dir=settings.output_dir,
        encoding=settings.encoding,
        mysql_no_backslash_escapes=settings.mysql_no_backslash_escapes,
    )


def make_engine(settings: Settings, catalog: CatalogReader) -> TranslationEngine:
    target = default_target(catalog.dialect)
    adapter = adapter_for(catalog, target, settings.overrides_for(catalog.dialect, target))
    return TranslationEngine(adapter)


def report_diagnostics(settings: Settings, command: str, engine: TranslationEngine) -> None:
    """Show diagnostics and write the manual-review report when enabled."""
    diagnostics: List[Diagnostic] = list(engine.diagnostics)
    if not diagnostics:
        return

    table = Table(title="Needs Manual Review")
    table.add_column("Location", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Native Type")
    table.add_column("Message")
    for d in diagnostics:
        table.add_row(d.location, d.kind.value, d.native_type, d.message)
    console.print(table)

    if settings.review_enabled:
        report = ReviewReport(command, engine.source.label, engine.target.label)
        report.add(diagnostics)
        json_path, _ = report.save(settings.output_dir)
        console.print(f"Review report: {json_path}")


def write_stream(writer: ScriptWriter, file_name: str, stream, target: Dialect, label: str):
    """Write an INSERT stream with a spinner that counts rows."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"{label}: 0 rows", total=None)

        def on_statement(count: int) -> None:
            if count % 1000 == 0:
                progress.update(task, description=f"{label}: {count:,} rows")

        with stream:
            return writer.write_statements(file_name, stream, target, on_statement=on_statement)


@click.group()
@click.version_option(version=__version__, prog_name="schemashift")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Settings file (default: ./schemashift.yaml when present)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """
    Schemashift - MySQL/Oracle schema and data export and conversion

    Export a database in its own dialect, or convert its schema and data
    into the other one.
    """
    setup_logging(verbose)
    try:
        ctx.obj = load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


@cli.command()
@source_options
@click.option(
    "--case",
    type=click.Choice(["upper", "lower"]),
    default=None,
    help="Fold table names to upper or lower case",
)
@click.option("--schema", type=str, default=None, help="Schema/owner (default: connected one)")
@click.option("--file", "file_name", type=str, default="tables.txt", help="Output file")
@click.pass_obj
def tablelist(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    case: Optional[str],
    schema: Optional[str],
    file_name: str,
) -> None:
    """Write the list of tables, one per line."""
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            tables = SchemaExporter(catalog).list_tables(case=case, schema=schema)
        path, count = make_writer(settings).write_lines(file_name, tables)
    console.print(f"[green]{count} tables saved to {path}[/green]")


@cli.command()
@source_options
@click.option("--schema", type=str, default=None, help="Schema/owner (default: connected one)")
@click.option("--file", "file_name", type=str, default="dbschema.sql", help="Output file")
@click.pass_obj
def dbschema(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    schema: Optional[str],
    file_name: str,
) -> None:
    """Export the schema of every table in the source dialect."""
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            text = SchemaExporter(catalog).export_database_schema(schema)
        path = make_writer(settings).write_text(file_name, text)
    console.print(f"[green]Database schema saved to {path}[/green]")


@cli.command()
@source_options
@click.option("--tablename", type=str, required=True, help="Table to export")
@click.option("--file", "file_name", type=str, default=None, help="Output file (default: table_schema_<dbtype>.sql)")
@click.pass_obj
def tableschema(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    tablename: str,
    file_name: Optional[str],
) -> None:
    """Export one table's schema in the source dialect."""
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            text = SchemaExporter(catalog).export_table_schema(tablename)
            file_name = file_name or f"table_schema_{catalog.dialect.value}.sql"
        path = make_writer(settings).write_text(file_name, text)
    console.print(f"[green]Schema for table {tablename} saved to {path}[/green]")


@cli.command()
@source_options
@click.option("--tablename", type=str, required=True, help="Table to export")
@click.option("--file", "file_name", type=str, default=None, help="Output file (default: <table>_data.sql)")
@click.pass_obj
def tabledata(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    tablename: str,
    file_name: Optional[str],
) -> None:
    """Export one table's rows as INSERT statements in the source dialect."""
    file_name = file_name or f"{tablename}_data.sql"
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            stream = SchemaExporter(catalog).export_table_data(tablename)
            path, count = write_stream(make_writer(settings), file_name, stream, catalog.dialect, tablename)
    if count == 0:
        console.print(f"[yellow]No data found in table {tablename}[/yellow]")
    console.print(f"[green]{count:,} rows of {tablename} saved to {path}[/green]")


@cli.command()
@source_options
@click.option("--schema", type=str, default=None, help="Schema/owner to convert (default: connected one)")
@click.option("--file", "file_name", type=str, default="converted_schema.sql", help="Output file")
@click.pass_obj
def convertdbschema(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    schema: Optional[str],
    file_name: str,
) -> None:
    """Convert every table's schema into the other dialect."""
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            engine = make_engine(settings, catalog)
            console.print(f"[bold blue]Converting schema from {engine.source.label} to {engine.target.label}[/bold blue]")
            text = engine.convert_database_schema(schema)
        path = make_writer(settings).write_text(file_name, text)
    console.print(f"[green]Converted schema saved to {path}[/green]")
    report_diagnostics(settings, "convertdbschema", engine)


@cli.command()
@source_options
@click.option("--tablename", type=str, required=True, help="Table to convert")
@click.option("--file", "file_name", type=str, default=None, help="Output file (default: converted_<table>.sql)")
@click.pass_obj
def converttable(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    tablename: str,
    file_name: Optional[str],
) -> None:
    """Convert one table's schema into the other dialect."""
    file_name = file_name or f"converted_{tablename}.sql"
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            engine = make_engine(settings, catalog)
            text = engine.convert_table_schema(tablename)
        path = make_writer(settings).write_text(file_name, text)
    console.print(f"[green]Converted schema for {tablename} saved to {path}[/green]")
    report_diagnostics(settings, "converttable", engine)


@cli.command()
@source_options
@click.option("--tablename", type=str, required=True, help="Table whose rows to convert")
@click.option("--file", "file_name", type=str, default=None, help="Output file (default: converted_<table>_data.sql)")
@click.pass_obj
def convertdata(
    settings: Settings,
    conn: Optional[str],
    dbtype: Optional[str],
    profile: Optional[str],
    catalog_file: Optional[Path],
    tablename: str,
    file_name: Optional[str],
) -> None:
    """Convert one table's rows into INSERT statements of the other dialect."""
    file_name = file_name or f"converted_{tablename}_data.sql"
    with handle_errors():
        with open_source(settings, conn, dbtype, profile, catalog_file) as catalog:
            engine = make_engine(settings, catalog)
            stream = engine.convert_table_data(tablename)
            path, count = write_stream(make_writer(settings), file_name, stream, engine.target, tablename)
    console.print(f"[green]{count:,} rows of {tablename} converted to {engine.target.label}, saved to {path}[/green]")


if __name__ == "__main__":
    cli()
