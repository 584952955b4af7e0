"""
QueryLens - Main Entry Point

Command-line front end: a direct query box, a free-text box and an
interactive shell over a SQLite database.
"""

import sys
import logging
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from querylens import __version__
from querylens.config import (
    QueryLensConfig,
    create_default_config,
    load_schema_file,
)
from querylens.core.connection import QueryResult
from querylens.core.schema_model import SchemaModel
from querylens.explorer import QueryExplorer
from querylens.translator.engine import LocalTranslator

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()

SHELL_HELP = (
    "Type a question in plain English, or:\n"
    "  [cyan]:sql <statement>[/cyan]  run SQL directly\n"
    "  [cyan]:tables[/cyan]           list tables\n"
    "  [cyan]:open <path>[/cyan]      switch database\n"
    "  [cyan]:quick <table>[/cyan]    latest rows, first table by default\n"
    "  [cyan]:quit[/cyan]             leave"
)


def _build_config(ctx: click.Context, db_path: Optional[str]) -> QueryLensConfig:
    """Merge the YAML config (if any) with command-line options."""
    opts = ctx.obj or {}
    if opts.get("config_path"):
        config = QueryLensConfig.from_yaml(opts["config_path"])
    else:
        config = create_default_config()
    if db_path:
        config.database.db_path = db_path
    if opts.get("allow_writes"):
        config.database.read_only = False
    config.verbose = config.verbose or opts.get("verbose", False)
    return config


def print_result(result: QueryResult):
    """Render a query result as a table."""
    if not result.success:
        console.print(f"[bold red]✗ {result.error}[/bold red]")
        return

    if not result.columns:
        console.print(f"[green]✓ Statement executed[/green] [dim]({result.execution_time_ms} ms)[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    for col in result.columns:
        table.add_column(str(col))
    for row in result.rows:
        table.add_row(*["NULL" if v is None else str(v) for v in row])

    console.print(table)
    console.print(f"[dim]{result.row_count} rows in {result.execution_time_ms} ms[/dim]")


def print_quick_select(explorer: QueryExplorer, table: Optional[str] = None):
    """Show the starter query for a table and its rows."""
    result = explorer.quick_select(table)
    if result is None:
        return
    console.print(f"[dim]{explorer.last_sql}[/dim]")
    print_result(result)


def print_schema(schema: SchemaModel):
    """Render a schema snapshot."""
    if schema.is_empty:
        console.print("[yellow]No tables found.[/yellow]")
        return

    table = Table(title="Schema", show_header=True)
    table.add_column("Table", style="cyan")
    table.add_column("Column", style="green")
    table.add_column("Type")
    table.add_column("PK")
    table.add_column("References")

    for t in schema:
        targets = {fk.source_column: f"{fk.target_table}.{fk.target_column}" for fk in t.foreign_keys}
        if not t.columns:
            table.add_row(t.name, "", "", "", "")
        for i, col in enumerate(t.columns):
            table.add_row(
                t.name if i == 0 else "",
                col.name,
                col.data_type or "-",
                "✓" if col.is_primary_key else "",
                targets.get(col.name, ""),
            )

    console.print(table)


# CLI Commands
@click.group()
@click.version_option(version=__version__, prog_name="QueryLens")
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='YAML config file')
@click.option('--allow-writes', is_flag=True, help='Disable read-only enforcement')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, config_path, allow_writes, verbose):
    """QueryLens - Explore a SQLite database with SQL or plain English"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj.update(config_path=config_path, allow_writes=allow_writes, verbose=verbose)


@cli.command()
@click.argument('db_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('utterance')
@click.option('--dry-run', is_flag=True, help='Only print the generated SQL')
@click.pass_context
def ask(ctx, db_path, utterance, dry_run):
    """
    Translate a question to SQL and run it.

    Examples:

        querylens ask books.db "books under 20"

        querylens ask books.db "find rowling in author" --dry-run
    """
    try:
        config = _build_config(ctx, db_path)
        with QueryExplorer(config) as explorer:
            explorer.open()
            sql = explorer.translator.translate(utterance)
            console.print(Panel(sql, title="Generated SQL", border_style="blue"))
            if not dry_run:
                result = explorer.run_sql(sql)
                print_result(result)
                if not result.success:
                    sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]✗ Error: {e}[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('db_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('statement')
@click.pass_context
def sql(ctx, db_path, statement):
    """Run a SQL statement directly."""
    try:
        config = _build_config(ctx, db_path)
        with QueryExplorer(config) as explorer:
            explorer.open()
            result = explorer.run_sql(statement)
            print_result(result)
            if not result.success:
                sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]✗ Error: {e}[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('db_path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def tables(ctx, db_path):
    """List tables, columns and keys."""
    try:
        config = _build_config(ctx, db_path)
        with QueryExplorer(config) as explorer:
            print_schema(explorer.open())
    except Exception as e:
        console.print(f"[bold red]✗ Error: {e}[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('schema_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('utterance')
@click.pass_context
def translate(ctx, schema_file, utterance):
    """Translate a question against a YAML/JSON schema snapshot, offline."""
    try:
        config = _build_config(ctx, None)
        translator = LocalTranslator(load_schema_file(schema_file), config.translator)
        click.echo(translator.translate(utterance))
    except Exception as e:
        console.print(f"[bold red]✗ Error: {e}[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('db_path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def shell(ctx, db_path):
    """Interactive session over a database."""
    try:
        config = _build_config(ctx, db_path)
        explorer = QueryExplorer(config)
        explorer.open()
    except Exception as e:
        console.print(f"[bold red]✗ Error: {e}[/bold red]")
        sys.exit(1)

    console.print(Panel(
        f"[bold blue]QueryLens[/bold blue] [dim]{db_path}[/dim]\n\n{SHELL_HELP}",
        border_style="blue"
    ))

    with explorer:
        print_quick_select(explorer)

        while True:
            try:
                line = click.prompt("querylens", prompt_suffix="> ", default="", show_default=False)
            except (EOFError, click.Abort):
                break

            line = line.strip()
            if not line:
                continue
            if line in (":quit", ":q", ":exit"):
                break

            try:
                if line == ":tables":
                    print_schema(explorer.schema)
                elif line.startswith(":open "):
                    explorer.switch_database(line[len(":open "):].strip())
                    console.print(f"[green]✓ Opened with {len(explorer.tables)} tables[/green]")
                    print_quick_select(explorer)
                elif line == ":quick" or line.startswith(":quick "):
                    print_quick_select(explorer, line[len(":quick"):].strip() or None)
                elif line.startswith(":sql "):
                    print_result(explorer.run_sql(line[len(":sql "):]))
                elif line.startswith(":"):
                    console.print(SHELL_HELP)
                else:
                    result = explorer.ask(line)
                    if explorer.last_sql:
                        console.print(f"[dim]{explorer.last_sql}[/dim]")
                    print_result(result)
            except Exception as e:
                console.print(f"[bold red]✗ Error: {e}[/bold red]")
                if config.verbose:
                    logger.exception("Shell command failed")


@cli.command()
def version():
    """Show version information."""
    console.print(Panel(
        f"[bold]QueryLens[/bold] v{__version__}\n\n"
        "Explore an unknown SQLite database.\n\n"
        "Components:\n"
        "  • Schema Scanner\n"
        "  • Free-text Translator\n"
        "  • Read-only Query Runner",
        title="About",
        border_style="blue"
    ))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
