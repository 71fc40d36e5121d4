from __future__ import annotations

import sys
from typing import Callable

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from poststore.config import get_settings, load_connection_options
from poststore.errors import StoreError
from poststore.infrastructure.db_factory import get_sync_connection
from poststore.store import schema
from poststore.store.datastore import get_factory_or
from poststore.utils.logging import configure_logging, get_logger
from poststore.utils.shortid import generate_short_id

app = typer.Typer(help="poststore administration CLI.")
log = get_logger(__name__)


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _run_schema(operation: Callable[..., None], name: str) -> None:
    _setup_logging()
    try:
        factory = get_factory_or()
    except StoreError as exc:
        _fail(exc)
        return
    try:
        operation(factory.pool)
    except StoreError as exc:
        _fail(exc)
    finally:
        factory.close()
    typer.echo(f"{name} completed.")


@app.command()
def info() -> None:
    """
    Show effective database connection options.
    """
    try:
        options = load_connection_options()
    except StoreError as exc:
        _fail(exc)
        return

    table = Table(title="poststore connection options", box=box.ROUNDED)
    table.add_column("Option", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for key, value in options.describe().items():
        table.add_row(key, str(value))
    Console().print(table)


@app.command()
def ping() -> None:
    """
    Open a one-off connection (with retry) and run SELECT 1.
    """
    _setup_logging()
    try:
        with get_sync_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as exc:
        _fail(exc)
    typer.echo("Database reachable.")


@app.command()
def migrate() -> None:
    """
    Create missing tables and columns. Existing data is left untouched.
    """
    _run_schema(schema.migrate, "migrate")


@app.command()
def clean(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """
    Drop all store tables.
    """
    if not yes:
        typer.confirm("This drops every store table. Continue?", abort=True)
    _run_schema(schema.clean, "clean")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """
    Drop and recreate all store tables.
    """
    if not yes:
        typer.confirm("This drops and recreates every store table. Continue?", abort=True)
    _run_schema(schema.reset, "reset")


@app.command()
def shortid(
    count: int = typer.Option(1, "--count", "-n", min=1, help="How many ids to print."),
) -> None:
    """
    Print freshly generated short ids.
    """
    for _ in range(count):
        typer.echo(generate_short_id())


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
