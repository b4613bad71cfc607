"""
kvdoc CLI entry point.

Commands:
    kvdoc insert  — Insert a JSON document
    kvdoc get     — Fetch a document by _id
    kvdoc find    — Query a collection
    kvdoc count   — Count documents
    kvdoc update  — Update matching documents
    kvdoc remove  — Remove matching documents
    kvdoc config  — Show resolved configuration
    kvdoc version — Show version
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kvdoc.core.config import KvDocConfig, get_kvdoc_home
from kvdoc.core.errors import KvDocError
from kvdoc.core.logging import setup_logging
from kvdoc.database import DocumentStore
from kvdoc.engine.collection import Collection
from kvdoc.engine.cursor import Cursor

app = typer.Typer(
    name="kvdoc",
    help="kvdoc — a document store over a key/value store.",
    add_completion=False,
)

console = Console()

logger = logging.getLogger("kvdoc.cli")


class _State:
    """Options shared by every command, set by the app callback."""

    db_path: Path | None = None
    memory: bool = False
    verbose: bool = False


state = _State()


@app.callback()
def main(
    db: Path = typer.Option(None, "--db", help="SQLite database file (overrides config)"),
    memory: bool = typer.Option(False, "--memory", help="Use a throwaway in-memory store"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """kvdoc — a document store over a key/value store."""
    state.db_path = db
    state.memory = memory
    state.verbose = verbose


# ━━━ Helpers ━━━


def _load_config() -> KvDocConfig:
    overrides: dict[str, Any] = {}
    if state.memory:
        overrides["storage"] = {"backend": "memory"}
    elif state.db_path is not None:
        overrides["storage"] = {"backend": "sqlite", "path": str(state.db_path)}
    return KvDocConfig.load(overrides=overrides)


def _open(collection: str) -> tuple[DocumentStore, Collection]:
    """Load config, set up logging and open the store for one collection."""
    config = _load_config()
    console_level = logging.DEBUG if state.verbose else getattr(logging, config.logging.level)
    setup_logging(
        log_dir=Path(config.logging.log_dir),
        console_level=console_level,
        file_enabled=config.logging.file_enabled,
    )
    logger.debug(f"Storage: {config.storage.backend} {config.storage.path}")

    db = DocumentStore.from_config(config, collection)
    return db, db[collection]


def _parse_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as e:
        console.print(f"[red]Invalid {what} JSON: {escape(str(e))}[/red]")
        raise typer.Exit(2) from e


def _parse_id(text: str) -> int | str:
    return int(text) if text.isdigit() else text


def _fail(error: KvDocError) -> NoReturn:
    console.print(f"[red]{type(error).__name__}: {escape(error.message)}[/red]")
    raise typer.Exit(1)


def _print_cursor(cursor: Cursor, title: str) -> None:
    if not cursor:
        console.print("[dim]No documents.[/dim]")
        return

    columns: list[str] = []
    for document in cursor:
        for name in document:
            if name not in columns:
                columns.append(name)

    table = Table(title=title, border_style="cyan")
    for name in columns:
        table.add_column(name, style="bold" if name == "_id" else None)
    for document in cursor:
        table.add_row(
            *(json.dumps(document[name]) if name in document else "" for name in columns)
        )
    console.print(table)


# ━━━ Commands ━━━


@app.command()
def insert(
    collection: str = typer.Argument(..., help="Collection name"),
    document: str = typer.Argument(..., help="Document as a JSON object"),
    uuid: bool = typer.Option(False, "--uuid", "-u", help="Assign a UUID instead of the next integer _id"),
) -> None:
    """Insert a document and print it."""
    fields = _parse_json(document, "document")
    if uuid and isinstance(fields, dict):
        fields["_id"] = "uuid"

    try:
        db, coll = _open(collection)
        with db:
            inserted = coll.insert(fields)
            console.print(Panel(inserted.render(), title=f"{collection}:{inserted.id}", border_style="green"))
    except KvDocError as e:
        _fail(e)


@app.command()
def get(
    collection: str = typer.Argument(..., help="Collection name"),
    document_id: str = typer.Argument(..., help="Document _id (integer or UUID)"),
) -> None:
    """Print one document by _id."""
    try:
        db, coll = _open(collection)
        with db:
            document = coll.get(_parse_id(document_id))
            if document is None:
                console.print(f"[yellow]No document with _id {document_id}[/yellow]")
                raise typer.Exit(1)
            console.print(Panel(document.render(), title=f"{collection}:{document.id}", border_style="dim"))
    except KvDocError as e:
        _fail(e)


@app.command()
def find(
    collection: str = typer.Argument(..., help="Collection name"),
    query: str = typer.Argument(None, help="Equality criterion as a JSON object"),
    sort: str = typer.Option(None, "--sort", "-s", help='Sort expression, e.g. "total DESC"'),
    one: bool = typer.Option(False, "--one", help="Show only the first match"),
    raw: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Query a collection."""
    criterion = _parse_json(query, "query") if query else None

    try:
        db, coll = _open(collection)
        with db:
            cursor = coll.find(criterion)
            if sort:
                cursor = cursor.sort(sort)
            if one:
                cursor = cursor[:1]
            if raw:
                console.print_json(json.dumps(cursor.to_list()))
            else:
                _print_cursor(cursor, f"{collection} ({cursor.count()})")
    except KvDocError as e:
        _fail(e)


@app.command()
def count(
    collection: str = typer.Argument(..., help="Collection name"),
) -> None:
    """Count documents in a collection."""
    try:
        db, coll = _open(collection)
        with db:
            console.print(coll.count())
    except KvDocError as e:
        _fail(e)


@app.command()
def update(
    collection: str = typer.Argument(..., help="Collection name"),
    query: str = typer.Argument(..., help="Equality criterion as a JSON object"),
    fields: str = typer.Argument(..., help="Fields to merge, as a JSON object"),
) -> None:
    """Merge fields into every matching document."""
    criterion = _parse_json(query, "query")
    payload = _parse_json(fields, "fields")

    try:
        db, coll = _open(collection)
        with db:
            updated = coll.update(criterion, payload)
            console.print(f"[green]Updated {updated.count()} document(s)[/green]")
    except KvDocError as e:
        _fail(e)


@app.command()
def remove(
    collection: str = typer.Argument(..., help="Collection name"),
    query: str = typer.Argument(None, help="Equality criterion as a JSON object"),
    all_: bool = typer.Option(False, "--all", help="Remove every document"),
) -> None:
    """Remove matching documents."""
    if query is None and not all_:
        console.print("[yellow]Give a query, or --all to empty the collection[/yellow]")
        raise typer.Exit(2)
    criterion = _parse_json(query, "query") if query else None

    try:
        db, coll = _open(collection)
        with db:
            removed = coll.remove(criterion)
            console.print(f"[green]Removed {removed} document(s)[/green]")
    except KvDocError as e:
        _fail(e)


@app.command()
def version() -> None:
    """Show kvdoc version."""
    from kvdoc import __version__
    console.print(f"kvdoc v{__version__}")


@app.command()
def config() -> None:
    """Show the resolved configuration."""
    try:
        resolved = _load_config()
    except KvDocError as e:
        _fail(e)

    console.print(Panel("[bold]kvdoc Configuration[/bold]", border_style="cyan"))
    console.print()

    config_path = get_kvdoc_home() / "config.toml"
    console.print(f"[bold]User config:[/bold] {config_path}")
    if config_path.exists():
        console.print(Panel(config_path.read_text(), title="config.toml", border_style="dim"))
    else:
        console.print("[dim]Not found — using defaults[/dim]")

    console.print()
    console.print_json(resolved.model_dump_json())


if __name__ == "__main__":
    app()
