# ABOUTME: The `bookstall tag` command group for viewing product tags.
# ABOUTME: Tags are created from EPUB subjects on upload; `tag ls` lists them with counts.

from contextlib import closing
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookstall.cli.options import db_option
from bookstall.db.catalog import StoreCatalog
from bookstall.db.connection import DEFAULT_DB_PATH, open_store

console = Console()


@click.group("tag")
def tag() -> None:
    """Inspect product tags."""


@tag.command("ls")
@db_option
def tag_ls(db_path: Path | None) -> None:
    """List all tags with product counts."""
    with closing(open_store(db_path or DEFAULT_DB_PATH)) as conn:
        tags = StoreCatalog(conn).list_tags()

    if not tags:
        console.print("[yellow]No tags in the store.[/yellow]")
        return

    table = Table()
    table.add_column("Tag", style="cyan")
    table.add_column("Products", style="dim", justify="right")

    for name, count in tags:
        table.add_row(name, str(count))

    console.print(table)
