# ABOUTME: The `bookstall ls` command for listing store products.
# ABOUTME: Displays a Rich table of all products in the store database.

from contextlib import closing
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookstall.cli.options import db_option
from bookstall.db.catalog import StoreCatalog
from bookstall.db.connection import DEFAULT_DB_PATH, open_store

console = Console()


@click.command("ls")
@db_option
def ls(db_path: Path | None) -> None:
    """List all products in the store."""
    with closing(open_store(db_path or DEFAULT_DB_PATH)) as conn:
        records = StoreCatalog(conn).list_products()

    if not records:
        console.print("[yellow]No products in the store.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Name", style="bold")
    table.add_column("Authors")
    table.add_column("Price", justify="right")
    table.add_column("Cover", width=5)

    for record in records:
        product = record.product
        table.add_row(
            str(record.id),
            product.name,
            ", ".join(product.authors) or "[dim]unknown[/dim]",
            str(product.regular_price),
            "yes" if record.thumbnail_id else "no",
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} product(s)[/dim]")
