# ABOUTME: The `bookstall info` command for displaying a single product.
# ABOUTME: Shows price, flags, downloads, tags and featured image for a product ID.

from contextlib import closing
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookstall.cli.options import db_option
from bookstall.db.catalog import StoreCatalog
from bookstall.db.connection import DEFAULT_DB_PATH, open_store

console = Console()


@click.command("info")
@click.argument("product_id", type=int)
@db_option
def info(product_id: int, db_path: Path | None) -> None:
    """Show detailed information for a product by ID."""
    with closing(open_store(db_path or DEFAULT_DB_PATH)) as conn:
        catalog = StoreCatalog(conn)

        record = catalog.get_product(product_id)
        if record is None:
            console.print(f"[red]Product {product_id} not found.[/red]")
            raise SystemExit(1)

        tags = catalog.get_tags_for_product(product_id)
        thumbnail = catalog.get_attachment(record.thumbnail_id) if record.thumbnail_id else None

    product = record.product
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Name", product.name)
    table.add_row("Price", str(product.regular_price))
    flags = [f for f, on in (("virtual", product.virtual), ("downloadable", product.downloadable)) if on]
    table.add_row("Type", ", ".join(flags) or "physical")
    if product.authors:
        table.add_row("Authors", ", ".join(product.authors))
    if product.published_date:
        table.add_row("Published", product.published_date.isoformat())
    if product.description:
        table.add_row("Description", product.description)
    for download in product.downloads:
        table.add_row("Download", f"{download.name} -> {download.file_url}")
    if tags:
        table.add_row("Tags", ", ".join(tags))
    table.add_row("Cover", thumbnail.url if thumbnail else "[dim]none[/dim]")
    table.add_row("Created", record.date_created)

    console.print(table)
