# ABOUTME: The `bookstall inspect` command for previewing what ebook-meta reports.
# ABOUTME: Shows the metadata a product would be built from, without creating anything.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookstall.cli.options import ebook_meta_option
from bookstall.formats.ebook_meta import EbookMetaTool, MetadataExtractionError

console = Console()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@ebook_meta_option
def inspect(path: Path, ebook_meta: str) -> None:
    """Show metadata extracted from an EPUB file."""
    try:
        meta = EbookMetaTool(ebook_meta).extract_metadata(path)
    except MetadataExtractionError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    table = Table(title=str(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", meta.title)
    table.add_row("Author", meta.author or "[dim]unknown[/dim]")
    table.add_row("Tags", ", ".join(meta.subjects) or "[dim]none[/dim]")
    table.add_row("Description", meta.description or "[dim]none[/dim]")
    published = meta.published_date.isoformat() if meta.published_date else "[dim]unknown[/dim]"
    table.add_row("Published", published)

    console.print(table)
