# ABOUTME: The `bookstall upload` command for publishing an EPUB from the command line.
# ABOUTME: Runs the same intake-extract-assemble pipeline as the web form as a local operator.

import secrets
from contextlib import closing
from pathlib import Path

import click
from rich.console import Console

from bookstall.cli.options import db_option, ebook_meta_option, uploads_dir_option, uploads_url_option
from bookstall.core.assembler import ProductAssembler
from bookstall.core.intake import (
    REQUIRED_CAPABILITY,
    UPLOAD_ACTION,
    FileUpload,
    Operator,
    UploadRejected,
    UploadSubmission,
)
from bookstall.core.nonces import NonceManager
from bookstall.core.publisher import publish_epub
from bookstall.db.catalog import StoreCatalog
from bookstall.db.connection import DEFAULT_DB_PATH, open_store
from bookstall.formats.ebook_meta import EbookMetaTool, MetadataExtractionError
from bookstall.storage import UploadDirectory

console = Console()

_LOCAL_OPERATOR = Operator(
    name="cli",
    session_id="cli",
    capabilities=frozenset({REQUIRED_CAPABILITY}),
)


@click.command("upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--price", default=None, help="Regular price (default: 9.99).")
@db_option
@uploads_dir_option
@uploads_url_option
@ebook_meta_option
def upload(
    path: Path,
    price: str | None,
    db_path: Path | None,
    uploads_dir: Path,
    uploads_url: str,
    ebook_meta: str,
) -> None:
    """Publish an EPUB file as a downloadable product."""
    nonces = NonceManager(secrets.token_hex(16))

    with open(path, "rb") as stream, closing(open_store(db_path or DEFAULT_DB_PATH)) as conn:
        submission = UploadSubmission(
            file=FileUpload(filename=path.name, stream=stream),
            price=price,
            nonce=nonces.create(UPLOAD_ACTION, _LOCAL_OPERATOR.session_id),
        )
        catalog = StoreCatalog(conn)
        assembler = ProductAssembler(catalog, UploadDirectory(uploads_dir, uploads_url))
        try:
            result = publish_epub(
                submission,
                _LOCAL_OPERATOR,
                nonces=nonces,
                extractor=EbookMetaTool(ebook_meta),
                assembler=assembler,
            )
        except (UploadRejected, MetadataExtractionError) as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise SystemExit(1) from exc

        record = catalog.get_product(result.product_id)

    name = record.product.name if record else path.name
    console.print(f"Created product [bold]{result.product_id}[/bold]: {name}")
    console.print(f"[dim]{result.redirect_url}[/dim]")
