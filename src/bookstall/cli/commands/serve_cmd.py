# ABOUTME: The `bookstall serve` command that runs the admin web app under uvicorn.
# ABOUTME: Collects settings from options and environment variables.

from pathlib import Path

import click
import uvicorn

from bookstall.cli.options import db_option, ebook_meta_option, uploads_dir_option, uploads_url_option
from bookstall.config import DEFAULT_ADMIN_USER, StoreSettings
from bookstall.db.connection import DEFAULT_DB_PATH
from bookstall.web import create_app


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@db_option
@uploads_dir_option
@uploads_url_option
@ebook_meta_option
@click.option(
    "--ebook-meta-timeout",
    type=float,
    default=None,
    envvar="BOOKSTALL_EBOOK_META_TIMEOUT",
    help="Seconds before an ebook-meta call is abandoned (default: no limit).",
)
@click.option("--secret", envvar="BOOKSTALL_SECRET", default=None, help="Key for form tokens.")
@click.option("--admin-user", envvar="BOOKSTALL_ADMIN_USER", default=DEFAULT_ADMIN_USER, show_default=True)
@click.option("--admin-password", envvar="BOOKSTALL_ADMIN_PASSWORD", required=True)
def serve(
    host: str,
    port: int,
    db_path: Path | None,
    uploads_dir: Path,
    uploads_url: str,
    ebook_meta: str,
    ebook_meta_timeout: float | None,
    secret: str | None,
    admin_user: str,
    admin_password: str,
) -> None:
    """Serve the EPUB upload handler over HTTP."""
    settings = StoreSettings(
        db_path=db_path or DEFAULT_DB_PATH,
        uploads_dir=uploads_dir,
        uploads_url=uploads_url,
        ebook_meta=ebook_meta,
        ebook_meta_timeout=ebook_meta_timeout,
        admin_user=admin_user,
        admin_password=admin_password,
    )
    if secret:
        settings.secret = secret

    uvicorn.run(create_app(settings), host=host, port=port)
