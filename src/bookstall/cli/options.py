# ABOUTME: Shared Click options for bookstall CLI commands.
# ABOUTME: Provides reusable decorators for store paths and the ebook-meta executable.

from pathlib import Path

import click

from bookstall.db.connection import DEFAULT_DB_PATH
from bookstall.formats.ebook_meta import DEFAULT_EBOOK_META
from bookstall.storage import DEFAULT_UPLOADS_DIR, DEFAULT_UPLOADS_URL

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    envvar="BOOKSTALL_DB",
    help=f"Path to store database (default: {DEFAULT_DB_PATH})",
)

uploads_dir_option = click.option(
    "--uploads-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_UPLOADS_DIR,
    show_default=True,
    envvar="BOOKSTALL_UPLOADS_DIR",
    help="Public upload directory for product files and media.",
)

uploads_url_option = click.option(
    "--uploads-url",
    default=DEFAULT_UPLOADS_URL,
    show_default=True,
    envvar="BOOKSTALL_UPLOADS_URL",
    help="Base URL the upload directory is served from.",
)

ebook_meta_option = click.option(
    "--ebook-meta",
    "ebook_meta",
    default=DEFAULT_EBOOK_META,
    show_default=True,
    envvar="BOOKSTALL_EBOOK_META",
    help="Calibre ebook-meta executable.",
)
