# ABOUTME: Runtime settings for the bookstall web adapter and CLI.
# ABOUTME: Defaults live in the modules that use them; StoreSettings bundles the overrides.

import secrets
from dataclasses import dataclass, field
from pathlib import Path

from bookstall.db.connection import DEFAULT_DB_PATH
from bookstall.formats.ebook_meta import DEFAULT_EBOOK_META
from bookstall.storage import DEFAULT_UPLOADS_DIR, DEFAULT_UPLOADS_URL

DEFAULT_ADMIN_USER = "admin"
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


@dataclass
class StoreSettings:
    """Everything needed to wire the publishing pipeline to its collaborators.

    The secret signs anti-forgery tokens; when not configured a random one
    is generated, so tokens do not survive a restart.
    """

    db_path: Path = DEFAULT_DB_PATH
    uploads_dir: Path = DEFAULT_UPLOADS_DIR
    uploads_url: str = DEFAULT_UPLOADS_URL
    ebook_meta: str = DEFAULT_EBOOK_META
    ebook_meta_timeout: float | None = None
    scratch_dir: Path | None = None
    secret: str = field(default_factory=lambda: secrets.token_hex(32))
    admin_user: str = DEFAULT_ADMIN_USER
    admin_password: str | None = None
    max_upload_bytes: int | None = DEFAULT_MAX_UPLOAD_BYTES
