# ABOUTME: SQLite database connection management for the bookstall store catalog.
# ABOUTME: Opens or creates the database, applies schema, and provides connection context.

import sqlite3
from pathlib import Path

from bookstall.db.schema import MIGRATIONS, SCHEMA_V1

DEFAULT_DB_PATH = Path.home() / ".bookstall" / "store.db"


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Execute the DDL to create all tables and indexes."""
    conn.executescript(SCHEMA_V1)


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Apply pending schema migrations sequentially.

    No-op if the database is already at the latest version.
    """
    current = _get_schema_version(conn)
    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)


def open_store(path: Path | None = None, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open or create the store catalog database.

    Creates the database file and parent directories if they don't exist.
    Applies the schema on first creation. Sets WAL journal mode and
    sqlite3.Row factory for dict-like column access.

    Args:
        path: Path to the database file. Defaults to ~/.bookstall/store.db.
        check_same_thread: Passed to sqlite3.connect; the web adapter opens
            connections in one worker thread and may close them in another.

    Returns:
        A configured sqlite3.Connection.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), check_same_thread=check_same_thread)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    if not _schema_exists(conn):
        _apply_schema(conn)

    _apply_migrations(conn)

    return conn
