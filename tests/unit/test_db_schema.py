# ABOUTME: Unit tests for database schema creation and connection management.
# ABOUTME: Validates table structure, WAL mode, foreign keys, and default paths.

import sqlite3
from pathlib import Path

import pytest

from bookstall.db.connection import DEFAULT_DB_PATH, open_store


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "test_store.db"


class TestOpenStore:
    """Tests for open_store() connection factory."""

    def test_creates_database_file(self, db_path: Path) -> None:
        """Calling open_store creates a .db file at the given path."""
        conn = open_store(db_path)
        conn.close()
        assert db_path.exists()

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        """Creates parent directories if they don't exist."""
        nested = tmp_path / "deep" / "nested" / "store.db"
        conn = open_store(nested)
        conn.close()
        assert nested.exists()

    def test_creates_products_table(self, db_path: Path) -> None:
        """The products table exists with expected columns."""
        conn = open_store(db_path)
        cursor = conn.execute("PRAGMA table_info(products)")
        columns = {row[1] for row in cursor.fetchall()}
        conn.close()

        expected = {
            "id",
            "name",
            "regular_price",
            "virtual",
            "downloadable",
            "description",
            "authors",
            "published_date",
            "thumbnail_id",
            "date_created",
            "date_modified",
        }
        assert expected == columns

    def test_creates_supporting_tables(self, db_path: Path) -> None:
        """Downloads, tags, tag links, and attachments tables exist."""
        conn = open_store(db_path)
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in cursor.fetchall()}
        conn.close()

        assert {"product_downloads", "tags", "product_tags", "attachments"} <= tables

    def test_schema_version_is_one(self, db_path: Path) -> None:
        """A fresh database records schema version 1."""
        conn = open_store(db_path)
        row = conn.execute("SELECT version FROM schema_version").fetchone()
        conn.close()
        assert row[0] == 1

    def test_wal_mode_enabled(self, db_path: Path) -> None:
        """Connections use WAL journal mode."""
        conn = open_store(db_path)
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        conn.close()
        assert mode == "wal"

    def test_foreign_keys_enabled(self, db_path: Path) -> None:
        """Foreign key enforcement is switched on."""
        conn = open_store(db_path)
        enabled = conn.execute("PRAGMA foreign_keys").fetchone()[0]
        conn.close()
        assert enabled == 1

    def test_row_factory_is_row(self, db_path: Path) -> None:
        """Rows support dict-like access by column name."""
        conn = open_store(db_path)
        assert conn.row_factory is sqlite3.Row
        conn.close()

    def test_reopen_is_idempotent(self, db_path: Path) -> None:
        """Opening an existing database does not re-apply the schema."""
        open_store(db_path).close()
        conn = open_store(db_path)
        count = conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
        conn.close()
        assert count == 1

    def test_default_path(self) -> None:
        """The default database lives under ~/.bookstall."""
        assert DEFAULT_DB_PATH == Path.home() / ".bookstall" / "store.db"
