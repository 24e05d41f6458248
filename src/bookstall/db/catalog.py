# ABOUTME: Store catalog operations: products, downloads, tag terms, and media attachments.
# ABOUTME: StoreCatalog implements the CatalogApi protocol on top of the SQLite schema.

import json
import logging
import sqlite3
from typing import Any, Protocol, runtime_checkable

from bookstall.db.mapping import (
    Attachment,
    Product,
    ProductDownload,
    ProductRecord,
    attachment_to_row,
    product_to_row,
    row_to_attachment,
    row_to_record,
)
from bookstall.metadata.sanitize import sanitize_text, slugify

logger = logging.getLogger(__name__)

_MAX_TERM_LENGTH = 200


class TermError(Exception):
    """Raised when a tag term cannot be created from a given name."""


@runtime_checkable
class CatalogApi(Protocol):
    """The catalog operations the publishing pipeline depends on."""

    def save_product(self, product: Product) -> int: ...

    def create_term(self, name: str) -> int: ...

    def insert_attachment(self, attachment: Attachment) -> int: ...

    def update_attachment_metadata(self, attachment_id: int, metadata: dict[str, Any]) -> None: ...

    def set_post_thumbnail(self, product_id: int, attachment_id: int) -> None: ...


class StoreCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for the store tables."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- Products ---

    def save_product(self, product: Product) -> int:
        """Insert a product with its downloads and tag links.

        Args:
            product: The product to persist. Tag ids must already exist.

        Returns:
            The row ID of the new product.

        Raises:
            sqlite3.IntegrityError: If a tag id does not exist. Nothing is
                written in that case.
        """
        row = product_to_row(product)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        try:
            cursor = self._conn.execute(
                f"INSERT INTO products ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )
            product_id = cursor.lastrowid
            self._conn.executemany(
                "INSERT INTO product_downloads (product_id, name, file_url) VALUES (?, ?, ?)",
                [(product_id, d.name, d.file_url) for d in product.downloads],
            )
            self._conn.executemany(
                "INSERT OR IGNORE INTO product_tags (product_id, tag_id) VALUES (?, ?)",
                [(product_id, tag_id) for tag_id in product.tag_ids],
            )
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            raise

        logger.debug("Saved product %d (%s)", product_id, product.name)
        return product_id  # type: ignore[return-value]

    def _get_downloads(self, product_id: int) -> list[ProductDownload]:
        cursor = self._conn.execute(
            "SELECT name, file_url FROM product_downloads WHERE product_id = ? ORDER BY id",
            (product_id,),
        )
        return [ProductDownload(name=row["name"], file_url=row["file_url"]) for row in cursor]

    def _get_tag_ids(self, product_id: int) -> list[int]:
        cursor = self._conn.execute(
            "SELECT tag_id FROM product_tags WHERE product_id = ? ORDER BY tag_id",
            (product_id,),
        )
        return [row[0] for row in cursor]

    def get_product(self, product_id: int) -> ProductRecord | None:
        """Retrieve a product with its downloads and tag ids."""
        cursor = self._conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
        row = cursor.fetchone()
        if row is None:
            return None
        return row_to_record(row, self._get_downloads(product_id), self._get_tag_ids(product_id))

    def list_products(self) -> list[ProductRecord]:
        """Return all products, newest first."""
        cursor = self._conn.execute("SELECT * FROM products ORDER BY id DESC")
        return [
            row_to_record(row, self._get_downloads(row["id"]), self._get_tag_ids(row["id"]))
            for row in cursor.fetchall()
        ]

    def set_post_thumbnail(self, product_id: int, attachment_id: int) -> None:
        """Make an attachment the featured image of a product.

        Raises:
            ValueError: If the product or the attachment does not exist.
        """
        if self.get_attachment(attachment_id) is None:
            raise ValueError(f"Attachment with id {attachment_id} not found")

        cursor = self._conn.execute(
            "UPDATE products SET thumbnail_id = ?, "
            "date_modified = strftime('%Y-%m-%dT%H:%M:%S', 'now') WHERE id = ?",
            (attachment_id, product_id),
        )
        self._conn.commit()

        if cursor.rowcount == 0:
            raise ValueError(f"Product with id {product_id} not found")

    # --- Tag terms ---

    def create_term(self, name: str) -> int:
        """Resolve a tag term by name, creating it if needed. Idempotent.

        Terms are keyed by slug, so names differing only in case or
        punctuation resolve to the same term.

        Returns:
            The tag's row ID.

        Raises:
            TermError: If the name is empty, too long, or yields no slug.
        """
        clean = sanitize_text(name)
        if not clean:
            raise TermError("A name is required for this term.")
        if len(clean) > _MAX_TERM_LENGTH:
            raise TermError(f"Term name longer than {_MAX_TERM_LENGTH} characters: {clean[:40]}...")
        slug = slugify(clean)
        if not slug:
            raise TermError(f"Cannot derive a slug for term '{clean}'")

        self._conn.execute("INSERT OR IGNORE INTO tags (name, slug) VALUES (?, ?)", (clean, slug))
        self._conn.commit()
        cursor = self._conn.execute("SELECT id FROM tags WHERE slug = ?", (slug,))
        return cursor.fetchone()[0]

    def get_tags_for_product(self, product_id: int) -> list[str]:
        """Get all tag names for a product, alphabetically sorted."""
        cursor = self._conn.execute(
            "SELECT t.name FROM tags t "
            "JOIN product_tags pt ON t.id = pt.tag_id "
            "WHERE pt.product_id = ? "
            "ORDER BY t.name",
            (product_id,),
        )
        return [row[0] for row in cursor.fetchall()]

    def list_tags(self) -> list[tuple[str, int]]:
        """List all tags with their product counts, alphabetically sorted."""
        cursor = self._conn.execute(
            "SELECT t.name, COUNT(pt.product_id) as product_count "
            "FROM tags t "
            "LEFT JOIN product_tags pt ON t.id = pt.tag_id "
            "GROUP BY t.id "
            "ORDER BY t.name"
        )
        return [(row[0], row[1]) for row in cursor.fetchall()]

    # --- Media attachments ---

    def insert_attachment(self, attachment: Attachment) -> int:
        """Add a media library entry and return its row ID."""
        row = attachment_to_row(attachment)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        cursor = self._conn.execute(
            f"INSERT INTO attachments ({columns}) VALUES ({placeholders})",
            list(row.values()),
        )
        self._conn.commit()
        logger.debug("Inserted attachment %d for %s", cursor.lastrowid, attachment.file_path)
        return cursor.lastrowid  # type: ignore[return-value]

    def get_attachment(self, attachment_id: int) -> Attachment | None:
        """Retrieve a media library entry by its row ID."""
        cursor = self._conn.execute("SELECT * FROM attachments WHERE id = ?", (attachment_id,))
        row = cursor.fetchone()
        return row_to_attachment(row) if row else None

    def update_attachment_metadata(self, attachment_id: int, metadata: dict[str, Any]) -> None:
        """Replace the metadata blob of an attachment.

        Raises:
            ValueError: If the attachment does not exist.
        """
        cursor = self._conn.execute(
            "UPDATE attachments SET metadata = ? WHERE id = ?",
            (json.dumps(metadata), attachment_id),
        )
        self._conn.commit()

        if cursor.rowcount == 0:
            raise ValueError(f"Attachment with id {attachment_id} not found")
