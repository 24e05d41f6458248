# ABOUTME: Product and media dataclasses plus conversion to and from SQLite rows.
# ABOUTME: Handles JSON serialization for list/dict fields (authors, attachment metadata).

import json
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any


@dataclass
class ProductDownload:
    """A file granted to buyers of a downloadable product."""

    name: str
    file_url: str


@dataclass
class Product:
    """A sellable catalog item, before or after it is saved."""

    name: str
    regular_price: Decimal
    virtual: bool = False
    downloadable: bool = False
    description: str = ""
    authors: list[str] = field(default_factory=list)
    published_date: date | None = None
    downloads: list[ProductDownload] = field(default_factory=list)
    tag_ids: list[int] = field(default_factory=list)


@dataclass
class ProductRecord:
    """A saved product: Product plus database-specific fields."""

    id: int
    product: Product
    thumbnail_id: int | None
    date_created: str
    date_modified: str


@dataclass
class Attachment:
    """A media library entry, optionally parented to a product."""

    title: str
    file_path: Path
    url: str
    mime_type: str | None = None
    parent_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: int | None = None


def product_to_row(product: Product) -> dict[str, Any]:
    """Convert a Product to a dict suitable for INSERT into products.

    Downloads and tags live in their own tables and are not included.
    """
    return {
        "name": product.name,
        "regular_price": str(product.regular_price),
        "virtual": int(product.virtual),
        "downloadable": int(product.downloadable),
        "description": product.description,
        "authors": json.dumps(product.authors),
        "published_date": product.published_date.isoformat() if product.published_date else None,
    }


def row_to_product(
    row: Any,
    downloads: list[ProductDownload] | None = None,
    tag_ids: list[int] | None = None,
) -> Product:
    """Convert a products row (dict-like) back to a Product."""
    published = row["published_date"]
    return Product(
        name=row["name"],
        regular_price=Decimal(row["regular_price"]),
        virtual=bool(row["virtual"]),
        downloadable=bool(row["downloadable"]),
        description=row["description"],
        authors=json.loads(row["authors"]) if row["authors"] else [],
        published_date=date.fromisoformat(published) if published else None,
        downloads=downloads or [],
        tag_ids=tag_ids or [],
    )


def row_to_record(
    row: Any,
    downloads: list[ProductDownload] | None = None,
    tag_ids: list[int] | None = None,
) -> ProductRecord:
    """Convert a full products row to a ProductRecord."""
    return ProductRecord(
        id=row["id"],
        product=row_to_product(row, downloads, tag_ids),
        thumbnail_id=row["thumbnail_id"],
        date_created=row["date_created"],
        date_modified=row["date_modified"],
    )


def attachment_to_row(attachment: Attachment) -> dict[str, Any]:
    """Convert an Attachment to a dict suitable for INSERT into attachments."""
    return {
        "parent_id": attachment.parent_id,
        "title": attachment.title,
        "file_path": str(attachment.file_path),
        "url": attachment.url,
        "mime_type": attachment.mime_type,
        "metadata": json.dumps(attachment.metadata),
    }


def row_to_attachment(row: Any) -> Attachment:
    """Convert an attachments row back to an Attachment."""
    return Attachment(
        id=row["id"],
        parent_id=row["parent_id"],
        title=row["title"],
        file_path=Path(row["file_path"]),
        url=row["url"],
        mime_type=row["mime_type"],
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
    )
