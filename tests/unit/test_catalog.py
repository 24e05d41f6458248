# ABOUTME: Unit tests for StoreCatalog products, tag terms, and media attachments.
# ABOUTME: Exercises the SQLite-backed catalog against a temporary database.

import sqlite3
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from bookstall.db.catalog import CatalogApi, StoreCatalog, TermError
from bookstall.db.mapping import Attachment, Product, ProductDownload


def _product(**kwargs: object) -> Product:
    fields: dict[str, object] = {
        "name": "The Name of the Rose",
        "regular_price": Decimal("4.50"),
        "virtual": True,
        "downloadable": True,
    }
    fields.update(kwargs)
    return Product(**fields)  # type: ignore[arg-type]


def _attachment(tmp_path: Path, **kwargs: object) -> Attachment:
    fields: dict[str, object] = {
        "title": "cover",
        "file_path": tmp_path / "cover.jpg",
        "url": "/uploads/cover.jpg",
        "mime_type": "image/jpeg",
    }
    fields.update(kwargs)
    return Attachment(**fields)  # type: ignore[arg-type]


class TestSaveProduct:
    """Tests for StoreCatalog.save_product() and get_product()."""

    def test_satisfies_protocol(self, catalog: StoreCatalog) -> None:
        assert isinstance(catalog, CatalogApi)

    def test_save_and_get(self, catalog: StoreCatalog) -> None:
        product = _product(
            description="A mystery.",
            authors=["Umberto Eco"],
            published_date=date(1983, 6, 1),
            downloads=[ProductDownload(name="The Name of the Rose", file_url="/uploads/a.epub")],
        )
        product_id = catalog.save_product(product)

        record = catalog.get_product(product_id)

        assert record is not None
        assert record.id == product_id
        assert record.thumbnail_id is None
        assert record.product.name == "The Name of the Rose"
        assert record.product.regular_price == Decimal("4.50")
        assert record.product.virtual is True
        assert record.product.downloadable is True
        assert record.product.authors == ["Umberto Eco"]
        assert record.product.published_date == date(1983, 6, 1)
        assert record.product.downloads == product.downloads
        assert record.date_created

    def test_get_missing_returns_none(self, catalog: StoreCatalog) -> None:
        assert catalog.get_product(999) is None

    def test_tags_linked(self, catalog: StoreCatalog) -> None:
        tag_ids = [catalog.create_term("x"), catalog.create_term("y")]
        product_id = catalog.save_product(_product(tag_ids=tag_ids))

        assert catalog.get_tags_for_product(product_id) == ["x", "y"]
        assert catalog.get_product(product_id).product.tag_ids == sorted(tag_ids)

    def test_unknown_tag_rolls_back(self, catalog: StoreCatalog) -> None:
        """A dangling tag id fails the whole save, leaving no product behind."""
        with pytest.raises(sqlite3.IntegrityError):
            catalog.save_product(_product(tag_ids=[404]))
        assert catalog.list_products() == []

    def test_list_newest_first(self, catalog: StoreCatalog) -> None:
        first = catalog.save_product(_product(name="First"))
        second = catalog.save_product(_product(name="Second"))
        assert [r.id for r in catalog.list_products()] == [second, first]


class TestCreateTerm:
    """Tests for StoreCatalog.create_term()."""

    def test_creates_term(self, catalog: StoreCatalog) -> None:
        term_id = catalog.create_term("Historical Fiction")
        assert catalog.list_tags() == [("Historical Fiction", 0)]
        assert isinstance(term_id, int)

    def test_idempotent(self, catalog: StoreCatalog) -> None:
        assert catalog.create_term("Fiction") == catalog.create_term("Fiction")

    def test_same_slug_resolves_to_same_term(self, catalog: StoreCatalog) -> None:
        """Case and punctuation variants share one term; the first spelling wins."""
        first = catalog.create_term("Fiction")
        assert catalog.create_term("fiction") == first
        assert catalog.create_term("FICTION!") == first
        assert catalog.list_tags() == [("Fiction", 0)]

    def test_markup_stripped(self, catalog: StoreCatalog) -> None:
        catalog.create_term("<em>Mystery</em>")
        assert catalog.list_tags() == [("Mystery", 0)]

    @pytest.mark.parametrize("name", ["", "   ", "<br/>"])
    def test_empty_name_rejected(self, catalog: StoreCatalog, name: str) -> None:
        with pytest.raises(TermError, match="A name is required"):
            catalog.create_term(name)

    def test_slugless_name_rejected(self, catalog: StoreCatalog) -> None:
        with pytest.raises(TermError):
            catalog.create_term("???")

    def test_overlong_name_rejected(self, catalog: StoreCatalog) -> None:
        with pytest.raises(TermError):
            catalog.create_term("x" * 201)


class TestListTags:
    def test_counts_products(self, catalog: StoreCatalog) -> None:
        fiction = catalog.create_term("Fiction")
        mystery = catalog.create_term("Mystery")
        catalog.create_term("Poetry")
        catalog.save_product(_product(tag_ids=[fiction, mystery]))
        catalog.save_product(_product(tag_ids=[fiction]))

        assert catalog.list_tags() == [("Fiction", 2), ("Mystery", 1), ("Poetry", 0)]


class TestAttachments:
    """Tests for attachment storage and featured images."""

    def test_insert_and_get(self, catalog: StoreCatalog, tmp_path: Path) -> None:
        product_id = catalog.save_product(_product())
        attachment_id = catalog.insert_attachment(_attachment(tmp_path, parent_id=product_id))

        stored = catalog.get_attachment(attachment_id)

        assert stored is not None
        assert stored.id == attachment_id
        assert stored.parent_id == product_id
        assert stored.file_path == tmp_path / "cover.jpg"
        assert stored.metadata == {}

    def test_get_missing(self, catalog: StoreCatalog) -> None:
        assert catalog.get_attachment(1) is None

    def test_update_metadata(self, catalog: StoreCatalog, tmp_path: Path) -> None:
        attachment_id = catalog.insert_attachment(_attachment(tmp_path))
        catalog.update_attachment_metadata(attachment_id, {"width": 400, "sizes": {}})
        assert catalog.get_attachment(attachment_id).metadata == {"width": 400, "sizes": {}}

    def test_update_metadata_missing_raises(self, catalog: StoreCatalog) -> None:
        with pytest.raises(ValueError, match="not found"):
            catalog.update_attachment_metadata(5, {})

    def test_set_post_thumbnail(self, catalog: StoreCatalog, tmp_path: Path) -> None:
        product_id = catalog.save_product(_product())
        attachment_id = catalog.insert_attachment(_attachment(tmp_path, parent_id=product_id))

        catalog.set_post_thumbnail(product_id, attachment_id)

        assert catalog.get_product(product_id).thumbnail_id == attachment_id

    def test_thumbnail_missing_attachment(self, catalog: StoreCatalog) -> None:
        product_id = catalog.save_product(_product())
        with pytest.raises(ValueError, match="Attachment"):
            catalog.set_post_thumbnail(product_id, 42)

    def test_thumbnail_missing_product(self, catalog: StoreCatalog, tmp_path: Path) -> None:
        attachment_id = catalog.insert_attachment(_attachment(tmp_path))
        with pytest.raises(ValueError, match="Product"):
            catalog.set_post_thumbnail(42, attachment_id)
