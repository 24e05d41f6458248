# ABOUTME: Builds a downloadable product from extracted EPUB metadata.
# ABOUTME: Stores the EPUB permanently, resolves tag terms, saves, and attaches the cover.

import logging
import sqlite3
from decimal import Decimal
from pathlib import Path

from bookstall.db.catalog import CatalogApi, TermError
from bookstall.db.mapping import Product, ProductDownload
from bookstall.media import MediaError, MediaLibrary
from bookstall.metadata.sanitize import sanitize_text
from bookstall.metadata.types import UNTITLED, CoverImage, EpubMetadata
from bookstall.storage import UploadDirectory

logger = logging.getLogger(__name__)


class ProductAssembler:
    """Turns EpubMetadata plus an EPUB file into a saved catalog product."""

    def __init__(
        self,
        catalog: CatalogApi,
        uploads: UploadDirectory,
        media: MediaLibrary | None = None,
    ) -> None:
        self._catalog = catalog
        self._uploads = uploads
        self._media = media or MediaLibrary(catalog, uploads)

    def _resolve_tags(self, subjects: list[str]) -> list[int]:
        """Create or look up a term per subject, skipping ones that fail."""
        tag_ids: list[int] = []
        for subject in subjects:
            try:
                term_id = self._catalog.create_term(subject)
            except TermError as exc:
                logger.warning("Skipping tag %r: %s", subject, exc)
                continue
            if term_id not in tag_ids:
                tag_ids.append(term_id)
        return tag_ids

    def _attach_cover(self, product_id: int, cover: CoverImage) -> None:
        """Set the cover as featured image. Failures are logged, never raised."""
        try:
            attachment_id = self._media.ingest(cover.path, parent_id=product_id)
            self._catalog.set_post_thumbnail(product_id, attachment_id)
        except (MediaError, OSError, ValueError, sqlite3.Error) as exc:
            logger.warning("Could not attach cover to product %d: %s", product_id, exc)

    def assemble(
        self,
        metadata: EpubMetadata,
        cover: CoverImage | None,
        price: Decimal,
        epub_path: Path,
    ) -> int:
        """Create and save the product for one uploaded EPUB.

        Args:
            metadata: Extracted metadata; title becomes the product name.
            cover: Scratch cover image, or None.
            price: Regular price.
            epub_path: Scratch copy of the EPUB. It is copied, not moved.

        Returns:
            The new product's ID.
        """
        title = sanitize_text(metadata.title) or UNTITLED

        product = Product(
            name=title,
            regular_price=price,
            virtual=True,
            downloadable=True,
            description=metadata.description,
            authors=list(metadata.authors),
            published_date=metadata.published_date,
        )

        if metadata.subjects:
            product.tag_ids = self._resolve_tags(metadata.subjects)

        location = self._uploads.store_copy(epub_path, epub_path.suffix)
        product.downloads = [ProductDownload(name=title, file_url=location.url)]

        try:
            product_id = self._catalog.save_product(product)
        except Exception:
            location.path.unlink(missing_ok=True)
            raise
        logger.info("Created product %d '%s' (%s)", product_id, title, location.url)

        if cover is not None:
            self._attach_cover(product_id, cover)

        return product_id
