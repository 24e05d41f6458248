# ABOUTME: The upload-to-product pipeline: intake, extraction, assembly, cleanup.
# ABOUTME: All scratch files are removed on every exit path, success or failure.

import logging
from dataclasses import dataclass
from pathlib import Path

from bookstall.core.assembler import ProductAssembler
from bookstall.core.intake import (
    Operator,
    UploadSubmission,
    accept_upload,
    parse_price,
)
from bookstall.core.nonces import NonceManager
from bookstall.core.scratch import ScratchSpace
from bookstall.metadata.extractor import MetadataExtractor

logger = logging.getLogger(__name__)


def edit_url(product_id: int) -> str:
    """Admin URL of a freshly created product, flagged as a successful upload."""
    return f"post.php?post={product_id}&action=edit&epub_success=1"


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a successful upload."""

    product_id: int
    redirect_url: str


def publish_epub(
    submission: UploadSubmission,
    operator: Operator,
    *,
    nonces: NonceManager,
    extractor: MetadataExtractor,
    assembler: ProductAssembler,
    scratch_dir: Path | None = None,
    max_bytes: int | None = None,
) -> PublishResult:
    """Turn an uploaded EPUB into a downloadable product.

    Runs intake, metadata extraction, cover extraction and product assembly
    in order. Rejections and extraction failures propagate to the caller;
    missing metadata, a missing cover and failed tags or cover ingestion
    only degrade the result.

    Raises:
        UploadRejected: The submission was refused at intake.
        MetadataExtractionError: ebook-meta produced no report.
    """
    with ScratchSpace(scratch_dir) as scratch:
        uploaded = accept_upload(
            submission, operator, nonces=nonces, scratch=scratch, max_bytes=max_bytes,
        )
        price = parse_price(submission.price)

        metadata = extractor.extract_metadata(uploaded.path)
        cover = extractor.extract_cover(uploaded.path, scratch)
        if cover is None:
            logger.debug("No cover found in %s", uploaded.original_filename)

        product_id = assembler.assemble(metadata, cover, price, uploaded.path)

    return PublishResult(product_id=product_id, redirect_url=edit_url(product_id))
