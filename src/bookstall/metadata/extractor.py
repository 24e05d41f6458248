# ABOUTME: MetadataExtractor protocol defining the contract for EPUB metadata sources.
# ABOUTME: The ebook-meta wrapper implements it; tests substitute canned extractors.

from pathlib import Path
from typing import Protocol, runtime_checkable

from bookstall.core.scratch import ScratchSpace
from bookstall.metadata.types import CoverImage, EpubMetadata


@runtime_checkable
class MetadataExtractor(Protocol):
    """Protocol for tools that read metadata and covers out of an EPUB.

    Implementations must raise MetadataExtractionError when no metadata at
    all can be read, and return None from extract_cover when there is no
    usable cover.
    """

    def extract_metadata(self, path: Path) -> EpubMetadata: ...

    def extract_cover(self, path: Path, scratch: ScratchSpace) -> CoverImage | None: ...
