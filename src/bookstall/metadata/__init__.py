# ABOUTME: Metadata package for EPUB metadata extraction and representation.
# ABOUTME: Exports the EpubMetadata and CoverImage types used throughout bookstall.

from bookstall.metadata.types import UNTITLED, CoverImage, EpubMetadata

__all__ = [
    "UNTITLED",
    "CoverImage",
    "EpubMetadata",
]
