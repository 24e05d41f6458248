# ABOUTME: Core data structures for metadata scraped from an uploaded EPUB.
# ABOUTME: EpubMetadata is the interchange format between extraction and product assembly.

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

UNTITLED = "Untitled EPUB"


@dataclass
class EpubMetadata:
    """Structured metadata for an uploaded EPUB.

    Every field has a default so a sparse or garbled ebook-meta report still
    produces something the product assembler can work with.
    """

    title: str = UNTITLED
    description: str = ""
    subjects: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    published_date: date | None = None

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""


@dataclass(frozen=True)
class CoverImage:
    """A cover image dumped to a scratch file. Never empty."""

    path: Path
    size: int

    def __post_init__(self) -> None:
        if self.size <= 0:
            msg = f"cover image must not be empty: {self.path}"
            raise ValueError(msg)
