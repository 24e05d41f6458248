# ABOUTME: Shared pytest fixtures for bookstall tests.
# ABOUTME: Provides sample EPUBs, a fake ebook-meta runner, and a temporary store.

import io
import stat
import struct
import zlib
from collections.abc import Callable
from pathlib import Path

import pytest
from ebooklib import epub
from PIL import Image

from bookstall.core.assembler import ProductAssembler
from bookstall.core.intake import REQUIRED_CAPABILITY, Operator
from bookstall.core.nonces import NonceManager
from bookstall.db.catalog import StoreCatalog
from bookstall.db.connection import open_store
from bookstall.storage import UploadDirectory
from tests.fixtures.ebook_meta_reports import FULL_REPORT


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """Create a minimal valid EPUB file with known metadata."""
    book = epub.EpubBook()

    book.set_identifier("test-isbn-978-0-123456-47-2")
    book.set_title("The Name of the Rose")
    book.set_language("en")
    book.add_author("Umberto Eco")

    book.add_metadata("DC", "publisher", "Harcourt")
    book.add_metadata("DC", "description", "A mystery set in a medieval monastery.")

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    filepath = tmp_path / "name_of_the_rose.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture
def cover_jpeg() -> bytes:
    """A 400x600 JPEG, big enough to get every derived size."""
    buffer = io.BytesIO()
    Image.new("RGB", (400, 600), color=(120, 30, 30)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def oversized_png() -> bytes:
    """PNG headers declaring 20000x20000 pixels, past Pillow's decompression limit."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body) & 0xFFFFFFFF)

    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", b"")
        + chunk(b"IEND", b"")
    )


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Dedicated scratch directory so leftover files are easy to detect."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def catalog(tmp_path: Path) -> StoreCatalog:
    """Provide a StoreCatalog backed by a temporary database."""
    conn = open_store(tmp_path / "store.db")
    yield StoreCatalog(conn)
    conn.close()


@pytest.fixture
def uploads(tmp_path: Path) -> UploadDirectory:
    """An upload directory under tmp_path served from /uploads."""
    return UploadDirectory(tmp_path / "uploads", "/uploads")


@pytest.fixture
def assembler(catalog: StoreCatalog, uploads: UploadDirectory) -> ProductAssembler:
    return ProductAssembler(catalog, uploads)


@pytest.fixture
def nonces() -> NonceManager:
    return NonceManager("test-secret")


@pytest.fixture
def operator() -> Operator:
    """An operator allowed to publish products."""
    return Operator(
        name="editor",
        session_id="session-1",
        capabilities=frozenset({REQUIRED_CAPABILITY}),
    )


@pytest.fixture
def fake_ebook_meta_script(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an executable that mimics ebook-meta on the command line."""

    def _make(report: str = FULL_REPORT, cover: bytes | None = None) -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        report_file = bin_dir / "report.txt"
        report_file.write_text(report)

        cover_line = ":"
        if cover is not None:
            cover_file = bin_dir / "cover.jpg"
            cover_file.write_bytes(cover)
            cover_line = f'cp "{cover_file}" "${{arg#--get-cover=}}"'

        script = bin_dir / "ebook-meta"
        script.write_text(
            "#!/bin/sh\n"
            'for arg in "$@"; do\n'
            '  case "$arg" in\n'
            f"    --get-cover=*) {cover_line}; exit 0;;\n"
            "  esac\n"
            "done\n"
            f'cat "{report_file}"\n'
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
