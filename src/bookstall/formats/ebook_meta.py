# ABOUTME: Metadata and cover extraction by shelling out to Calibre's ebook-meta tool.
# ABOUTME: Parses the fixed-label text report; the subprocess runner is injectable for tests.

import logging
import re
import subprocess
from collections.abc import Callable, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

from bookstall.core.scratch import ScratchSpace
from bookstall.metadata.types import CoverImage, EpubMetadata

logger = logging.getLogger(__name__)

DEFAULT_EBOOK_META = "ebook-meta"

# Report labels are padded to a fixed column; these strings must match
# ebook-meta's output byte for byte.
TITLE_LABEL = "Title               :"
AUTHORS_LABEL = "Author(s)           :"
TAGS_LABEL = "Tags                :"
PUBLISHED_LABEL = "Published           :"
COMMENTS_LABEL = "Comments            :"
DESCRIPTION_LABEL = "Description:"

_BRACKETED_RE = re.compile(r"\[.*?\]")

Runner = Callable[..., subprocess.CompletedProcess]


class MetadataExtractionError(Exception):
    """Raised when ebook-meta yields no report for a file."""


def _split_list(value: str) -> list[str]:
    """Split a comma-separated report value, dropping empty entries."""
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_published(value: str) -> date | None:
    """Parse the YYYY-MM-DD prefix of a published timestamp, or None."""
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_report(text: str) -> EpubMetadata:
    """Parse an ebook-meta text report into EpubMetadata.

    Each recognised line starts with an exact label; the rest of the line is
    the value. Unrecognised lines are ignored and absent fields keep their
    defaults, so this never raises on odd input.
    """
    meta = EpubMetadata()

    for line in text.splitlines():
        if line.startswith(TITLE_LABEL):
            title = line[len(TITLE_LABEL):].strip()
            if title:
                meta.title = title
        elif line.startswith(DESCRIPTION_LABEL):
            meta.description = line[len(DESCRIPTION_LABEL):].strip()
        elif line.startswith(COMMENTS_LABEL):
            meta.description = line[len(COMMENTS_LABEL):].strip()
        elif line.startswith(TAGS_LABEL):
            meta.subjects = _split_list(line[len(TAGS_LABEL):])
        elif line.startswith(AUTHORS_LABEL):
            authors = _BRACKETED_RE.sub("", line[len(AUTHORS_LABEL):])
            meta.authors = _split_list(authors)
        elif line.startswith(PUBLISHED_LABEL):
            published = line[len(PUBLISHED_LABEL):].strip()
            if published:
                parsed = _parse_published(published)
                if parsed is not None:
                    meta.published_date = parsed

    return meta


class EbookMetaTool:
    """Wrapper around the ebook-meta executable.

    The runner has subprocess.run's signature; tests pass a fake that replays
    captured reports instead of needing a Calibre install.
    """

    def __init__(
        self,
        executable: str = DEFAULT_EBOOK_META,
        *,
        timeout: float | None = None,
        runner: Runner | None = None,
    ) -> None:
        self._executable = executable
        self._timeout = timeout
        self._runner = runner or subprocess.run

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        cmd = [self._executable, *args]
        logger.debug("Running %s", cmd)
        kwargs: dict[str, Any] = {
            "stdout": subprocess.PIPE,
            "stderr": subprocess.DEVNULL,
            "text": True,
            "encoding": "utf-8",
            "errors": "replace",
            "check": False,
        }
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return self._runner(cmd, **kwargs)

    def read_report(self, path: Path) -> str:
        """Run ebook-meta on a file and return its raw text report.

        Raises:
            MetadataExtractionError: If the tool cannot run or prints nothing.
        """
        try:
            result = self._run([str(path)])
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise MetadataExtractionError(
                f"Failed to run {self._executable} on {path.name}: {exc}"
            ) from exc

        output = result.stdout or ""
        if not output.strip():
            raise MetadataExtractionError(
                "Failed to extract metadata using ebook-meta command."
            )
        return output

    def extract_metadata(self, path: Path) -> EpubMetadata:
        """Extract metadata from an EPUB via the ebook-meta report."""
        return parse_report(self.read_report(path))

    def extract_cover(self, path: Path, scratch: ScratchSpace) -> CoverImage | None:
        """Dump the embedded cover into a scratch file.

        The tool's exit status is not consulted: a non-empty file at the
        target path is the only sign of success. Empty artifacts are removed.
        """
        cover_path = scratch.new_path("epub_cover_", ".jpg")
        try:
            self._run([str(path), f"--get-cover={cover_path}"])
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("Cover extraction for %s did not run: %s", path.name, exc)

        if cover_path.is_file():
            size = cover_path.stat().st_size
            if size > 0:
                return CoverImage(path=cover_path, size=size)
            cover_path.unlink()
        return None
