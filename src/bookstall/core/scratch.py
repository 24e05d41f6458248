# ABOUTME: Per-request scratch file tracking with guaranteed cleanup.
# ABOUTME: Every temporary artifact of an upload is registered here and removed on exit.

import logging
import os
import tempfile
import uuid
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


class ScratchSpace:
    """Tracks scratch files created while handling one upload.

    Use as a context manager: every registered path is unlinked when the
    block exits, whether it finished normally or raised.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory or Path(tempfile.gettempdir())
        self._paths: list[Path] = []

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def register(self, path: Path) -> Path:
        """Track an existing or future path for removal on exit."""
        self._paths.append(path)
        return path

    def new_file(self, prefix: str, suffix: str) -> Path:
        """Create an empty, uniquely named scratch file and track it."""
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=self._directory)
        os.close(fd)
        return self.register(Path(name))

    def new_path(self, prefix: str, suffix: str) -> Path:
        """Reserve a unique scratch path without creating the file."""
        self._directory.mkdir(parents=True, exist_ok=True)
        return self.register(self._directory / f"{prefix}{uuid.uuid4().hex}{suffix}")

    def cleanup(self) -> None:
        """Remove every tracked path that still exists."""
        while self._paths:
            path = self._paths.pop()
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove scratch file %s: %s", path, exc)

    def __enter__(self) -> "ScratchSpace":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()
