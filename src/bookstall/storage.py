# ABOUTME: Public upload directory: permanent storage for product files and media.
# ABOUTME: Maps files under a base directory to public URLs, organised in YYYY/MM folders.

import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

DEFAULT_UPLOADS_DIR = Path.home() / ".bookstall" / "uploads"
DEFAULT_UPLOADS_URL = "/uploads"

_MAX_COLLISION_ATTEMPTS = 10_000


@dataclass(frozen=True)
class UploadLocation:
    """A file location inside the upload directory and its public URL."""

    path: Path
    url: str


def _resolve_collision(target: Path) -> Path:
    """Find a non-colliding filename by appending -1, -2, etc."""
    stem = target.stem
    suffix = target.suffix
    parent = target.parent
    for counter in range(1, _MAX_COLLISION_ATTEMPTS + 1):
        candidate = parent / f"{stem}-{counter}{suffix}"
        if not candidate.exists():
            return candidate
    raise OSError(
        f"Could not find a non-colliding filename after "
        f"{_MAX_COLLISION_ATTEMPTS} attempts: {target}"
    )


class UploadDirectory:
    """The store's public upload directory.

    Files land in a year/month subfolder of base_path and are served from
    the matching path under base_url.
    """

    def __init__(
        self,
        base_path: Path = DEFAULT_UPLOADS_DIR,
        base_url: str = DEFAULT_UPLOADS_URL,
        *,
        use_yearmonth_folders: bool = True,
    ) -> None:
        self._base_path = base_path
        self._base_url = base_url.rstrip("/")
        self._use_yearmonth = use_yearmonth_folders

    @property
    def base_path(self) -> Path:
        return self._base_path

    def current(self, now: datetime | None = None) -> UploadLocation:
        """Return the directory new uploads go to, creating it if needed."""
        if not self._use_yearmonth:
            self._base_path.mkdir(parents=True, exist_ok=True)
            return UploadLocation(path=self._base_path, url=self._base_url)

        now = now or datetime.now()
        subdir = f"{now:%Y}/{now:%m}"
        path = self._base_path / subdir
        path.mkdir(parents=True, exist_ok=True)
        return UploadLocation(path=path, url=f"{self._base_url}/{subdir}")

    def reserve(self, extension: str) -> UploadLocation:
        """Pick a collision-resistant file name with the given extension."""
        folder = self.current()
        name = f"{uuid.uuid4().hex}.{extension.lstrip('.')}"
        return UploadLocation(path=folder.path / name, url=f"{folder.url}/{name}")

    def store_copy(self, source: Path, extension: str) -> UploadLocation:
        """Copy a file into a freshly reserved location."""
        location = self.reserve(extension)
        shutil.copyfile(source, location.path)
        return location

    def upload_bits(self, filename: str, data: bytes) -> UploadLocation:
        """Write bytes under filename, never overwriting an existing file."""
        folder = self.current()
        target = folder.path / Path(filename).name
        if target.exists():
            target = _resolve_collision(target)
        with open(target, "xb") as f:
            f.write(data)
        return UploadLocation(path=target, url=f"{folder.url}/{target.name}")

    def url_for(self, path: Path) -> str:
        """Public URL of a file somewhere under the upload directory."""
        relative = path.relative_to(self._base_path).as_posix()
        return f"{self._base_url}/{relative}"
