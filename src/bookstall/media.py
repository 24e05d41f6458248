# ABOUTME: Media library ingestion: copies an image into uploads and records an attachment.
# ABOUTME: Derived image sizes (thumbnail, medium) are generated with Pillow.

import logging
import mimetypes
from pathlib import Path
from typing import Any

from PIL import Image, ImageOps, UnidentifiedImageError

from bookstall.db.catalog import CatalogApi
from bookstall.db.mapping import Attachment
from bookstall.storage import UploadDirectory

logger = logging.getLogger(__name__)

# name -> (max width, max height, crop to exact size)
IMAGE_SIZES: dict[str, tuple[int, int, bool]] = {
    "thumbnail": (150, 150, True),
    "medium": (300, 300, False),
}


class MediaError(Exception):
    """Raised when a file cannot be added to the media library."""


def _resize(image: Image.Image, width: int, height: int, crop: bool) -> Image.Image:
    if crop:
        return ImageOps.fit(image, (width, height))
    resized = image.copy()
    resized.thumbnail((width, height))
    return resized


def _save(image: Image.Image, path: Path, image_format: str | None) -> None:
    if image_format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.save(path, format=image_format)


def generate_attachment_metadata(path: Path, uploads: UploadDirectory) -> dict[str, Any]:
    """Describe an uploaded image and write its derived sizes next to it.

    A size is only generated when the original is larger than it in at
    least one dimension. Files Pillow cannot read get empty metadata.

    Raises:
        MediaError: If the image declares more pixels than Pillow will decode.
    """
    try:
        with Image.open(path) as image:
            image.load()
            width, height = image.size
            image_format = image.format
            mime_type = Image.MIME.get(image_format or "")

            sizes: dict[str, dict[str, Any]] = {}
            for name, (max_w, max_h, crop) in IMAGE_SIZES.items():
                if width <= max_w and height <= max_h:
                    continue
                derived = _resize(image, max_w, max_h, crop)
                derived_path = path.with_name(
                    f"{path.stem}-{derived.width}x{derived.height}{path.suffix}"
                )
                _save(derived, derived_path, image_format)
                sizes[name] = {
                    "file": derived_path.name,
                    "width": derived.width,
                    "height": derived.height,
                    "mime_type": mime_type,
                }
    except UnidentifiedImageError:
        logger.warning("Not an image, skipping derived sizes: %s", path.name)
        return {}
    except Image.DecompressionBombError as exc:
        raise MediaError(f"Refusing oversized image {path.name}: {exc}") from exc

    return {
        "width": width,
        "height": height,
        "file": path.relative_to(uploads.base_path).as_posix(),
        "sizes": sizes,
    }


class MediaLibrary:
    """Adds local files to the store's media library."""

    def __init__(self, catalog: CatalogApi, uploads: UploadDirectory) -> None:
        self._catalog = catalog
        self._uploads = uploads

    def ingest(self, path: Path, parent_id: int | None = None) -> int:
        """Upload a file and register it as an attachment.

        Args:
            path: Local file to copy into the upload directory.
            parent_id: Product the attachment belongs to, if any.

        Returns:
            The attachment's row ID.

        Raises:
            MediaError: If the file cannot be read or stored.
        """
        try:
            location = self._uploads.upload_bits(path.name, path.read_bytes())
        except OSError as exc:
            raise MediaError(f"Failed to upload {path.name}: {exc}") from exc

        mime_type, _ = mimetypes.guess_type(location.path.name)
        attachment_id = self._catalog.insert_attachment(
            Attachment(
                title=location.path.stem,
                file_path=location.path,
                url=location.url,
                mime_type=mime_type,
                parent_id=parent_id,
            )
        )

        try:
            metadata = generate_attachment_metadata(location.path, self._uploads)
        except OSError as exc:
            raise MediaError(f"Failed to generate image sizes for {path.name}: {exc}") from exc
        self._catalog.update_attachment_metadata(attachment_id, metadata)

        return attachment_id
