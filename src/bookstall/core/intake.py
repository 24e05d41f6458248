# ABOUTME: Upload intake: authorises an EPUB submission and copies it into scratch space.
# ABOUTME: Every rejection happens here, before any external tool is invoked.

import enum
import logging
import shutil
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import BinaryIO

from bookstall.core.nonces import NonceManager
from bookstall.core.scratch import ScratchSpace

logger = logging.getLogger(__name__)

UPLOAD_ACTION = "upload_epub_nonce"
REQUIRED_CAPABILITY = "manage_store"
ALLOWED_EXTENSION = "epub"
DEFAULT_PRICE = Decimal("9.99")


class UploadRejected(Exception):
    """Base class for terminal upload failures. The message is shown to the operator."""


class SecurityCheckFailed(UploadRejected):
    """Raised when the anti-forgery token does not verify."""


class PermissionDenied(UploadRejected):
    """Raised when the operator lacks the capability to publish products."""


class UploadTransportError(UploadRejected):
    """Raised when the file did not arrive intact."""


class DisallowedFileType(UploadRejected):
    """Raised when the uploaded file is not an EPUB."""


class UploadStatus(enum.Enum):
    """Transport outcome reported for a multipart file field."""

    OK = "ok"
    NO_FILE = "no_file"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class FileUpload:
    """A file field as received from the transport.

    source_path is the transport's own temporary file, if it keeps one on
    disk; it is removed once the payload has been copied.
    """

    filename: str
    stream: BinaryIO | None
    status: UploadStatus = UploadStatus.OK
    source_path: Path | None = None


@dataclass
class UploadSubmission:
    """The fields of the upload form."""

    file: FileUpload | None
    price: str | None = None
    nonce: str | None = None


@dataclass(frozen=True)
class Operator:
    """An authenticated admin and what they are allowed to do."""

    name: str
    session_id: str
    capabilities: frozenset[str] = field(default_factory=frozenset)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class UploadedFile:
    """An accepted upload, copied into a scratch file."""

    original_filename: str
    extension: str
    path: Path
    size: int


def parse_price(raw: str | None) -> Decimal:
    """Parse the submitted price, falling back to DEFAULT_PRICE.

    Absent, blank, unparsable, non-finite and negative values all yield
    the fallback. Exponent notation is expanded and negative zero becomes
    zero, so the stored text is always a plain decimal.
    """
    if raw is None or not raw.strip():
        return DEFAULT_PRICE
    try:
        price = Decimal(raw.strip())
        if not price.is_finite() or price < 0:
            return DEFAULT_PRICE
        if price.as_tuple().exponent > 0:
            price = price.quantize(Decimal(1))
    except InvalidOperation:
        return DEFAULT_PRICE
    return abs(price)


def file_extension(filename: str) -> str:
    """Lowercased extension of a filename, without the dot."""
    return Path(filename).suffix.lstrip(".").lower()


def _discard(upload: FileUpload) -> None:
    """Release the transport's copy of an upload."""
    if upload.stream is not None:
        upload.stream.close()
    if upload.source_path is not None:
        upload.source_path.unlink(missing_ok=True)


def accept_upload(
    submission: UploadSubmission,
    operator: Operator,
    *,
    nonces: NonceManager,
    scratch: ScratchSpace,
    max_bytes: int | None = None,
) -> UploadedFile:
    """Authorise a submission and copy its file into scratch space.

    Checks run in a fixed order: token, capability, transport status,
    extension. The copy is registered with scratch so it is removed with
    the rest of the request's temporary files.

    Raises:
        SecurityCheckFailed: Bad or missing anti-forgery token.
        PermissionDenied: Operator lacks REQUIRED_CAPABILITY.
        UploadTransportError: No file, a failed transfer, or an oversized file.
        DisallowedFileType: The file name does not end in .epub.
    """
    if not nonces.verify(submission.nonce, UPLOAD_ACTION, operator.session_id):
        raise SecurityCheckFailed("Security check failed.")

    if not operator.can(REQUIRED_CAPABILITY):
        raise PermissionDenied("Insufficient permissions.")

    upload = submission.file
    if upload is None or upload.status is not UploadStatus.OK or upload.stream is None:
        if upload is not None:
            _discard(upload)
        raise UploadTransportError("File upload error.")

    extension = file_extension(upload.filename)
    if extension != ALLOWED_EXTENSION:
        _discard(upload)
        raise DisallowedFileType("Only .epub files are allowed.")

    target = scratch.new_file("epub_", f".{ALLOWED_EXTENSION}")
    try:
        with open(target, "wb") as f:
            shutil.copyfileobj(upload.stream, f)
    except OSError as exc:
        raise UploadTransportError("Failed to copy uploaded file.") from exc
    finally:
        _discard(upload)

    size = target.stat().st_size
    if max_bytes is not None and size > max_bytes:
        raise UploadTransportError("File exceeds the maximum upload size.")

    logger.debug("Accepted %s (%d bytes) as %s", upload.filename, size, target)
    return UploadedFile(
        original_filename=upload.filename,
        extension=extension,
        path=target,
        size=size,
    )
