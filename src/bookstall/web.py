# ABOUTME: FastAPI adapter exposing the EPUB upload form handler and the product edit view.
# ABOUTME: Wires settings into the pipeline per request; rejections become HTTP errors.

import logging
import secrets
from contextlib import closing
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.staticfiles import StaticFiles

from bookstall.config import StoreSettings
from bookstall.core.assembler import ProductAssembler
from bookstall.core.intake import (
    REQUIRED_CAPABILITY,
    UPLOAD_ACTION,
    FileUpload,
    Operator,
    PermissionDenied,
    SecurityCheckFailed,
    UploadRejected,
    UploadStatus,
    UploadSubmission,
)
from bookstall.core.nonces import NonceManager
from bookstall.core.publisher import publish_epub
from bookstall.db.catalog import StoreCatalog
from bookstall.db.connection import open_store
from bookstall.formats.ebook_meta import EbookMetaTool, MetadataExtractionError
from bookstall.metadata.extractor import MetadataExtractor
from bookstall.storage import UploadDirectory

logger = logging.getLogger(__name__)

FORM_ACTION = "upload_epub_product"
NONCE_FIELD = "epub_nonce"

security = HTTPBasic()
router = APIRouter(prefix="/admin")


def _settings(request: Request) -> StoreSettings:
    return request.app.state.settings


def current_operator(
    request: Request,
    credentials: HTTPBasicCredentials = Depends(security),
) -> Operator:
    """Authenticate the admin account configured in settings."""
    settings = _settings(request)
    user_ok = secrets.compare_digest(
        credentials.username.encode(), settings.admin_user.encode()
    )
    password_ok = settings.admin_password is not None and secrets.compare_digest(
        credentials.password.encode(), settings.admin_password.encode()
    )
    if not (user_ok and password_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
            headers={"WWW-Authenticate": "Basic"},
        )
    return Operator(
        name=credentials.username,
        session_id=credentials.username,
        capabilities=frozenset({REQUIRED_CAPABILITY}),
    )


def _status_for(exc: UploadRejected) -> int:
    if isinstance(exc, (SecurityCheckFailed, PermissionDenied)):
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_400_BAD_REQUEST


def _to_file_upload(epub_file: UploadFile | None) -> FileUpload | None:
    if epub_file is None:
        return None
    if not epub_file.filename:
        return FileUpload(filename="", stream=None, status=UploadStatus.NO_FILE)
    return FileUpload(filename=epub_file.filename, stream=epub_file.file)


@router.get("/upload-nonce")
def upload_nonce(request: Request, operator: Operator = Depends(current_operator)) -> dict[str, str]:
    """Issue the anti-forgery token the upload form must carry."""
    nonces: NonceManager = request.app.state.nonces
    return {
        "action": FORM_ACTION,
        NONCE_FIELD: nonces.create(UPLOAD_ACTION, operator.session_id),
    }


@router.post("/admin-post.php")
def handle_upload(
    request: Request,
    action: str = Form(..., description="Form handler to dispatch to"),
    epub_nonce: str | None = Form(None, description="Anti-forgery token"),
    price: str | None = Form(None, description="Regular price of the product"),
    epub_file: UploadFile | None = File(None, description="The EPUB to publish"),
    operator: Operator = Depends(current_operator),
) -> RedirectResponse:
    """Publish an uploaded EPUB as a downloadable product."""
    if action != FORM_ACTION:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown action.")

    settings = _settings(request)
    submission = UploadSubmission(
        file=_to_file_upload(epub_file), price=price, nonce=epub_nonce,
    )

    with closing(open_store(settings.db_path, check_same_thread=False)) as conn:
        catalog = StoreCatalog(conn)
        uploads = UploadDirectory(settings.uploads_dir, settings.uploads_url)
        try:
            result = publish_epub(
                submission,
                operator,
                nonces=request.app.state.nonces,
                extractor=request.app.state.extractor,
                assembler=ProductAssembler(catalog, uploads),
                scratch_dir=settings.scratch_dir,
                max_bytes=settings.max_upload_bytes,
            )
        except UploadRejected as exc:
            logger.warning("Upload from %s rejected: %s", operator.name, exc)
            raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc
        except MetadataExtractionError as exc:
            logger.error("Metadata extraction failed: %s", exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return RedirectResponse(
        url=f"{router.prefix}/{result.redirect_url}", status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/post.php")
def edit_product(
    request: Request,
    post: int,
    action: str = "edit",
    operator: Operator = Depends(current_operator),
) -> dict[str, Any]:
    """Show a product as the edit view sees it."""
    settings = _settings(request)
    with closing(open_store(settings.db_path, check_same_thread=False)) as conn:
        catalog = StoreCatalog(conn)
        record = catalog.get_product(post)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found.")
        thumbnail = (
            catalog.get_attachment(record.thumbnail_id) if record.thumbnail_id else None
        )
        tags = catalog.get_tags_for_product(post)

    product = record.product
    return {
        "id": record.id,
        "action": action,
        "name": product.name,
        "regular_price": str(product.regular_price),
        "virtual": product.virtual,
        "downloadable": product.downloadable,
        "description": product.description,
        "authors": product.authors,
        "published_date": product.published_date.isoformat() if product.published_date else None,
        "downloads": [{"name": d.name, "file": d.file_url} for d in product.downloads],
        "tags": tags,
        "thumbnail": thumbnail.url if thumbnail else None,
        "date_created": record.date_created,
    }


def create_app(
    settings: StoreSettings | None = None,
    *,
    extractor: MetadataExtractor | None = None,
) -> FastAPI:
    """Build the admin application.

    Args:
        settings: Paths, credentials and the token secret.
        extractor: Metadata source; defaults to ebook-meta as configured.
    """
    settings = settings or StoreSettings()
    app = FastAPI(title="bookstall")
    app.state.settings = settings
    app.state.nonces = NonceManager(settings.secret)
    app.state.extractor = extractor or EbookMetaTool(
        settings.ebook_meta, timeout=settings.ebook_meta_timeout,
    )
    app.include_router(router)

    if settings.uploads_url.startswith("/"):
        settings.uploads_dir.mkdir(parents=True, exist_ok=True)
        app.mount(
            settings.uploads_url,
            StaticFiles(directory=str(settings.uploads_dir)),
            name="uploads",
        )

    return app
