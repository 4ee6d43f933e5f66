"""Art Portfolio API: FastAPI Application.

This module is the single entry point for the web application.  It defines
the :func:`create_app` factory, all REST API routes, the exception handlers
that normalise error bodies, and the ``main()`` CLI function that launches
the uvicorn server.

Architecture
------------
- **Record persistence** goes through an
  :class:`~artportfolio.api.artwork_store.ArtworkRepository` held on
  ``app.state.store``.  The default implementation keeps the whole catalog
  in one JSON document.
- **Image files** are managed by
  :class:`~artportfolio.api.image_assets.ImageAssetManager` on
  ``app.state.assets`` and served by FastAPI's ``StaticFiles`` at
  ``/uploads``.
- **Validation** of write payloads happens before any file is stored.
- **The HTML documentation page** is served as a raw ``HTMLResponse``.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/``                         HTML documentation page
GET       ``/artworks``                 Paginated listing, optional status
GET       ``/artworks/{id}``            Single artwork
POST      ``/artworks``                 Create artwork (image required)
PUT       ``/artworks/{id}``            Update artwork (image optional)
DELETE    ``/artworks/{id}``            Delete artwork and its image
GET       ``/uploads/{filename}``       Raw image file
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    artportfolio

Direct invocation::

    python -m artportfolio.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from artportfolio import __version__
from artportfolio.api.artwork_store import (
    ArtworkRepository,
    JsonArtworkStore,
    filter_artworks,
    paginate_artworks,
)
from artportfolio.api.errors import ArtworkAPIError, NotFoundError, UploadError, ValidationError
from artportfolio.api.image_assets import ImageAssetManager
from artportfolio.api.models import Artwork, ArtworkPage, DeleteResponse, ErrorResponse
from artportfolio.api.validation import clean_artwork_fields, parse_status
from artportfolio.core.config import PortfolioConfig, config

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"

# Allowance for text fields and multipart framing on top of the image limit.
FORM_OVERHEAD_BYTES = 64 * 1024

HTTP_ERROR_CATEGORIES = {
    400: "Bad request",
    405: "Method not allowed",
    413: "Payload too large",
    415: "Unsupported media type",
}

ERROR_RESPONSES: dict = {
    400: {"model": ErrorResponse, "description": "Validation or upload error"},
    404: {"model": ErrorResponse, "description": "Artwork not found"},
}


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_settings(request: Request) -> PortfolioConfig:
    return request.app.state.config


def get_store(request: Request) -> ArtworkRepository:
    return request.app.state.store


def get_assets(request: Request) -> ImageAssetManager:
    return request.app.state.assets


# ---------------------------------------------------------------------------
# Request parsing helpers.
# ---------------------------------------------------------------------------


def _parse_positive_int(value: str | None, default: int) -> int:
    """Parse a query parameter, falling back to ``default`` when unusable.

    Missing, non-numeric, zero and negative values all yield ``default``.
    """
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def _check_content_length(request: Request, max_bytes: int | None) -> None:
    """Reject a body whose declared length cannot fit the upload limit.

    Missing or malformed ``Content-Length`` headers are left to the
    streaming size check in :meth:`ImageAssetManager.store`.

    Raises:
        UploadError: If the declared length exceeds ``max_bytes`` plus
            :data:`FORM_OVERHEAD_BYTES`.
    """
    if max_bytes is None:
        return
    try:
        declared = int(request.headers.get("content-length", ""))
    except ValueError:
        return
    if declared > max_bytes + FORM_OVERHEAD_BYTES:
        logger.info(f"Rejecting {declared}-byte body on {request.url.path} before parsing")
        raise UploadError(
            f"Image exceeds the maximum size of {max_bytes} bytes",
            error="File too large",
        )


@asynccontextmanager
async def _read_artwork_payload(
    request: Request, max_bytes: int | None = None
) -> AsyncIterator[tuple[dict, UploadFile | None]]:
    """Parse a write request into text fields and the optional image upload.

    Multipart and urlencoded bodies are read as forms.  A JSON object body is
    also accepted, in which case there is never an upload.  Form resources
    (spooled temporary files) are released when the context exits.

    Args:
        request: Incoming request.
        max_bytes: Upload size limit used to refuse oversized bodies before
            they are spooled, or ``None`` for no limit.

    Yields:
        Tuple of ``(fields, upload)``.

    Raises:
        ValidationError: If a JSON body is malformed or not an object.
        UploadError: If the body is too large or not a parseable form, or if
            more than one image, or a file under any other field name, is
            submitted.
    """
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if media_type == "application/json":
        try:
            body = await request.json()
        except ValueError as e:
            raise ValidationError(["Request body must be valid JSON"]) from e
        if not isinstance(body, dict):
            raise ValidationError(["Request body must be a JSON object"])
        yield body, None
        return

    _check_content_length(request, max_bytes)
    try:
        form = await request.form()
    except StarletteHTTPException as e:
        # Starlette reports malformed multipart bodies as a bare 400.
        raise UploadError(f"Could not parse form data: {e.detail}") from e

    try:
        fields: dict = {}
        uploads: list[UploadFile] = []

        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                # Browsers send an empty part when no file was chosen.
                if not value.filename:
                    continue
                if key != IMAGE_FIELD:
                    raise UploadError(f"Unexpected file field '{key}'")
                uploads.append(value)
            else:
                fields.setdefault(key, value)

        if len(uploads) > 1:
            raise UploadError(f"Only a single '{IMAGE_FIELD}' file may be uploaded")

        yield fields, uploads[0] if uploads else None
    finally:
        await form.close()


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(settings: PortfolioConfig = Depends(get_settings)) -> HTMLResponse:
    """Serve the static API documentation page.

    Raises:
        StarletteHTTPException: 404 if ``index.html`` is not found.
    """
    index_path = settings.templates_dir / "index.html"
    if index_path.exists():
        return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
    raise StarletteHTTPException(status_code=404, detail="index.html not found")


@router.get("/artworks", response_model=ArtworkPage)
async def list_artworks(
    page: str | None = None,
    limit: str | None = None,
    status: str | None = None,
    settings: PortfolioConfig = Depends(get_settings),
    store: ArtworkRepository = Depends(get_store),
) -> dict:
    """Return one page of artworks, optionally filtered by status.

    Query parameters are parsed leniently: unusable ``page``/``limit``
    values fall back to the defaults, and a ``status`` other than 0 or 1 is
    ignored rather than rejected.

    Args:
        page: One-based page number (default 1).
        limit: Items per page (default from configuration, normally 10).
        status: ``0`` or ``1`` to filter by status before paginating.

    Returns:
        Dictionary with ``data`` and ``pagination``.
    """
    page_number = _parse_positive_int(page, 1)
    page_limit = _parse_positive_int(limit, settings.default_page_limit)

    status_filter = None
    if status is not None:
        try:
            status_filter = parse_status(status)
        except ValueError:
            logger.debug(f"Ignoring unusable status filter {status!r}")

    records = filter_artworks(store.read_all(), status=status_filter)
    return paginate_artworks(records, page_number, page_limit)


@router.get("/artworks/{artwork_id}", response_model=Artwork, responses=ERROR_RESPONSES)
async def get_artwork(artwork_id: str, store: ArtworkRepository = Depends(get_store)) -> dict:
    """Return a single artwork by ID.

    Raises:
        NotFoundError: If no artwork has ``artwork_id``.
    """
    record = store.find_by_id(artwork_id)
    if record is None:
        raise NotFoundError()
    return record


@router.post(
    "/artworks",
    status_code=201,
    response_model=Artwork,
    responses=ERROR_RESPONSES,
)
async def create_artwork(
    request: Request,
    store: ArtworkRepository = Depends(get_store),
    assets: ImageAssetManager = Depends(get_assets),
) -> dict:
    """Create an artwork from a multipart form with a required ``image``.

    Fields are validated before the image is written.  The image is stored
    first and the record persisted second; if persisting fails the stored
    image is removed again.

    Returns:
        The created artwork.

    Raises:
        ValidationError: If any field is missing or invalid.
        UploadError: If the image is missing, too large or of the wrong type.
    """
    async with _read_artwork_payload(request, assets.max_bytes) as (fields, upload):
        artwork_fields = clean_artwork_fields(fields)
        if upload is None:
            raise UploadError("An image file must be uploaded", error="Image is required")
        filename = assets.store(upload.file, upload.filename, upload.content_type)

    image_url = assets.url_for(filename, str(request.base_url))
    try:
        return store.create({**artwork_fields.to_record(), "image": image_url})
    except Exception:
        assets.remove(filename)
        raise


@router.put("/artworks/{artwork_id}", response_model=Artwork, responses=ERROR_RESPONSES)
async def update_artwork(
    artwork_id: str,
    request: Request,
    store: ArtworkRepository = Depends(get_store),
    assets: ImageAssetManager = Depends(get_assets),
) -> dict:
    """Update an artwork; the ``image`` upload is optional.

    Without a new image the current one is kept.  With a new image, the new
    file is stored, the old file is removed, and the record is persisted
    pointing at the new URL.

    Returns:
        The updated artwork.

    Raises:
        ValidationError: If any field is missing or invalid.
        NotFoundError: If no artwork has ``artwork_id``.
        UploadError: If the new image is too large or of the wrong type.
    """
    async with _read_artwork_payload(request, assets.max_bytes) as (fields, upload):
        artwork_fields = clean_artwork_fields(fields)

        existing = store.find_by_id(artwork_id)
        if existing is None:
            raise NotFoundError()

        filename = None
        if upload is not None:
            filename = assets.store(upload.file, upload.filename, upload.content_type)

    changes = artwork_fields.to_record()
    if filename is not None:
        assets.remove(existing.get("image"))
        changes["image"] = assets.url_for(filename, str(request.base_url))

    try:
        record = store.update(artwork_id, changes)
    except Exception:
        if filename is not None:
            assets.remove(filename)
        raise

    if record is None:
        # Deleted by another request between the lookup and the update.
        if filename is not None:
            assets.remove(filename)
        raise NotFoundError()
    return record


@router.delete(
    "/artworks/{artwork_id}",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
)
async def delete_artwork(
    artwork_id: str,
    store: ArtworkRepository = Depends(get_store),
    assets: ImageAssetManager = Depends(get_assets),
) -> dict:
    """Delete an artwork, then its image file.

    Returns:
        Dictionary with ``message`` and the removed ``deletedArtwork``.

    Raises:
        NotFoundError: If no artwork has ``artwork_id``.
    """
    record = store.delete(artwork_id)
    if record is None:
        raise NotFoundError()

    assets.remove(record.get("image"))
    return {"message": "Artwork deleted successfully", "deletedArtwork": record}


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


async def handle_api_error(request: Request, exc: ArtworkAPIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc}",
            exc_info=exc.__cause__ or exc,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _error_category(status_code: int) -> str:
    """Return the stable ``error`` label for a framework-raised status."""
    if status_code in HTTP_ERROR_CATEGORIES:
        return HTTP_ERROR_CATEGORIES[status_code]
    try:
        return HTTPStatus(status_code).phrase.capitalize()
    except ValueError:
        return "Request failed"


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = exc.detail if exc.detail != "Not Found" else "The requested endpoint does not exist"
        content = {"error": "Route not found", "message": message}
    else:
        content = {"error": _error_category(exc.status_code), "message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content=ValidationError(details).to_dict())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error during {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": ArtworkAPIError.message},
    )


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the uploads directory on startup and log where things live."""
    settings: PortfolioConfig = app.state.config
    uploads_dir = app.state.assets.ensure_directory()
    logger.info(f"Art Portfolio API {__version__} serving uploads from {uploads_dir}")
    logger.info(f"Artwork document: {settings.data_file}")

    yield

    logger.info("Art Portfolio API shutting down.")


def create_app(
    settings: PortfolioConfig | None = None,
    store: ArtworkRepository | None = None,
    assets: ImageAssetManager | None = None,
) -> FastAPI:
    """Build a configured FastAPI application.

    Args:
        settings: Configuration to use; defaults to the global ``config``.
        store: Record repository; defaults to a :class:`JsonArtworkStore` on
            ``settings.data_file``.
        assets: Image asset manager; defaults to one on
            ``settings.uploads_dir`` with ``settings.max_upload_bytes``.

    Returns:
        The FastAPI application.
    """
    settings = settings or config

    application = FastAPI(
        title="Art Portfolio API",
        description="RESTful API for managing an artwork portfolio.",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.config = settings
    application.state.store = store or JsonArtworkStore(settings.data_file)
    application.state.assets = assets or ImageAssetManager(
        settings.uploads_dir,
        max_bytes=settings.max_upload_bytes,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ArtworkAPIError, handle_api_error)
    application.add_exception_handler(StarletteHTTPException, handle_http_error)
    application.add_exception_handler(RequestValidationError, handle_request_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    application.include_router(router)

    # The directory is created in ``lifespan``; skip the existence check here
    # so building the app has no file system side effects.
    application.mount(
        application.state.assets.public_path,
        StaticFiles(directory=str(application.state.assets.uploads_dir), check_dir=False),
        name="uploads",
    )

    return application


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~artportfolio.core.config.config` (``PORT`` and
    ``ARTPORTFOLIO_SERVER_PORT`` both set the port).  Defaults to
    ``0.0.0.0:3000``.

    This function is registered as the ``artportfolio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Documentation: http://localhost:{config.server_port}")
    logger.info(f"API base URL: http://localhost:{config.server_port}/artworks")

    uvicorn.run(
        "artportfolio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
