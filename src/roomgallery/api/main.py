"""Room Gallery — FastAPI Application.

This module is the single entry point for the web application.  It defines
the application factory, all REST API routes, and the ``main()`` CLI function
that launches the uvicorn server.

Architecture
------------
The application is a thin HTTP layer over four components:

- **Ingestion** (:class:`~roomgallery.services.ingestion.IngestionService`)
  describes every original photo with the vision model and records its room
  and categories.
- **Gallery / Search** (:class:`~roomgallery.services.gallery.GalleryService`)
  lists and filters the metadata records.
- **Generation** (:class:`~roomgallery.services.generation.GenerationService`)
  asks the image service for edited variants and persists them.

Components are built per request from the
:class:`~roomgallery.core.context.GalleryContext` stored on ``app.state`` at
startup.  The local blob directory is mounted at ``/blobs`` so public URLs
resolve when the default ``public_url_prefix`` is used.

Errors
------
Every failure is returned as ``{"status": "error", "message": ...}``: 400 for
client input problems, 500 for store or upstream failures.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
POST      ``/api/analyze-photos``       Describe and tag every photo
GET       ``/api/gallery-data``         All records in display order
GET       ``/api/search-photos``        Records matching ``?query=``
POST      ``/api/inpainting``           Generate an edited variant
POST      ``/api/save-generated-image`` Persist a generated image
GET       ``/blobs/{key}``              Blob bytes (local blob store)
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    roomgallery

Direct invocation::

    python -m roomgallery.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from roomgallery import __version__
from roomgallery.api.models import (
    AnalyzeResponse,
    ErrorResponse,
    InpaintingRequest,
    InpaintingResponse,
    SaveGeneratedImageRequest,
    SaveGeneratedImageResponse,
)
from roomgallery.core.blob_store import LocalBlobStore
from roomgallery.core.config import RoomGalleryConfig, config
from roomgallery.core.context import GalleryContext, build_context
from roomgallery.core.errors import InvalidImageDataError
from roomgallery.services.gallery import GalleryService
from roomgallery.services.generation import GenerationService
from roomgallery.services.ingestion import IngestionService

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies and error envelope helpers.
# ---------------------------------------------------------------------------


def get_context(request: Request) -> GalleryContext:
    """Return the context created for this application at startup."""
    return request.app.state.context


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render ``HTTPException`` with the API's error envelope."""
    return _error_response(exc.status_code, str(exc.detail))


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Unparseable or mistyped request bodies are client errors (400)."""
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return _error_response(400, "Invalid request body")


def _server_error(route: str, error: Exception) -> HTTPException:
    logger.exception(f"Error in {route}: {error}")
    return HTTPException(status_code=500, detail=str(error))


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.post(
    "/api/analyze-photos",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
)
async def analyze_photos(context: GalleryContext = Depends(get_context)) -> dict:
    """Describe and tag every original photo in the blob store.

    Per-photo failures are reported in ``details``; only a failure to list
    the blob store fails the whole request.

    Returns:
        ``{"status": "success", "message": "Photos analyzed", "details": [...]}``
        where each detail has ``key``, ``status``, ``room`` and ``type``.

    Raises:
        HTTPException: 500 if the run cannot start.
    """
    try:
        outcomes = await IngestionService(context).ingest()
    except Exception as e:
        raise _server_error("/api/analyze-photos", e) from e

    return {
        "status": "success",
        "message": "Photos analyzed",
        "details": [outcome.model_dump(exclude_none=True) for outcome in outcomes],
    }


@router.get("/api/gallery-data")
async def gallery_data(context: GalleryContext = Depends(get_context)) -> list[dict]:
    """Return every photo record in gallery display order.

    Raises:
        HTTPException: 500 if the metadata store cannot be read.
    """
    try:
        records = await GalleryService(context).list_all()
    except Exception as e:
        raise _server_error("/api/gallery-data", e) from e
    return [record.to_document() for record in records]


@router.get("/api/search-photos")
async def search_photos(
    query: str | None = None,
    context: GalleryContext = Depends(get_context),
) -> list[dict]:
    """Return the photo records matching *query*.

    Args:
        query: Case-insensitive substring matched against key, description,
            categories, room and prompt.  Absent or empty returns everything.

    Raises:
        HTTPException: 500 if the metadata store cannot be read.
    """
    try:
        records = await GalleryService(context).search(query)
    except Exception as e:
        raise _server_error("/api/search-photos", e) from e
    return [record.to_document() for record in records]


@router.post("/api/inpainting", response_model=InpaintingResponse, response_model_by_alias=True)
async def inpainting(
    req: InpaintingRequest,
    context: GalleryContext = Depends(get_context),
) -> dict:
    """Generate an edited variant of a gallery photo.

    Args:
        req: Validated :class:`InpaintingRequest` payload.

    Returns:
        ``{"imageUrl": ...}``

    Raises:
        HTTPException: 400 if either field is missing, 500 if generation fails.
    """
    if not req.original_image_url or not req.inpainting_prompt:
        raise HTTPException(
            status_code=400,
            detail="Missing originalImageUrl or inpaintingPrompt",
        )

    try:
        image_url = await GenerationService(context).generate(
            req.original_image_url, req.inpainting_prompt
        )
    except Exception as e:
        raise _server_error("/api/inpainting", e) from e
    return {"imageUrl": image_url}


@router.post(
    "/api/save-generated-image",
    response_model=SaveGeneratedImageResponse,
    response_model_by_alias=True,
)
async def save_generated_image(
    req: SaveGeneratedImageRequest,
    context: GalleryContext = Depends(get_context),
) -> dict:
    """Persist a generated image and its metadata record.

    Args:
        req: Validated :class:`SaveGeneratedImageRequest` payload.

    Returns:
        ``{"status": "success", "key": ..., "publicUrl": ...}``

    Raises:
        HTTPException: 400 for missing or malformed image data, 500 if a
            store write fails.
    """
    try:
        saved = await GenerationService(context).persist_generated(
            req.image_data,
            original_image_key=req.original_image_key,
            prompt_used=req.prompt_used,
        )
    except InvalidImageDataError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        raise _server_error("/api/save-generated-image", e) from e
    return {"status": "success", "key": saved.key, "publicUrl": saved.public_url}


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    cfg: RoomGalleryConfig = config,
    context: GalleryContext | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Configuration used to build the production context and to find
            the blob directory to serve.
        context: Pre-built context (tests).  When given, it is used as-is and
            not closed on shutdown.

    Returns:
        The configured application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = context is None
        app.state.context = build_context(cfg) if owned else context
        logger.info("Gallery context initialised.")

        yield  # Application runs here.

        if owned:
            await app.state.context.aclose()
            logger.info("Gallery context closed on shutdown.")

    app = FastAPI(
        title="Room Gallery",
        description="Photo gallery with AI room tagging, search and generated variants.",
        version=__version__,
        lifespan=lifespan,
    )

    # Allow cross-origin requests so the gallery frontend can be served from
    # a different origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.include_router(router)

    if context is None:
        blob_root = cfg.blob_dir
    elif isinstance(context.blob_store, LocalBlobStore):
        blob_root = context.blob_store.root
    else:
        blob_root = None
    if blob_root is not None:
        app.mount("/blobs", StaticFiles(directory=str(blob_root)), name="blobs")

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~roomgallery.core.config.config`
    (``ROOMGALLERY_SERVER_HOST``, ``ROOMGALLERY_SERVER_PORT``,
    ``ROOMGALLERY_LOG_LEVEL``).  Defaults to ``0.0.0.0:8787``.

    This function is registered as the ``roomgallery`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "roomgallery.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
