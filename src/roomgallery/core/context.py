"""Explicit wiring of configuration, stores and upstream clients.

Components receive a :class:`GalleryContext` at construction instead of
reaching for module-level globals, which keeps them testable with temporary
stores and mocked clients.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from roomgallery.core.blob_store import BlobStore, LocalBlobStore
from roomgallery.core.config import RoomGalleryConfig
from roomgallery.core.image_generation import ImageGenerationClient, OpenAIImageClient
from roomgallery.core.metadata_store import MetadataStore, SQLiteMetadataStore
from roomgallery.core.vision import VisionClient, WorkersAIVisionClient

logger = logging.getLogger(__name__)


@dataclass
class GalleryContext:
    """Everything a component needs to talk to the outside world.

    Attributes:
        public_url_prefix: Prefix of every blob's public URL.
        blob_store: Photo and generated image bytes.
        metadata_store: One JSON document per photo key.
        vision: Vision model used by ingestion.
        image_generator: Image generation service used by the inpainting flow.
        http_clients: HTTP clients owned by this context, closed by :meth:`aclose`.
    """

    public_url_prefix: str
    blob_store: BlobStore
    metadata_store: MetadataStore
    vision: VisionClient
    image_generator: ImageGenerationClient
    http_clients: list[httpx.AsyncClient] = field(default_factory=list)

    async def aclose(self) -> None:
        """Close the HTTP clients created for this context."""
        for client in self.http_clients:
            await client.aclose()
        self.http_clients.clear()


def build_context(cfg: RoomGalleryConfig) -> GalleryContext:
    """Create the production context from configuration.

    Args:
        cfg: Loaded configuration.

    Returns:
        A context backed by the local blob store, the SQLite metadata store,
        Workers AI for vision and OpenAI for image generation.
    """
    if not cfg.openai_api_key:
        logger.warning("ROOMGALLERY_OPENAI_API_KEY is not set; image generation will fail.")
    if not cfg.vision_api_url:
        logger.warning("ROOMGALLERY_VISION_API_URL is not set; photo analysis will fail.")

    vision_http = httpx.AsyncClient(timeout=cfg.vision_timeout)
    image_http = httpx.AsyncClient(timeout=cfg.image_timeout)

    return GalleryContext(
        public_url_prefix=cfg.public_url_prefix,
        blob_store=LocalBlobStore(cfg.blob_dir),
        metadata_store=SQLiteMetadataStore(cfg.metadata_db),
        vision=WorkersAIVisionClient(cfg.vision_api_url, cfg.vision_api_token, vision_http),
        image_generator=OpenAIImageClient(
            cfg.openai_api_key,
            image_http,
            api_url=cfg.openai_api_url,
            model=cfg.image_model,
            size=cfg.image_size,
        ),
        http_clients=[vision_http, image_http],
    )
