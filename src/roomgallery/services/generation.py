"""Generated variants: prompt the image service and persist the results.

Two independent operations live here:

``generate``
    Look up the original photo by public URL, wrap its stored description and
    the caller's edit instruction into one prompt, and return the URL of the
    image the service produced.  Nothing is stored.

``persist_generated``
    Take a ``data:image/<ext>;base64,<payload>`` URI (typically the image the
    client downloaded from that URL), write it to the blob store under the
    ``generated/`` prefix and record a
    :class:`~roomgallery.core.records.GeneratedPhoto`.  Every call mints a new
    key.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from roomgallery.core.context import GalleryContext
from roomgallery.core.errors import InvalidImageDataError
from roomgallery.core.prompt_builder import build_inpainting_prompt, describe_generated_image
from roomgallery.core.records import (
    GENERATED_PREFIX,
    GeneratedPhoto,
    PhotoAnalysis,
    public_url_for,
)
from roomgallery.services.gallery import GalleryService

logger = logging.getLogger(__name__)

_DATA_URI_PATTERN = re.compile(r"^data:(image/(.+));base64,(.*)$")
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-._]")
_TRAILING_EXTENSION = re.compile(r"\.[^/.]+$")

DEFAULT_KEY_STEM = "image"


@dataclass(frozen=True)
class DecodedImage:
    """Image bytes decoded from a data URI."""

    mime_type: str
    extension: str
    data: bytes


@dataclass(frozen=True)
class PersistedImage:
    """Where a generated image was stored."""

    key: str
    public_url: str


def decode_data_uri(image_data: str | None) -> DecodedImage:
    """Decode a ``data:image/<ext>;base64,<payload>`` URI.

    Raises:
        InvalidImageDataError: If *image_data* is empty, does not match the
            data URI pattern, or carries a payload that is not base64.
    """
    if not image_data:
        raise InvalidImageDataError("Missing image data")

    match = _DATA_URI_PATTERN.match(image_data)
    if not match:
        raise InvalidImageDataError("Invalid image data format")

    mime_type, extension, payload = match.groups()
    # Browsers accept base64 without its trailing padding.
    payload = payload.rstrip("=")
    payload += "=" * (-len(payload) % 4)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageDataError("Invalid image data format") from e
    return DecodedImage(mime_type=mime_type, extension=extension, data=data)


def safe_key_stem(original_key: str | None) -> str:
    """Turn an original photo key into a file-name stem for a generated key.

    Characters outside ``[A-Za-z0-9-._]`` become ``_`` (including ``/``) and
    the trailing extension is dropped: ``"kitchen/photo 1.jpg"`` becomes
    ``"kitchen_photo_1"``.
    """
    if not original_key:
        return DEFAULT_KEY_STEM
    return _TRAILING_EXTENSION.sub("", _UNSAFE_KEY_CHARS.sub("_", original_key))


def generated_key(original_key: str | None, extension: str, timestamp_ms: int | None = None) -> str:
    """Build ``generated/<stem>-<epoch ms>.<ext>``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{GENERATED_PREFIX}{safe_key_stem(original_key)}-{timestamp_ms}.{extension}"


class GenerationService:
    """Create edited variants of gallery photos."""

    def __init__(self, context: GalleryContext):
        self.context = context
        self.gallery = GalleryService(context)

    async def generate(self, original_image_url: str, inpainting_prompt: str) -> str:
        """Ask the image service for a variant of the photo at *original_image_url*.

        When no record matches the URL (or it has no description), a generic
        placeholder description is used instead of failing.

        Returns:
            URL of the generated image.

        Raises:
            ImageGenerationError: If the image service fails or returns no URL.
        """
        record = await self.gallery.find_by_public_url(original_image_url)
        description = record.analysis.description if record and record.analysis else None
        if not description:
            logger.warning(
                f"Metadata for {original_image_url} not found or description missing. "
                "Using generic description."
            )

        prompt = build_inpainting_prompt(description, inpainting_prompt)
        image_url = await self.context.image_generator.generate(prompt)
        logger.info(f"Generated variant of {original_image_url}")
        return image_url

    async def persist_generated(
        self,
        image_data: str | None,
        original_image_key: str | None = None,
        prompt_used: str | None = None,
    ) -> PersistedImage:
        """Store a generated image and its metadata record.

        Args:
            image_data: ``data:image/<ext>;base64,<payload>`` URI.
            original_image_key: Key of the photo the image was derived from.
            prompt_used: Prompt that produced the image.

        Returns:
            The new key and its public URL.

        Raises:
            InvalidImageDataError: If *image_data* is missing or malformed.
            BlobStoreError: If the bytes cannot be written.
            MetadataStoreError: If the record cannot be written.
        """
        image = decode_data_uri(image_data)

        key = generated_key(original_image_key, image.extension)
        public_url = public_url_for(self.context.public_url_prefix, key)

        self.context.blob_store.put(key, image.data, image.mime_type)

        record = GeneratedPhoto(
            key=key,
            public_url=public_url,
            original_image_key=original_image_key,
            prompt_used=prompt_used,
            analysis=PhotoAnalysis(
                description=describe_generated_image(prompt_used, original_image_key)
            ),
            last_modified=datetime.now(timezone.utc),
        )
        self.context.metadata_store.put(key, record.to_json())

        logger.info(f"Saved generated image {key} ({len(image.data)} bytes)")
        return PersistedImage(key=key, public_url=public_url)
