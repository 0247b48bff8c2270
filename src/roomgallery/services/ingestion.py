"""Photo ingestion: tag every original photo in the blob store.

An ingestion run walks the blob listing one blob at a time, asks the vision
model to describe each photo, extracts a room and categories from the answer
and writes an :class:`~roomgallery.core.records.OriginalPhoto` record.

The run is a fold over the listing that yields one outcome per photo.  A
single photo failing never aborts the run:

==================  =========================================================
Status              Meaning
==================  =========================================================
``processed``       Described, tagged and written.
``analysis_failed`` Vision call failed or returned no description; a record
                    with ``analysis.error`` was still written.
``skipped``         Bytes could not be fetched; nothing written.
``failed``          Metadata write failed; the error is reported.
==================  =========================================================

Directory markers (keys ending in ``/``) and generated images are not photos
and do not appear in the outcomes at all.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel

from roomgallery.core.blob_store import BlobInfo
from roomgallery.core.context import GalleryContext
from roomgallery.core.errors import RoomGalleryError, VisionInferenceError
from roomgallery.core.extraction import ExtractedTags, extract_tags
from roomgallery.core.prompt_builder import build_analysis_prompt
from roomgallery.core.records import (
    OriginalPhoto,
    PhotoAnalysis,
    is_generated_key,
    public_url_for,
)

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No detailed description."
ANALYSIS_FAILED = "AI analysis failed."

OutcomeStatus = Literal["processed", "analysis_failed", "skipped", "failed"]


class IngestionOutcome(BaseModel):
    """Result of ingesting a single blob."""

    key: str
    status: OutcomeStatus
    room: str | None = None
    type: Literal["original"] = "original"
    error: str | None = None


def is_ingestible(key: str) -> bool:
    """Return ``True`` for keys that name an original photo."""
    return not key.endswith("/") and not is_generated_key(key)


class IngestionService:
    """Describe and tag every original photo in the blob store."""

    def __init__(self, context: GalleryContext):
        self.context = context

    async def ingest(self) -> list[IngestionOutcome]:
        """Run ingestion over the whole blob listing.

        Returns:
            One outcome per ingestible blob, in listing order.

        Raises:
            BlobStoreError: If the blob listing itself cannot be read.
        """
        outcomes: list[IngestionOutcome] = []
        for blob in self.context.blob_store.list():
            if not is_ingestible(blob.key):
                continue
            outcomes.append(await self.ingest_one(blob))

        processed = sum(1 for outcome in outcomes if outcome.status == "processed")
        logger.info(f"Ingestion finished: {processed}/{len(outcomes)} photos processed")
        return outcomes

    async def ingest_one(self, blob: BlobInfo) -> IngestionOutcome:
        """Describe, tag and record a single photo."""
        key = blob.key

        try:
            stored = self.context.blob_store.get(key)
        except RoomGalleryError as e:
            logger.warning(f"Could not retrieve blob {key}: {e}")
            return IngestionOutcome(key=key, status="skipped", error=str(e))
        if stored is None:
            logger.warning(f"Could not retrieve blob {key}")
            return IngestionOutcome(key=key, status="skipped")

        status: OutcomeStatus = "processed"
        tags = ExtractedTags()
        try:
            result = await self.context.vision.describe(stored.data, build_analysis_prompt(key))
            if result.description is None:
                raise VisionInferenceError("Vision response did not contain a description")
            description = result.description or NO_DESCRIPTION
            tags = extract_tags(result.description, key)
            analysis = PhotoAnalysis(
                description=description,
                raw_ai_response=result.raw,
                extracted_room=tags.room,
                extracted_categories=tags.categories,
            )
        except Exception as e:
            logger.exception(f"AI analysis failed for {key}: {e}")
            status = "analysis_failed"
            tags = ExtractedTags()
            analysis = PhotoAnalysis(
                error=str(e), description=ANALYSIS_FAILED, raw_ai_response=None
            )

        record = OriginalPhoto(
            key=key,
            public_url=public_url_for(self.context.public_url_prefix, key),
            analysis=analysis,
            room=tags.room,
            categories=tags.categories,
            last_modified=blob.uploaded,
        )

        try:
            self.context.metadata_store.put(key, record.to_json())
        except RoomGalleryError as e:
            logger.error(f"Could not store metadata for {key}: {e}")
            return IngestionOutcome(key=key, status="failed", room=record.room, error=str(e))

        return IngestionOutcome(key=key, status=status, room=record.room)
