"""Core building blocks for Room Gallery.

Architecture Overview
---------------------
1. **Configuration Layer** (config.py, context.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with ROOMGALLERY_ in .env files
   - An explicit GalleryContext wiring stores and upstream clients

2. **Storage Layer** (blob_store.py, metadata_store.py):
   - Key-addressed blob storage for photo bytes
   - Key-value storage for one JSON metadata document per photo

3. **Upstream Clients** (vision.py, image_generation.py):
   - Vision model that describes photos
   - Image generation service that produces edited variants

4. **Domain Logic**:
   - records.py: Photo metadata records (original/generated tagged union)
   - extraction.py: Room and category extraction from model output
   - prompt_builder.py: Prompt templates for both upstream services
"""

from roomgallery.core.config import RoomGalleryConfig, config
from roomgallery.core.context import GalleryContext, build_context

__all__ = [
    "GalleryContext",
    "RoomGalleryConfig",
    "build_context",
    "config",
]
