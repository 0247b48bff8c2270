"""Request-level components built on a :class:`~roomgallery.core.context.GalleryContext`.

- **ingestion**: describe and tag every original photo.
- **gallery**: list and search metadata records.
- **generation**: generate edited variants and persist them.
"""
