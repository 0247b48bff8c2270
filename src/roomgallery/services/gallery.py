"""Gallery listing and search over the metadata store.

The gallery is the full set of metadata records in a stable display order:

1. original photos before generated images
2. then by room
3. then by key

Rooms and keys are compared the way a human would file them: accents and
case are ignored first, so an accented ``e`` files with ``e`` rather than
after ``z``.  Ties put lowercase before uppercase.  The order is total and
does not depend on the order in which the store happens to return its keys.

Search is a case-insensitive substring match over five fields (key,
description, categories, room, prompt).  A match in any one field is enough;
results keep the gallery order.
"""

from __future__ import annotations

import logging
import unicodedata

from roomgallery.core.context import GalleryContext
from roomgallery.core.records import (
    DEFAULT_ROOM,
    GeneratedPhoto,
    OriginalPhoto,
    loads_record,
)

logger = logging.getLogger(__name__)

Record = OriginalPhoto | GeneratedPhoto

_TYPE_RANK = {"original": 0, "generated": 1}


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _collation_key(value: str) -> tuple[str, str, str]:
    # Accents and case are ignored first; ties put lowercase and unaccented
    # letters first, then fall back to the raw string.
    return (_fold(value), value.swapcase(), value)


def gallery_sort_key(record: Record) -> tuple:
    """Sort key implementing the gallery display order."""
    return (
        _TYPE_RANK.get(record.type, len(_TYPE_RANK)),
        _collation_key(record.room or DEFAULT_ROOM),
        _collation_key(record.key),
    )


def sort_records(records: list[Record]) -> list[Record]:
    """Return *records* in gallery display order."""
    return sorted(records, key=gallery_sort_key)


def searchable_fields(record: Record) -> list[str]:
    """Every text value a search query is matched against."""
    fields = [record.key, record.room]
    if record.analysis and record.analysis.description:
        fields.append(record.analysis.description)
    fields.extend(record.categories)
    prompt = getattr(record, "prompt_used", None) or (record.model_extra or {}).get("promptUsed")
    if isinstance(prompt, str) and prompt:
        fields.append(prompt)
    return fields


def matches_query(record: Record, query: str) -> bool:
    """Return ``True`` if any searchable field contains *query*, ignoring case."""
    needle = query.lower()
    return any(needle in value.lower() for value in searchable_fields(record))


def filter_records(records: list[Record], query: str | None) -> list[Record]:
    """Keep the records matching *query*, preserving their order.

    An empty or missing query keeps every record.
    """
    if not query:
        return records
    return [record for record in records if matches_query(record, query)]


class GalleryService:
    """Read side of the metadata store: listing, search and URL lookup."""

    def __init__(self, context: GalleryContext):
        self.context = context

    def iter_records(self):
        """Yield every decodable record in store order.

        Documents that are not valid JSON or not valid records are logged and
        skipped so one bad entry cannot take the whole gallery down.
        """
        store = self.context.metadata_store
        for key in store.list_keys():
            raw = store.get(key)
            if not raw:
                continue
            try:
                yield loads_record(raw)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable metadata record {key}: {e}")

    async def list_all(self) -> list[Record]:
        """Return every record in gallery display order."""
        return sort_records(list(self.iter_records()))

    async def search(self, query: str | None = None) -> list[Record]:
        """Return the gallery records matching *query*.

        Args:
            query: Free-text query.  ``None`` or ``""`` returns the full
                gallery.

        Returns:
            Matching records in gallery display order.
        """
        return filter_records(await self.list_all(), query)

    async def find_by_public_url(self, public_url: str) -> Record | None:
        """Return the first record whose ``publicUrl`` equals *public_url*.

        This is a linear scan in store order.  Public URLs are not enforced to
        be unique; on duplicates the first key wins.
        """
        for record in self.iter_records():
            if record.public_url == public_url:
                return record
        return None
