"""Room and category extraction from free-text vision model output.

The vision model answers in prose.  This module turns that prose, plus the
blob key the photo was stored under, into a single room label and a short
list of categories.

Rules
-----
1. **Room from text** – the first keyword of :data:`ROOM_KEYWORDS` (in list
   order) that occurs anywhere in the lower-cased description wins.  Order
   matters more than match quality: ``"a kitchen next to the living room"``
   is a living room.
2. **Categories from text** – the word ``categories`` followed by an optional
   ``:`` or ``-`` and a comma-separated list.
3. **Fallback categories** – when nothing was extracted, the first five
   "interesting" words of the description (longer than three characters, not
   a stop word, not directly followed by a token starting with ``.`` or
   ``,``), de-duplicated in order of first occurrence.
4. **Room from path** – a key segment equal to a room keyword (with spaces or
   underscores, e.g. ``photos/living_room/1.jpg``) overrides the room found in
   the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from roomgallery.core.records import DEFAULT_ROOM

ROOM_KEYWORDS: tuple[str, ...] = (
    "living room",
    "kitchen",
    "bedroom",
    "bathroom",
    "hallway",
    "dining room",
    "office",
    "garage",
    "basement",
    "attic",
    "garden",
    "patio",
    "balcony",
    "outdoor",
    "unknown",
    "exterior",
)

STOP_WORDS: frozenset[str] = frozenset(
    {"a", "an", "the", "is", "are", "in", "on", "at", "of", "and", "or"}
)

MAX_FALLBACK_CATEGORIES = 5

_CATEGORIES_PATTERN = re.compile(r"categories(?::|\s*-)?\s*([a-z0-9\s,]+)")


@dataclass
class ExtractedTags:
    """Room and categories inferred for one photo."""

    room: str = DEFAULT_ROOM
    categories: list[str] = field(default_factory=list)


def room_from_text(text: str) -> str | None:
    """Return the first room keyword contained in *text*, if any."""
    lowered = text.lower()
    for keyword in ROOM_KEYWORDS:
        if keyword in lowered:
            return keyword
    return None


def room_from_key(key: str) -> str | None:
    """Return the first room keyword that names a segment of *key*, if any."""
    segments = key.lower().split("/")
    for keyword in ROOM_KEYWORDS:
        if keyword.replace(" ", "_") in segments or keyword in segments:
            return keyword
    return None


def categories_from_text(text: str) -> list[str]:
    """Parse an explicit ``categories: a, b, c`` list out of *text*."""
    match = _CATEGORIES_PATTERN.search(text.lower())
    if not match:
        return []
    return [part.strip() for part in match.group(1).split(",") if part.strip()]


def fallback_categories(description: str) -> list[str]:
    """Pick up to five descriptive words from *description*.

    Words keep their original casing and punctuation.  The limit is applied
    before de-duplication, so repeated words can leave fewer than five.
    """
    tokens = description.split()
    picked: list[str] = []
    for index, token in enumerate(tokens):
        next_token = tokens[index + 1] if index + 1 < len(tokens) else ""
        if len(token) <= 3 or token.lower() in STOP_WORDS:
            continue
        if next_token.startswith((".", ",")):
            continue
        picked.append(token)
        if len(picked) == MAX_FALLBACK_CATEGORIES:
            break
    return list(dict.fromkeys(picked))


def extract_tags(description: str, key: str) -> ExtractedTags:
    """Infer the room and categories of a photo.

    Args:
        description: Free-text description returned by the vision model.
        key: Blob key of the photo; its path segments can name the room.

    Returns:
        :class:`ExtractedTags` with ``room`` defaulting to ``Uncategorized``.
    """
    tags = ExtractedTags()

    text_room = room_from_text(description)
    if text_room:
        tags.room = text_room

    tags.categories = categories_from_text(description)
    if not tags.categories and description:
        tags.categories = fallback_categories(description)

    # Path evidence beats whatever the model said.
    path_room = room_from_key(key)
    if path_room:
        tags.room = path_room

    return tags
