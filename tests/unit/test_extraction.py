"""Tests for roomgallery.core.extraction — room/category heuristic.

Tests cover:
- First-match-wins room detection over the keyword list order.
- Explicit ``categories:`` list parsing.
- Fallback categories from the description.
- Path segments overriding the room found in the text.
"""

from __future__ import annotations

from roomgallery.core.extraction import (
    ROOM_KEYWORDS,
    categories_from_text,
    extract_tags,
    fallback_categories,
    room_from_key,
    room_from_text,
)


class TestRoomFromText:
    """Test text-based room detection."""

    def test_detects_keyword_case_insensitively(self):
        assert room_from_text("A BRIGHT Kitchen with tiles") == "kitchen"

    def test_first_keyword_in_list_order_wins(self):
        """'living room' precedes 'kitchen' in the list, whatever the text order."""
        text = "a kitchen that opens onto the living room"
        assert room_from_text(text) == "living room"

    def test_substring_match(self):
        """Keywords match inside longer words (e.g. 'bedrooms')."""
        assert room_from_text("two bedrooms upstairs") == "bedroom"

    def test_no_keyword_returns_none(self):
        assert room_from_text("a cat sitting on a sofa") is None


class TestRoomFromKey:
    """Test path-based room detection."""

    def test_underscore_variant_matches(self):
        assert room_from_key("photos/Living_Room/IMG_1.jpg") == "living room"

    def test_space_variant_matches(self):
        assert room_from_key("dining room/IMG_1.jpg") == "dining room"

    def test_file_name_is_not_a_room_segment(self):
        """Only whole segments count; 'kitchen.jpg' is not 'kitchen'."""
        assert room_from_key("uploads/kitchen.jpg") is None

    def test_no_segment_matches(self):
        assert room_from_key("IMG_0001.jpg") is None


class TestCategories:
    """Test explicit and fallback category extraction."""

    def test_categories_with_colon(self):
        text = "A kitchen. Categories: stove, sink, table"
        assert categories_from_text(text) == ["stove", "sink", "table"]

    def test_categories_with_dash(self):
        assert categories_from_text("categories - chair, desk") == ["chair", "desk"]

    def test_categories_drops_empty_entries(self):
        assert categories_from_text("categories: lamp, , bed,") == ["lamp", "bed"]

    def test_categories_stop_at_punctuation(self):
        """The list ends at the first character outside [a-z0-9 whitespace ,]."""
        assert categories_from_text("Categories: oven, fridge. Nice room") == ["oven", "fridge"]

    def test_no_categories_returns_empty(self):
        assert categories_from_text("a nice photo of a garden") == []

    def test_fallback_skips_short_and_stop_words(self):
        description = "The room has a wooden table near the window"
        assert fallback_categories(description) == ["room", "wooden", "table", "near", "window"]

    def test_fallback_skips_word_before_punctuation_token(self):
        """A word followed by a token starting with ',' or '.' is skipped."""
        description = "wooden chairs , modern lamp . bright window"
        assert fallback_categories(description) == ["wooden", "modern", "bright", "window"]

    def test_fallback_takes_first_five_then_deduplicates(self):
        description = "table table chair chair sofa lamp window"
        assert fallback_categories(description) == ["table", "chair", "sofa"]

    def test_fallback_empty_description(self):
        assert fallback_categories("") == []


class TestExtractTags:
    """Test the combined heuristic."""

    def test_text_room_and_explicit_categories(self):
        tags = extract_tags("This is a bathroom. Categories: sink, mirror, towel", "IMG_1.jpg")
        assert tags.room == "bathroom"
        assert tags.categories == ["sink", "mirror", "towel"]

    def test_path_room_overrides_text_room(self):
        tags = extract_tags("A cosy bedroom with a lamp", "house/kitchen/IMG_1.jpg")
        assert tags.room == "kitchen"

    def test_default_room_is_uncategorized(self):
        tags = extract_tags("A dog running", "IMG_1.jpg")
        assert tags.room == "Uncategorized"

    def test_unknown_is_a_room_keyword(self):
        tags = extract_tags("The room is unknown.", "IMG_1.jpg")
        assert tags.room == "unknown"

    def test_fallback_used_when_no_explicit_list(self):
        tags = extract_tags("Large wooden table beside windows", "IMG_1.jpg")
        assert tags.categories == ["Large", "wooden", "table", "beside", "windows"]

    def test_room_always_from_keyword_set_or_default(self):
        for description in ["office desk", "nothing here", "patio chairs", "a garage door"]:
            room = extract_tags(description, "IMG_1.jpg").room
            assert room in ROOM_KEYWORDS or room == "Uncategorized"
