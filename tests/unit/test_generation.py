"""Tests for roomgallery.services.generation — variants and persistence.

Tests cover:
- Data URI decoding and rejection of malformed input.
- Generated key derivation.
- Prompt assembly from a stored description or the placeholder.
- Persisting a generated image to both stores.
"""

from __future__ import annotations

import asyncio
import re

import pytest

from roomgallery.core.errors import ImageGenerationError, InvalidImageDataError
from roomgallery.core.records import GeneratedPhoto, loads_record
from roomgallery.services.generation import (
    GenerationService,
    decode_data_uri,
    generated_key,
    safe_key_stem,
)


class TestDecodeDataUri:
    """Test data URI parsing."""

    def test_valid_png(self):
        image = decode_data_uri("data:image/png;base64,QUJD")
        assert image.mime_type == "image/png"
        assert image.extension == "png"
        assert image.data == b"ABC"

    @pytest.mark.parametrize("payload, expected", [("QUI", b"AB"), ("QQ", b"A"), ("QUI=", b"AB")])
    def test_unpadded_payload(self, payload, expected):
        assert decode_data_uri(f"data:image/png;base64,{payload}").data == expected

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        with pytest.raises(InvalidImageDataError, match="Missing image data"):
            decode_data_uri(value)

    @pytest.mark.parametrize(
        "value",
        [
            "QUJD",
            "data:text/plain;base64,QUJD",
            "data:image/png,QUJD",
            "data:image/png;base64,not base64!",
            "data:image/png;base64,QUJDQ",
        ],
    )
    def test_malformed(self, value):
        with pytest.raises(InvalidImageDataError, match="Invalid image data format"):
            decode_data_uri(value)


class TestGeneratedKey:
    """Test generated key derivation."""

    def test_safe_stem_replaces_unsafe_characters_and_drops_extension(self):
        assert safe_key_stem("photo 1.jpg") == "photo_1"

    def test_safe_stem_flattens_directories(self):
        assert safe_key_stem("kitchen/IMG 1.final.jpeg") == "kitchen_IMG_1.final"

    def test_safe_stem_default(self):
        assert safe_key_stem(None) == "image"
        assert safe_key_stem("") == "image"

    def test_generated_key_layout(self):
        assert generated_key("photo 1.jpg", "png", 1700000000123) == (
            "generated/photo_1-1700000000123.png"
        )

    def test_generated_key_uses_current_time(self):
        assert re.fullmatch(r"generated/image-\d{13,}\.webp", generated_key(None, "webp"))


class TestGenerate:
    """Test the inpainting flow against a mocked image service."""

    def test_uses_stored_description(self, gallery_context, seeded_metadata, image_client):
        url = asyncio.run(
            GenerationService(gallery_context).generate(
                "https://photos.test/kitchen/IMG_1.jpg", "add a bowl of lemons"
            )
        )
        assert url == "https://images.test/generated.png"
        prompt = image_client.generate.await_args.args[0]
        assert 'described as "A bright kitchen with a marble island"' in prompt
        assert '"add a bowl of lemons"' in prompt

    def test_unknown_url_uses_placeholder(self, gallery_context, image_client):
        asyncio.run(
            GenerationService(gallery_context).generate("https://photos.test/nope.jpg", "add a cat")
        )
        prompt = image_client.generate.await_args.args[0]
        assert 'described as "a photo"' in prompt

    def test_generation_error_propagates(self, gallery_context, image_client):
        image_client.generate.side_effect = ImageGenerationError("OpenAI API error: quota")
        with pytest.raises(ImageGenerationError, match="quota"):
            asyncio.run(
                GenerationService(gallery_context).generate("https://photos.test/a.jpg", "x")
            )


class TestPersistGenerated:
    """Test saving generated images."""

    def test_persists_blob_and_record(self, gallery_context, blob_store, metadata_store):
        saved = asyncio.run(
            GenerationService(gallery_context).persist_generated(
                "data:image/png;base64,QUJD", "photo 1.jpg", "add a lamp"
            )
        )
        assert re.fullmatch(r"generated/photo_1-\d+\.png", saved.key)
        assert saved.public_url == f"https://photos.test/{saved.key}"

        stored = blob_store.get(saved.key)
        assert stored.data == b"ABC"
        assert stored.content_type == "image/png"

        record = loads_record(metadata_store.get(saved.key))
        assert isinstance(record, GeneratedPhoto)
        assert record.type == "generated"
        assert record.room == "Generated"
        assert record.original_image_key == "photo 1.jpg"
        assert record.prompt_used == "add a lamp"
        assert record.analysis.description == (
            'Generated image based on prompt: "add a lamp". (Original: photo 1.jpg)'
        )
        assert record.last_modified is not None

    def test_without_original_key(self, gallery_context):
        saved = asyncio.run(
            GenerationService(gallery_context).persist_generated(
                "data:image/jpeg;base64,QUJD", None, "a sunset"
            )
        )
        assert saved.key.startswith("generated/image-")
        assert saved.key.endswith(".jpeg")

    def test_invalid_data_writes_nothing(self, gallery_context, blob_store, metadata_store):
        with pytest.raises(InvalidImageDataError):
            asyncio.run(
                GenerationService(gallery_context).persist_generated("garbage", "a.jpg", "x")
            )
        assert blob_store.list() == []
        assert metadata_store.list_keys() == []
