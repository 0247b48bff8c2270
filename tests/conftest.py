"""Shared pytest fixtures for Room Gallery tests."""

import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from roomgallery.api.main import create_app
from roomgallery.core.blob_store import LocalBlobStore
from roomgallery.core.config import RoomGalleryConfig
from roomgallery.core.context import GalleryContext
from roomgallery.core.metadata_store import SQLiteMetadataStore
from roomgallery.core.records import GeneratedPhoto, OriginalPhoto, PhotoAnalysis
from roomgallery.core.vision import VisionResult

PUBLIC_PREFIX = "https://photos.test"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> RoomGalleryConfig:
    """Create a test configuration with temporary storage paths.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        RoomGalleryConfig instance for testing
    """
    return RoomGalleryConfig(
        public_url_prefix=PUBLIC_PREFIX,
        blob_dir=str(temp_dir / "blobs"),
        metadata_db=str(temp_dir / "meta" / "metadata.db"),
        openai_api_key="sk-test",
        _env_file=None,
    )


@pytest.fixture
def blob_store(test_config: RoomGalleryConfig) -> LocalBlobStore:
    """Local blob store rooted in the temporary directory."""
    return LocalBlobStore(test_config.blob_dir)


@pytest.fixture
def metadata_store(test_config: RoomGalleryConfig) -> SQLiteMetadataStore:
    """SQLite metadata store in the temporary directory."""
    return SQLiteMetadataStore(test_config.metadata_db)


@pytest.fixture
def vision_client() -> AsyncMock:
    """Mocked vision client describing every photo as a kitchen."""
    client = AsyncMock()
    client.describe.return_value = VisionResult(
        description="A bright kitchen. Categories: stove, sink, table",
        raw={"description": "A bright kitchen. Categories: stove, sink, table"},
    )
    return client


@pytest.fixture
def image_client() -> AsyncMock:
    """Mocked image generation client returning a fixed URL."""
    client = AsyncMock()
    client.generate.return_value = "https://images.test/generated.png"
    return client


@pytest.fixture
def gallery_context(
    blob_store: LocalBlobStore,
    metadata_store: SQLiteMetadataStore,
    vision_client: AsyncMock,
    image_client: AsyncMock,
) -> GalleryContext:
    """Context wiring temporary stores to mocked upstream clients."""
    return GalleryContext(
        public_url_prefix=PUBLIC_PREFIX,
        blob_store=blob_store,
        metadata_store=metadata_store,
        vision=vision_client,
        image_generator=image_client,
    )


@pytest.fixture
def test_client(
    test_config: RoomGalleryConfig, gallery_context: GalleryContext
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient running the app against the test context."""
    app = create_app(cfg=test_config, context=gallery_context)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sample_records() -> list:
    """A small mixed gallery of original and generated records."""
    uploaded = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return [
        GeneratedPhoto(
            key="generated/IMG_1-1700000000000.png",
            public_url=f"{PUBLIC_PREFIX}/generated/IMG_1-1700000000000.png",
            original_image_key="kitchen/IMG_1.jpg",
            prompt_used="add a bowl of lemons",
            analysis=PhotoAnalysis(description='Generated image based on prompt: "add a bowl of lemons".'),
            last_modified=uploaded,
        ),
        OriginalPhoto(
            key="kitchen/IMG_1.jpg",
            public_url=f"{PUBLIC_PREFIX}/kitchen/IMG_1.jpg",
            analysis=PhotoAnalysis(description="A bright kitchen with a marble island"),
            room="kitchen",
            categories=["stove", "sink", "island"],
            last_modified=uploaded,
        ),
        OriginalPhoto(
            key="IMG_2.jpg",
            public_url=f"{PUBLIC_PREFIX}/IMG_2.jpg",
            analysis=PhotoAnalysis(description="A cosy bedroom with a reading lamp"),
            room="bedroom",
            categories=["bed", "lamp"],
            last_modified=uploaded,
        ),
        OriginalPhoto(
            key="IMG_3.jpg",
            public_url=f"{PUBLIC_PREFIX}/IMG_3.jpg",
            analysis=PhotoAnalysis(description="AI analysis failed.", error="timeout"),
            last_modified=uploaded,
        ),
    ]


@pytest.fixture
def seeded_metadata(metadata_store: SQLiteMetadataStore, sample_records: list) -> list:
    """Write the sample records into the metadata store."""
    for record in sample_records:
        metadata_store.put(record.key, record.to_json())
    return sample_records
