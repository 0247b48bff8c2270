"""Configuration management for Room Gallery.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the ROOMGALLERY_ prefix,
allowing deployments to bind stores and upstream services without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (ROOMGALLERY_* prefix)
2. .env file in the project root
3. Default values defined in RoomGalleryConfig

Example .env file:
    ROOMGALLERY_PUBLIC_URL_PREFIX=https://photos.example.com/blobs
    ROOMGALLERY_BLOB_DIR=/srv/roomgallery/blobs
    ROOMGALLERY_VISION_API_URL=https://api.cloudflare.com/client/v4/accounts/<id>/ai/run/@cf/llava-hf/llava-1.5-7b-hf
    ROOMGALLERY_VISION_API_TOKEN=...
    ROOMGALLERY_OPENAI_API_KEY=sk-...

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Components never read it directly: the application builds a
:class:`~roomgallery.core.context.GalleryContext` from it at startup and hands
that context to every component.

Required Settings
-----------------
The public URL prefix, the image-generation credentials and the vision
endpoint are deployment configuration.  Their absence is not handled at
runtime beyond a startup warning; upstream calls simply fail and surface
their own error.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoomGalleryConfig(BaseSettings):
    """Main configuration for Room Gallery.

    Attributes
    ----------
    Storage:
        public_url_prefix : str
            Base URL under which blobs are publicly reachable.  A record's
            ``publicUrl`` is ``public_url_prefix + "/" + key``.
        blob_dir : Path
            Directory backing the local blob store.
        metadata_db : Path
            SQLite file backing the metadata store.

    Vision Inference:
        vision_api_url : str | None
            Full ``ai/run`` URL of the vision model.
        vision_api_token : str | None
            Bearer token for the vision endpoint.
        vision_timeout : float
            Per-request timeout in seconds.

    Image Generation:
        openai_api_key : str | None
            Bearer token for the image generation API.
        openai_api_url : str
            Image generation endpoint.
        image_model : str
            Model name sent with every generation request.
        image_size : str
            Requested resolution of the single generated image.
        image_timeout : float
            Per-request timeout in seconds.

    Server:
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Bind port for uvicorn (1024-65535).
        log_level : str
            Root logging level used by ``main()``.

    Examples
    --------
        >>> custom_config = RoomGalleryConfig(
        ...     public_url_prefix="https://cdn.example.com",
        ...     blob_dir="/tmp/blobs",
        ...     metadata_db="/tmp/metadata.db",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ROOMGALLERY_",
        case_sensitive=False,
    )

    # Storage
    public_url_prefix: str = Field(
        default="http://localhost:8787/blobs",
        description="Public URL prefix of the blob store (no trailing slash)",
    )
    blob_dir: Path = Field(
        default=Path("data/blobs"),
        description="Directory backing the local blob store",
    )
    metadata_db: Path = Field(
        default=Path("data/metadata.db"),
        description="SQLite database backing the metadata store",
    )

    # Vision inference
    vision_api_url: str | None = Field(
        default=None,
        description="Workers AI run URL for the vision model",
    )
    vision_api_token: str | None = Field(
        default=None,
        description="API token for the vision model endpoint",
    )
    vision_timeout: float = Field(default=120.0, gt=0)

    # Image generation
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the image generation service",
    )
    openai_api_url: str = Field(
        default="https://api.openai.com/v1/images/generations",
        description="Image generation endpoint",
    )
    image_model: str = Field(default="dall-e-3")
    image_size: str = Field(default="1024x1024")
    image_timeout: float = Field(default=120.0, gt=0)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8787,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(default="INFO")

    @field_validator("public_url_prefix")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def __init__(self, **kwargs):
        """Initialize configuration and create the storage directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.blob_dir.mkdir(parents=True, exist_ok=True)
        self.metadata_db.parent.mkdir(parents=True, exist_ok=True)


# Global configuration instance, loaded from ROOMGALLERY_* variables and .env.
config = RoomGalleryConfig()
