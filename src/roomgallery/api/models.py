"""Pydantic request and response models for the Room Gallery API.

Request fields use the camelCase names the frontend sends.  Fields whose
absence is a client error (``originalImageUrl``, ``inpaintingPrompt``,
``imageData``) are declared optional here and checked by the route handlers,
so a missing field produces the API's own 400 envelope instead of FastAPI's
422 validation response.

Models
------
InpaintingRequest
    Payload for ``POST /api/inpainting``.
SaveGeneratedImageRequest
    Payload for ``POST /api/save-generated-image``.
AnalyzeResponse, InpaintingResponse, SaveGeneratedImageResponse, ErrorResponse
    Response envelopes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from roomgallery.services.ingestion import IngestionOutcome


class InpaintingRequest(BaseModel):
    """Request body for the ``POST /api/inpainting`` endpoint.

    Attributes:
        original_image_url: Public URL of the photo to vary.
        inpainting_prompt: Description of the requested change.
    """

    model_config = ConfigDict(populate_by_name=True)

    original_image_url: str | None = Field(
        default=None,
        alias="originalImageUrl",
        description="Public URL of the original photo.",
    )
    inpainting_prompt: str | None = Field(
        default=None,
        alias="inpaintingPrompt",
        description="Change to apply to the original photo.",
    )


class SaveGeneratedImageRequest(BaseModel):
    """Request body for the ``POST /api/save-generated-image`` endpoint.

    Attributes:
        image_data: ``data:image/<ext>;base64,<payload>`` URI.
        original_image_key: Key of the photo the image was derived from.
        prompt_used: Prompt that produced the image.
    """

    model_config = ConfigDict(populate_by_name=True)

    image_data: str | None = Field(
        default=None,
        alias="imageData",
        description="Base64 data URI of the generated image.",
    )
    original_image_key: str | None = Field(
        default=None,
        alias="originalImageKey",
        description="Key of the original photo, if any.",
    )
    prompt_used: str | None = Field(
        default=None,
        alias="promptUsed",
        description="Prompt used to generate the image.",
    )


class AnalyzeResponse(BaseModel):
    """Response body for ``POST /api/analyze-photos``."""

    status: Literal["success"] = "success"
    message: str = "Photos analyzed"
    details: list[IngestionOutcome]


class InpaintingResponse(BaseModel):
    """Response body for ``POST /api/inpainting``."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")


class SaveGeneratedImageResponse(BaseModel):
    """Response body for ``POST /api/save-generated-image``."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    key: str
    public_url: str = Field(alias="publicUrl")


class ErrorResponse(BaseModel):
    """Error envelope returned with every 4xx/5xx response."""

    status: Literal["error"] = "error"
    message: str
