"""Image generation client for producing edited variants.

:class:`OpenAIImageClient` calls the OpenAI ``images/generations`` endpoint and
asks for exactly one image, returned as a URL.  The model only sees text: the
"inpainting" flow describes the original image and the requested change in a
single prompt (see :mod:`roomgallery.core.prompt_builder`).
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

import httpx

from roomgallery.core.errors import ImageGenerationError

logger = logging.getLogger(__name__)


class ImageGenerationClient(ABC):
    """Turn a text prompt into the URL of a generated image."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate one image.

        Raises:
            ImageGenerationError: On any non-success response or a response
                without an image URL.
        """


class OpenAIImageClient(ImageGenerationClient):
    """Client for the OpenAI image generation endpoint."""

    def __init__(
        self,
        api_key: str | None,
        client: httpx.AsyncClient,
        api_url: str = "https://api.openai.com/v1/images/generations",
        model: str = "dall-e-3",
        size: str = "1024x1024",
    ):
        self.api_key = api_key
        self.client = client
        self.api_url = api_url
        self.model = model
        self.size = size

    def build_payload(self, prompt: str) -> dict:
        """Request body for a single URL-returning generation."""
        return {
            "model": self.model,
            "prompt": prompt,
            "n": 1,
            "size": self.size,
            "response_format": "url",
        }

    async def generate(self, prompt: str) -> str:
        headers = {"Authorization": f"Bearer {self.api_key or ''}"}

        try:
            response = await self.client.post(
                self.api_url, headers=headers, json=self.build_payload(prompt)
            )
        except httpx.HTTPError as e:
            raise ImageGenerationError(f"Image generation request failed: {e}") from e

        if response.is_error:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None
            logger.error(f"Image generation API error response: {error_data or response.text}")
            if isinstance(error_data, dict) and isinstance(error_data.get("error"), dict):
                detail = error_data["error"].get("message")
            elif error_data is not None:
                detail = json.dumps(error_data)
            else:
                detail = response.text
            raise ImageGenerationError(f"OpenAI API error: {detail}")

        try:
            data = response.json().get("data") or []
        except (ValueError, AttributeError):
            data = []

        if data and isinstance(data[0], dict) and data[0].get("url"):
            return data[0]["url"]
        raise ImageGenerationError("OpenAI response did not contain a valid image URL.")
