"""Vision inference client used to describe photos.

The ingestion run sends the raw image bytes and a text prompt to a hosted
vision-language model and gets free text back.  :class:`VisionClient` is the
interface components depend on; :class:`WorkersAIVisionClient` calls the
Cloudflare Workers AI REST API (``llava-1.5-7b-hf`` by default).

Workers AI expects the image as a list of byte values and answers with::

    {"success": true, "result": {"description": "..."}, "errors": []}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from roomgallery.core.errors import VisionInferenceError

logger = logging.getLogger(__name__)


@dataclass
class VisionResult:
    """Text returned by the vision model plus the untouched response payload."""

    description: str | None
    raw: dict[str, Any] = field(default_factory=dict)


class VisionClient(ABC):
    """Describe an image given its bytes and a prompt."""

    @abstractmethod
    async def describe(self, image: bytes, prompt: str) -> VisionResult:
        """Run the vision model.

        Raises:
            VisionInferenceError: If the model call fails.
        """


class WorkersAIVisionClient(VisionClient):
    """Vision client for the Workers AI ``ai/run`` REST endpoint."""

    def __init__(
        self,
        api_url: str | None,
        api_token: str | None,
        client: httpx.AsyncClient,
        max_tokens: int = 512,
    ):
        self.api_url = api_url
        self.api_token = api_token
        self.client = client
        self.max_tokens = max_tokens

    async def describe(self, image: bytes, prompt: str) -> VisionResult:
        if not self.api_url:
            raise VisionInferenceError("Vision API URL is not configured")

        headers = {}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        payload = {"image": list(image), "prompt": prompt, "max_tokens": self.max_tokens}

        try:
            response = await self.client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise VisionInferenceError(f"Vision API request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error or body.get("success") is False:
            errors = body.get("errors") or []
            message = errors[0].get("message") if errors and isinstance(errors[0], dict) else None
            raise VisionInferenceError(
                f"Vision API error ({response.status_code}): {message or response.text}"
            )

        result = body.get("result")
        if not isinstance(result, dict):
            raise VisionInferenceError("Vision API response did not contain a result")

        logger.debug(f"Vision model returned {len(result.get('description') or '')} characters")
        return VisionResult(description=result.get("description"), raw=result)
