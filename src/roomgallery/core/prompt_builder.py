"""Prompt templates for the vision model and the image generation service.

Two prompts are built here:

**Photo analysis prompt** (sent with every photo during ingestion)::

    Analyze this image. What specific room is depicted (...)? If no specific
    room is clear, state 'unknown'. Then, provide a concise description ...
    Also, consider the R2 key path: "<key>" for context.

The answer is parsed by :mod:`roomgallery.core.extraction`, so the prompt asks
for exactly what the heuristic looks for: a room keyword and a comma separated
list of three to five categories.

**Inpainting prompt** (sent to the image generation service)::

    Based on an image that can be described as "<description>". Generate a new
    image incorporating the following: "<instruction>". The new image should be
    cohesive and realistic.

The image generation service only accepts text, so the stored description of
the original photo stands in for the image itself.

Usage
-----
::

    prompt = build_analysis_prompt("kitchen/IMG_0001.jpg")
    combined = build_inpainting_prompt(
        "a bright kitchen with a marble island",
        "add a bowl of lemons on the island",
    )
"""

from __future__ import annotations

# Used when no stored description exists for the original image.
PLACEHOLDER_DESCRIPTION = "a photo"

_ANALYSIS_PROMPT = (
    "Analyze this image. What specific room is depicted (e.g., living room, kitchen, "
    "bedroom, bathroom, hallway, outdoor)? If no specific room is clear, state 'unknown'. "
    "Then, provide a concise description of the image content and list 3-5 main "
    "categories or objects present, separated by commas. "
    'Also, consider the R2 key path: "{key}" for context.'
)

_INPAINTING_PROMPT = (
    'Based on an image that can be described as "{description}". '
    'Generate a new image incorporating the following: "{instruction}". '
    "The new image should be cohesive and realistic."
)

_GENERATED_DESCRIPTION = 'Generated image based on prompt: "{prompt}". (Original: {original})'


def build_analysis_prompt(key: str) -> str:
    """Compile the vision prompt for the photo stored under *key*."""
    return _ANALYSIS_PROMPT.format(key=key)


def build_inpainting_prompt(description: str | None, instruction: str) -> str:
    """Combine an image description and an edit instruction into one prompt.

    Args:
        description: Stored description of the original image.  ``None`` or
            an empty string falls back to :data:`PLACEHOLDER_DESCRIPTION`.
        instruction: The caller's requested change.

    Returns:
        The prompt sent to the image generation service.
    """
    return _INPAINTING_PROMPT.format(
        description=description or PLACEHOLDER_DESCRIPTION,
        instruction=instruction,
    )


def describe_generated_image(prompt_used: str | None, original_key: str | None) -> str:
    """Description stored on a generated image's metadata record."""
    return _GENERATED_DESCRIPTION.format(prompt=prompt_used or "", original=original_key or "N/A")
