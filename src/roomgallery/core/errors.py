"""Exceptions raised by Room Gallery components.

Route handlers map these onto HTTP status codes: client input problems become
400 responses, everything else becomes a 500 carrying the message.
"""


class RoomGalleryError(Exception):
    """Base class for all Room Gallery errors."""

    pass


class InvalidImageDataError(RoomGalleryError):
    """Image payload is missing or is not a ``data:image/<ext>;base64,`` URI.

    The message is intended to be returned directly to the caller.
    """

    pass


class BlobStoreError(RoomGalleryError):
    """The blob store could not complete a put, get or list."""

    pass


class MetadataStoreError(RoomGalleryError):
    """The metadata store could not complete a put, get or list."""

    pass


class VisionInferenceError(RoomGalleryError):
    """The vision model call failed or returned an unusable response."""

    pass


class ImageGenerationError(RoomGalleryError):
    """The image generation service rejected a request or returned no image URL."""

    pass
