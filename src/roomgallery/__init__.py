"""Room Gallery - photo gallery backend with AI room tagging and generated variants."""

__version__ = "0.1.0"

from roomgallery.core.config import RoomGalleryConfig, config

__all__ = [
    "RoomGalleryConfig",
    "config",
]
