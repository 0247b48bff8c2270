"""Blob storage for photo and generated image bytes.

The blob store is addressed by key and supports three operations: put bytes
with a content type, get bytes back, and list every key with its upload time.
Components only depend on :class:`BlobStore`; the shipped implementation,
:class:`LocalBlobStore`, keeps blobs as files under a directory so the FastAPI
app can serve them publicly as static files.

Layout on disk::

    <root>/
        .content-types.json      # key -> content type
        kitchen/IMG_0001.jpg
        generated/IMG_0001-1700000000000.png
"""

from __future__ import annotations

import json
import logging
import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from roomgallery.core.errors import BlobStoreError

logger = logging.getLogger(__name__)

CONTENT_TYPE_INDEX = ".content-types.json"


@dataclass(frozen=True)
class BlobInfo:
    """A listed blob: its key and when it was uploaded."""

    key: str
    uploaded: datetime


@dataclass(frozen=True)
class StoredBlob:
    """Blob bytes together with their content type."""

    key: str
    data: bytes
    content_type: str


class BlobStore(ABC):
    """Key-addressed byte storage."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store *data* under *key*, replacing any existing blob."""

    @abstractmethod
    def get(self, key: str) -> StoredBlob | None:
        """Return the blob stored under *key*, or ``None`` if there is none."""

    @abstractmethod
    def list(self) -> list[BlobInfo]:
        """Return every stored blob, ordered by key."""


class LocalBlobStore(BlobStore):
    """Blob store backed by a directory on the local file system.

    Keys map to relative POSIX paths under ``root``.  Content types are kept
    in a small JSON index next to the blobs; blobs written by hand (copied into
    the directory) fall back to a guess from the file extension.
    """

    def __init__(self, root: Path):
        """Initialize the store.

        Args:
            root: Directory holding the blobs.  Created if missing.
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._index_path = self.root / CONTENT_TYPE_INDEX
        logger.info(f"Initialized local blob store at {self.root}")

    def _path_for(self, key: str) -> Path:
        """Resolve *key* to a file path, rejecting keys that escape the root."""
        relative = PurePosixPath(key)
        if not key or relative.is_absolute() or ".." in relative.parts or key.endswith("/"):
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        if str(relative) == CONTENT_TYPE_INDEX:
            raise BlobStoreError(f"Reserved blob key: {key!r}")
        return self.root.joinpath(*relative.parts)

    def _load_index(self) -> dict[str, str]:
        if not self._index_path.exists():
            return {}
        try:
            with open(self._index_path, encoding="utf-8") as handle:
                index = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable content type index {self._index_path}: {e}")
            return {}
        return index if isinstance(index, dict) else {}

    def _save_index(self, index: dict[str, str]) -> None:
        with open(self._index_path, "w", encoding="utf-8") as handle:
            json.dump(index, handle, indent=2, sort_keys=True)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            index = self._load_index()
            index[key] = content_type
            self._save_index(index)
        except OSError as e:
            raise BlobStoreError(f"Could not write blob {key}: {e}") from e
        logger.debug(f"Stored blob {key} ({len(data)} bytes, {content_type})")

    def get(self, key: str) -> StoredBlob | None:
        path = self._path_for(key)
        if not path.is_file():
            return None
        try:
            data = path.read_bytes()
        except OSError as e:
            raise BlobStoreError(f"Could not read blob {key}: {e}") from e

        content_type = self._load_index().get(key)
        if not content_type:
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return StoredBlob(key=key, data=data, content_type=content_type)

    def list(self) -> list[BlobInfo]:
        try:
            blobs = [
                BlobInfo(
                    key=path.relative_to(self.root).as_posix(),
                    uploaded=datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc),
                )
                for path in self.root.rglob("*")
                if path.is_file() and path != self._index_path
            ]
        except OSError as e:
            raise BlobStoreError(f"Could not list blobs under {self.root}: {e}") from e
        return sorted(blobs, key=lambda blob: blob.key)
