"""Key-value storage for photo metadata documents.

Each photo key maps to one JSON string.  Components only depend on
:class:`MetadataStore`; :class:`SQLiteMetadataStore` is the shipped
implementation.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from roomgallery.core.errors import MetadataStoreError

logger = logging.getLogger(__name__)


class MetadataStore(ABC):
    """Key-value store holding one JSON document per photo key."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None``."""

    @abstractmethod
    def list_keys(self) -> list[str]:
        """Return every stored key."""


class SQLiteMetadataStore(MetadataStore):
    """Metadata store backed by a single SQLite table.

    Writes replace the whole document; there is no partial update.  Keys are
    listed in ascending order, matching the lexicographic listing of typical
    hosted key-value stores.
    """

    def __init__(self, db_path: Path):
        """Initialize the metadata database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized metadata store at {self.db_path}")

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS photo_metadata (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                    """)
                conn.commit()
        except sqlite3.Error as e:
            raise MetadataStoreError(f"Could not initialize {self.db_path}: {e}") from e

    def put(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO photo_metadata (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    (key, value, datetime.now().isoformat()),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error writing metadata for {key}: {e}")
            raise MetadataStoreError(f"Could not write metadata for {key}: {e}") from e

    def get(self, key: str) -> str | None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM photo_metadata WHERE key = ? LIMIT 1",
                    (key,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error reading metadata for {key}: {e}")
            raise MetadataStoreError(f"Could not read metadata for {key}: {e}") from e
        return row[0] if row else None

    def list_keys(self) -> list[str]:
        try:
            with sqlite3.connect(self.db_path) as conn:
                rows = conn.execute("SELECT key FROM photo_metadata ORDER BY key").fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error listing metadata keys: {e}")
            raise MetadataStoreError(f"Could not list metadata keys: {e}") from e
        return [row[0] for row in rows]
