"""
Base interface shared by every storage backend.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class StorageError(Exception):
    """Base exception for storage errors."""
    pass


class Store(ABC):
    """
    Collection-oriented key/value store.

    A collection is a named JSON document (a list of records or a dict).
    Blobs are opaque byte payloads addressed by a slash-separated key.
    """

    name = 'store'

    def initialize(self) -> bool:
        """Prepare the backend. Returns False when it cannot be used."""
        return True

    @abstractmethod
    def load(self, collection: str) -> Optional[Any]:
        """Read a collection, or None if it does not exist."""

    @abstractmethod
    def save(self, collection: str, data: Any) -> None:
        """Replace a collection."""

    @abstractmethod
    def put_blob(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        """Store a binary payload."""

    @abstractmethod
    def get_blob(self, key: str) -> Optional[bytes]:
        """Read a binary payload, or None if it does not exist."""

    @abstractmethod
    def delete_blob(self, key: str) -> bool:
        """Delete a binary payload. Returns False if it did not exist."""

    def describe(self) -> Dict[str, Any]:
        """Describe the backend for status endpoints."""
        return {'type': self.name, 'status': 'Connected', 'location': None}
