"""
Media storage port.

Protocol-based interface for the backends that durably hold uploaded media and
serve it by public URL. Implementations: local filesystem (development and
single-server deployments) and Cloudinary (production).

Invariants:
- put_media either returns a complete, retrievable reference or raises
  StorageError; nothing it leaves behind on failure is reachable by a
  returned identifier.
- delete never leaves the backend in a worse state when called twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredMedia:
    """Reference to a stored object.

    ``resource_type`` is set by backends that partition objects by kind.
    """

    public_url: str
    storage_id: str
    size_bytes: int
    content_type: str
    resource_type: str | None = None


class MediaStoragePort(Protocol):
    """Upload/delete contract for a storage backend."""

    def put_media(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str,
    ) -> StoredMedia:
        """
        Store bytes under ``folder`` and return their public reference.

        Raises:
            StorageError: On any network, provider or disk failure.
        """
        ...

    def delete(self, storage_id: str, *, resource_type: str | None = None) -> bool:
        """
        Delete an object by storage identifier.

        Returns:
            True if an object was removed, False if it did not exist.

        Raises:
            StorageError: If the backend could not be reached or refused.
        """
        ...


class StorageError(Exception):
    """Base class for storage errors."""


class StorageWriteError(StorageError):
    """Raised when bytes could not be written to the backend."""

    def __init__(self, backend: str, reason: str) -> None:
        self.backend = backend
        self.reason = reason
        super().__init__(f"{backend} write failed: {reason}")


class StorageDeleteError(StorageError):
    """Raised when the backend could not delete an object."""

    def __init__(self, backend: str, storage_id: str, reason: str) -> None:
        self.backend = backend
        self.storage_id = storage_id
        self.reason = reason
        super().__init__(f"{backend} delete of {storage_id} failed: {reason}")


class InvalidStorageKeyError(StorageError):
    """Raised when a storage key would escape the backend's root."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Invalid storage key: {key}")
