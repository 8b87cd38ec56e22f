# Clinic site API - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.storage import (
    InvalidStorageKeyError,
    MediaStoragePort,
    StorageDeleteError,
    StorageError,
    StoredMedia,
    StorageWriteError,
)

__all__ = [
    "InvalidStorageKeyError",
    "MediaStoragePort",
    "StorageDeleteError",
    "StorageError",
    "StoredMedia",
    "StorageWriteError",
]
