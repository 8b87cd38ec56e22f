"""
Uploads component port definitions.

The storage contract is shared with the adapters and lives in ``src.core.ports``.
"""

from __future__ import annotations

from src.core.ports.storage import MediaStoragePort, StorageError, StoredMedia

__all__ = ["MediaStoragePort", "StorageError", "StoredMedia"]
