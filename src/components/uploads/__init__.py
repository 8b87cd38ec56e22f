"""
Uploads component - Validation and storage of admin media uploads.
"""

from .component import read_all, run_remove, run_store, validate_upload
from .models import (
    UploadEndpoint,
    UploadPolicy,
    UploadRejection,
    UploadRequest,
    UploadResult,
)
from .ports import MediaStoragePort, StorageError, StoredMedia

__all__ = [
    # Entry points
    "run_remove",
    "run_store",
    "validate_upload",
    # Helpers
    "read_all",
    # Models
    "UploadEndpoint",
    "UploadPolicy",
    "UploadRejection",
    "UploadRequest",
    "UploadResult",
    # Ports
    "MediaStoragePort",
    "StorageError",
    "StoredMedia",
]
