"""
Uploads component - policy validation and storage of admin media uploads.

Provides the fail-fast upload policy gate and the pipeline that hands a
validated file to the configured storage backend.

Invariants:
- Validation happens before any storage I/O.
- The declared content type is trusted; file contents are not sniffed.
- No upload partially succeeds: the result carries a public URL or an error.
- Removal never raises; an absent object is reported as not deleted.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from .models import UploadPolicy, UploadRejection, UploadRequest, UploadResult
from .ports import MediaStoragePort, StorageError

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Upload failed"


# --- Helper Functions ---


def read_all(data: bytes | BinaryIO) -> bytes:
    """Materialise upload data into memory."""
    if isinstance(data, bytes):
        return data
    if hasattr(data, "seek"):
        data.seek(0)
    return data.read()


# --- Validation ---


def validate_upload(request: UploadRequest | None, policy: UploadPolicy) -> UploadRejection | None:
    """
    Check an upload against an endpoint policy.

    Checks run in a fixed order and the first failure wins:
    missing file, then content type, then declared size.

    Returns:
        None if the upload is acceptable, otherwise the rejection.
    """
    if request is None or request.is_empty:
        return UploadRejection(code="no_file", message="No file uploaded")

    if request.content_type not in policy.allowed_mime_types:
        return UploadRejection(
            code="unsupported_type",
            message=(
                f"Invalid file type '{request.content_type}'. "
                f"Allowed types: {', '.join(sorted(policy.allowed_mime_types))}"
            ),
            field="content_type",
        )

    if request.size_bytes > policy.max_upload_bytes:
        return UploadRejection(
            code="size_exceeds_limit",
            message=f"File size exceeds {policy.describe_limit()} limit",
        )

    return None


# --- Component Entry Points ---


def run_store(request: UploadRequest, *, storage: MediaStoragePort) -> UploadResult:
    """
    Store a validated upload under its destination folder.

    Backend failures are logged with their detail and reported to the caller
    as a generic failure.
    """
    try:
        data = read_all(request.data) if request.data is not None else b""
        stored = storage.put_media(
            data,
            filename=request.filename,
            content_type=request.content_type,
            folder=request.folder,
        )
    except (StorageError, OSError) as e:
        logger.error(
            "Upload of %r to folder %r failed: %s", request.filename, request.folder, e
        )
        return UploadResult.failed(UPLOAD_FAILED_MESSAGE)

    logger.info(
        "Stored upload %s (%d bytes, %s)", stored.storage_id, stored.size_bytes, stored.content_type
    )
    return UploadResult.stored(
        stored.public_url, stored.storage_id, resource_type=stored.resource_type
    )


def run_remove(
    storage_id: str,
    *,
    storage: MediaStoragePort,
    resource_type: str | None = None,
) -> bool:
    """Best-effort delete. Returns True only if an object was actually removed."""
    if not storage_id:
        return False
    try:
        deleted = storage.delete(storage_id, resource_type=resource_type)
    except StorageError as e:
        logger.error("Delete of %r failed: %s", storage_id, e)
        return False

    if not deleted:
        logger.info("Delete of %r: object not found", storage_id)
    return deleted
