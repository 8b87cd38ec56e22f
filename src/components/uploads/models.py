"""
Uploads component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

# --- Policy ---


@dataclass(frozen=True)
class UploadPolicy:
    """Allowed MIME types and size ceiling enforced before any I/O."""

    name: str
    allowed_mime_types: frozenset[str]
    max_upload_bytes: int

    def describe_limit(self) -> str:
        return f"{self.max_upload_bytes // (1024 * 1024)}MB"


@dataclass(frozen=True)
class UploadEndpoint:
    """An upload route: which form field it reads, where files land, which policy applies."""

    name: str
    field: str
    folder: str
    policy: UploadPolicy


# --- Validation Error ---


@dataclass(frozen=True)
class UploadRejection:
    """Why an upload was refused."""

    code: str
    message: str
    field: str = "file"


# --- Input Models ---


@dataclass(frozen=True)
class UploadRequest:
    """A single file submitted for storage. Exists only for one upload call."""

    data: bytes | BinaryIO | None
    filename: str
    content_type: str
    size_bytes: int
    folder: str

    @property
    def is_empty(self) -> bool:
        return self.data is None or (not self.filename and self.size_bytes == 0)


# --- Output Models ---


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of one upload call.

    Exactly one of ``public_url`` (success) or ``error`` (failure) is set.
    """

    success: bool
    public_url: str | None = None
    storage_id: str | None = None
    resource_type: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success and (self.public_url is None or self.error is not None):
            raise ValueError("A successful upload carries a public_url and no error")
        if not self.success and (self.error is None or self.public_url is not None):
            raise ValueError("A failed upload carries an error and no public_url")

    @classmethod
    def stored(
        cls, public_url: str, storage_id: str | None, resource_type: str | None = None
    ) -> UploadResult:
        return cls(
            success=True,
            public_url=public_url,
            storage_id=storage_id,
            resource_type=resource_type,
        )

    @classmethod
    def failed(cls, error: str) -> UploadResult:
        return cls(success=False, error=error)
