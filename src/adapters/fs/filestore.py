import logging
import os
import re
import secrets
import tempfile
import time
from pathlib import Path

from src.core.ports.storage import (
    InvalidStorageKeyError,
    StoredMedia,
    StorageDeleteError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
}

# Filename suffixes accepted as spellings of an allowed type's extension
_SUFFIX_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}

FALLBACK_EXTENSION = ".bin"


def pick_extension(filename: str, content_type: str) -> str:
    """
    Extension for a stored file, derived from its declared content type.

    The client's suffix is kept only when it names the same type, so the file
    is served back as the type that passed validation.
    """
    canonical = _EXTENSIONS.get(content_type)
    if canonical is None:
        return FALLBACK_EXTENSION
    suffix = Path(filename).suffix.lower()
    if _SUFFIX_TYPES.get(suffix) == _SUFFIX_TYPES[canonical]:
        return suffix
    return canonical


class LocalMediaStore:
    """Stores uploads under a base directory and serves them from ``public_prefix``."""

    backend = "local"

    def __init__(self, base_path: str | Path, public_prefix: str = "/uploads"):
        self.base_path = Path(base_path).resolve()
        self.public_prefix = public_prefix.rstrip("/")
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / path).resolve()
        if target != self.base_path and self.base_path not in target.parents:
            raise InvalidStorageKeyError(path)
        return target

    def _new_name(self, folder: str, filename: str, content_type: str) -> str:
        stamp = int(time.time() * 1000)
        return f"{folder}-{stamp}-{secrets.randbelow(10**9)}{pick_extension(filename, content_type)}"

    def put_media(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str,
    ) -> StoredMedia:
        if not _FOLDER_PATTERN.match(folder):
            raise InvalidStorageKeyError(folder)

        key = f"{folder}/{self._new_name(folder, filename, content_type)}"
        target = self._safe_path(key)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, suffix=".part")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(self.backend, str(e)) from e

        logger.debug("Wrote %s (%d bytes)", key, len(data))
        return StoredMedia(
            public_url=f"{self.public_prefix}/{key}",
            storage_id=key,
            size_bytes=len(data),
            content_type=content_type,
        )

    def get(self, storage_id: str) -> bytes:
        """Retrieve bytes by key. Raises FileNotFoundError."""
        target = self._safe_path(storage_id)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {storage_id}")
        return target.read_bytes()

    def delete(self, storage_id: str, *, resource_type: str | None = None) -> bool:
        target = self._safe_path(storage_id)
        if not target.is_file():
            return False
        try:
            os.remove(target)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageDeleteError(self.backend, storage_id, str(e)) from e
        return True
