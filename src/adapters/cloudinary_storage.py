"""
Cloudinary media storage adapter.

Talks to the Cloudinary REST upload API with signed requests. Upload and
destroy are single synchronous calls; there are no retries.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any

import httpx

from src.app_shell.config import CloudinaryConfig
from src.core.ports.storage import StoredMedia, StorageDeleteError, StorageWriteError

logger = logging.getLogger(__name__)


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Cloudinary request signature.

    Parameters are sorted by name, joined as ``k=v`` with ``&``, suffixed with
    the API secret and hashed with SHA-1.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryMediaStore:
    backend = "cloudinary"

    def __init__(
        self,
        config: CloudinaryConfig,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout_seconds)

    def _url(self, resource_type: str, action: str) -> str:
        base = self.config.api_base_url.rstrip("/")
        return f"{base}/{self.config.cloud_name}/{resource_type}/{action}"

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        signed = dict(params)
        signed["signature"] = sign_params(params, self.config.api_secret)
        signed["api_key"] = self.config.api_key
        return signed

    def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        response = self._client.post(url, **kwargs)
        response.raise_for_status()
        body: dict[str, Any] = response.json()
        return body

    def put_media(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str,
    ) -> StoredMedia:
        params = self._signed(
            {"folder": folder, "transformation": self.config.transformation}
        )
        url = self._url(self.config.resource_type, "upload")

        try:
            body = self._post(
                url,
                data=params,
                files={"file": (filename or "upload", data, content_type)},
            )
        except httpx.HTTPStatusError as e:
            raise StorageWriteError(
                self.backend, f"HTTP {e.response.status_code}: {_provider_message(e.response)}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise StorageWriteError(self.backend, str(e)) from e

        secure_url = body.get("secure_url")
        public_id = body.get("public_id")
        if not secure_url or not public_id:
            raise StorageWriteError(self.backend, "response missing secure_url or public_id")

        logger.debug("Uploaded %s to Cloudinary folder %s", public_id, folder)
        return StoredMedia(
            public_url=secure_url,
            storage_id=public_id,
            size_bytes=int(body.get("bytes", len(data))),
            content_type=content_type,
            resource_type=body.get("resource_type"),
        )

    def delete(self, storage_id: str, *, resource_type: str | None = None) -> bool:
        params = self._signed({"public_id": storage_id})
        url = self._url(resource_type or "image", "destroy")

        try:
            body = self._post(url, data=params)
        except httpx.HTTPStatusError as e:
            raise StorageDeleteError(
                self.backend,
                storage_id,
                f"HTTP {e.response.status_code}: {_provider_message(e.response)}",
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise StorageDeleteError(self.backend, storage_id, str(e)) from e

        result = body.get("result")
        if result == "ok":
            return True
        if result == "not found":
            return False
        raise StorageDeleteError(self.backend, storage_id, f"unexpected result {result!r}")

    def close(self) -> None:
        self._client.close()


def _provider_message(response: httpx.Response) -> str:
    try:
        return str(response.json().get("error", {}).get("message", response.text))
    except ValueError:
        return response.text
