"""
Admin media upload routes.

POST /api/{section}/upload stores one file for a configured section.
DELETE /api/uploads removes a stored object by its storage id.
"""

import logging

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from src.api.deps import Context, CurrentIdentity
from src.api.schemas import DeleteUploadRequest, DeleteUploadResponse, UploadResponse
from src.components.uploads import (
    UploadRequest,
    run_remove,
    run_store,
    validate_upload,
)
from src.domain.errors import InvalidRequest, NotFound, UpstreamFailure, ValidationRejected

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{section}/upload", response_model=UploadResponse)
async def upload_media(
    section: str,
    request: Request,
    identity: CurrentIdentity,
    ctx: Context,
) -> UploadResponse:
    endpoint = ctx.config.upload_endpoints.get(section)
    if endpoint is None:
        raise NotFound("Upload endpoint not found")

    form = await request.form()
    try:
        part = form.get(endpoint.field)
        upload: UploadRequest | None = None
        if isinstance(part, UploadFile):
            upload = UploadRequest(
                data=part.file,
                filename=part.filename or "",
                content_type=part.content_type or "",
                size_bytes=part.size or 0,
                folder=endpoint.folder,
            )

        rejection = validate_upload(upload, endpoint.policy)
        if rejection is not None:
            raise ValidationRejected(rejection.message, code=rejection.code)
        assert upload is not None

        result = await run_in_threadpool(run_store, upload, storage=ctx.media_storage)
    finally:
        await form.close()

    if not result.success or result.public_url is None:
        raise UpstreamFailure(result.error or "Upload failed")

    logger.info("%s uploaded %s to %s", identity.email, result.storage_id, section)
    return UploadResponse(
        message="File uploaded successfully",
        image_url=result.public_url,
        public_id=result.storage_id,
        resource_type=result.resource_type,
    )


@router.delete("/uploads")
async def delete_media(
    body: DeleteUploadRequest,
    identity: CurrentIdentity,
    ctx: Context,
) -> DeleteUploadResponse:
    if not body.public_id:
        raise InvalidRequest("publicId is required")

    deleted = await run_in_threadpool(
        run_remove,
        body.public_id,
        storage=ctx.media_storage,
        resource_type=body.resource_type,
    )
    if deleted:
        logger.info("%s deleted %s", identity.email, body.public_id)
    return DeleteUploadResponse(
        message="File deleted successfully" if deleted else "File not found",
        deleted=deleted,
    )
