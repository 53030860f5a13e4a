"""
Catalog Manager - Upload Route Handler
========================================

What:  POST /api/upload, accepting one image in the multipart field `image`.
How:   Reads at most ceiling + 1 bytes (enough to detect an oversize file
       without buffering it whole), then delegates to UploadService.

    200 {"filePath": "/uploads/<name>"}   usable directly as an entry's imageRef
    400 {"error": ...}                    no file, wrong MIME type, or too large
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from catalog.exceptions import UploadRejectedError
from catalog.schemas.entry import ErrorResponse, UploadResponse
from catalog.services.upload_service import UploadService, get_upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Uploads"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "No file, unsupported type, or file too large", "model": ErrorResponse},
        500: {"description": "File could not be written", "model": ErrorResponse},
    },
    summary="Upload an entry image (JPEG or PNG, max 5MB)",
)
async def upload_image(
    image: Optional[UploadFile] = File(default=None, description="JPEG or PNG image"),
    uploads: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    if image is None or not image.filename:
        raise UploadRejectedError(message="No file uploaded")

    try:
        # Reject on the declared type before reading any bytes
        uploads.validate_mime_type(image.content_type)
        content = await image.read(uploads.max_size + 1)

        logger.info(
            "Received upload: filename=%s, type=%s, size=%d bytes",
            image.filename,
            image.content_type,
            len(content),
        )

        file_path = await uploads.validate_and_store(
            original_filename=image.filename,
            content_type=image.content_type,
            content=content,
        )
    finally:
        await image.close()

    return UploadResponse(file_path=file_path)
