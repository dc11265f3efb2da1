"""
Image upload endpoints (ImageKit).
"""
import asyncio
import logging
import time

from fastapi import APIRouter, Depends

from poolrent.core.auth import get_current_user_id
from poolrent.core.exceptions import UploadFailedException
from poolrent.schemas.upload import (
    MultipleUploadRequest,
    SingleUploadRequest,
    UploadManyResponse,
    UploadResponse,
)
from poolrent.services.storage import ImageUploader, UploadError, get_image_uploader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post(
    "/image",
    response_model=UploadResponse,
    summary="Upload a single image",
)
async def upload_image(
    body: SingleUploadRequest,
    current_user_id: str = Depends(get_current_user_id),
    uploader: ImageUploader = Depends(get_image_uploader),
):
    """Upload one base64 image or data URL and return its public URL."""
    try:
        url = await uploader.upload_async(
            body.file,
            file_name=f"img_{int(time.time() * 1000)}.jpg",
            folder=body.folder,
        )
    except UploadError as e:
        logger.error(f"Image upload failed for user {current_user_id}: {e}")
        raise UploadFailedException()

    return UploadResponse(url=url)


@router.post(
    "/images",
    response_model=UploadManyResponse,
    summary="Upload multiple images",
)
async def upload_images(
    body: MultipleUploadRequest,
    current_user_id: str = Depends(get_current_user_id),
    uploader: ImageUploader = Depends(get_image_uploader),
):
    """Upload several images concurrently; any failure fails the whole batch."""
    stamp = int(time.time() * 1000)

    # Threadpool uploads cannot be cancelled, so wait for all of them to
    # settle before answering.
    results = await asyncio.gather(
        *(
            uploader.upload_async(file, file_name=f"img_{stamp}_{index}.jpg", folder=body.folder)
            for index, file in enumerate(body.files)
        ),
        return_exceptions=True
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    for failure in failures:
        if not isinstance(failure, UploadError):
            raise failure
    if failures:
        logger.error(
            f"Multiple image upload failed for user {current_user_id}: "
            f"{len(failures)} of {len(results)} failed, first error: {failures[0]}"
        )
        raise UploadFailedException()

    return UploadManyResponse(urls=list(results))
