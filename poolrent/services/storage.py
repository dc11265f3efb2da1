"""
Image storage via the ImageKit upload API.

Uploads take a base64 string or data URL and return the public file URL.
"""
import logging
from typing import Optional

import requests
from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from poolrent.config import Settings, get_settings

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """Raised when the storage provider rejects or fails an upload."""


class ImageUploader:
    """Thin client for ImageKit's server-side upload endpoint."""

    def __init__(self, private_key: str, upload_url: str, timeout: float = 20.0):
        self.private_key = private_key
        self.upload_url = upload_url
        self.timeout = timeout

    def upload(self, file: str, file_name: str, folder: Optional[str] = None) -> str:
        if not self.private_key:
            raise UploadError("ImageKit is not configured")

        fields = {
            "file": (None, file),
            "fileName": (None, file_name),
        }
        if folder:
            fields["folder"] = (None, folder)

        try:
            response = requests.post(
                self.upload_url,
                files=fields,
                auth=(self.private_key, ""),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UploadError(f"ImageKit request failed: {e}") from e

        if not response.ok:
            raise UploadError(f"ImageKit responded {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise UploadError(f"ImageKit response is not JSON: {response.text[:200]}") from e

        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise UploadError("ImageKit response carried no url")
        return url

    async def upload_async(self, file: str, file_name: str, folder: Optional[str] = None) -> str:
        return await run_in_threadpool(self.upload, file, file_name, folder)


def get_image_uploader(settings: Settings = Depends(get_settings)) -> ImageUploader:
    if not settings.IMAGEKIT_PRIVATE_KEY:
        logger.warning("ImageKit env vars are missing or incomplete")
    return ImageUploader(
        private_key=settings.IMAGEKIT_PRIVATE_KEY,
        upload_url=settings.IMAGEKIT_UPLOAD_URL,
        timeout=settings.IMAGEKIT_TIMEOUT_SECONDS,
    )
