"""
Upload Schemas.

Images arrive as base64 strings or data URLs.
"""
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints

from poolrent.schemas.base import BaseSchema

ImagePayload = Annotated[str, StringConstraints(min_length=1)]


class SingleUploadRequest(BaseSchema):
    file: ImagePayload
    folder: Optional[str] = None


class MultipleUploadRequest(BaseSchema):
    files: List[ImagePayload] = Field(..., min_length=1, max_length=7)
    folder: Optional[str] = None


class UploadResponse(BaseSchema):
    url: str


class UploadManyResponse(BaseSchema):
    urls: List[str]
