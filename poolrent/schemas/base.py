"""
Base Schemas.

Common schema patterns and utilities. API payloads use camelCase keys;
field names stay snake_case in Python and in MongoDB.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Mark naive (Mongo) datetimes as UTC so they serialize with an offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Inverse of ``ensure_utc``, for values about to be stored."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class TimestampSchema(BaseSchema):
    """Schema with timestamp fields."""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def mark_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class MessageResponse(BaseSchema):
    """Simple message response."""
    message: str
