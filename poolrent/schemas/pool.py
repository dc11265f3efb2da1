"""
Pool Schemas.

Pydantic schemas for pool listing payloads.
"""
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints, TypeAdapter, ValidationError, field_validator

from poolrent.schemas.base import BaseSchema, TimestampSchema, ensure_utc, to_naive_utc


class PoolFiltersSchema(BaseSchema):
    heated: bool = False
    pets_allowed: bool = False


# =============================================================================
# Request Schemas
# =============================================================================
class PoolInput(BaseSchema):
    """Every owner-editable field of a pool."""
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=40)]
    city: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    capacity: int = Field(..., ge=1, le=100)
    images: List[str] = Field(..., min_length=1, max_length=7)
    price_per_day: Optional[float] = Field(None, ge=1, le=10000)
    description: Optional[
        Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)]
    ] = None
    filters: Optional[PoolFiltersSchema] = None
    busy_days: Optional[List[str]] = None


class PoolWriteRequest(BaseSchema):
    """Body of create and update: ``{"pool": {...}}``."""
    pool: PoolInput


_datetime_adapter = TypeAdapter(datetime)


class VisibilityRequest(BaseSchema):
    """
    Admin visibility toggle.

    ``visibleUntil`` is kept as sent and parsed by ``parsed_visible_until``
    so a bad value gets its own error message.
    """
    is_visible: bool = False
    visible_until: Optional[str] = None

    @field_validator("visible_until", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, datetime):
            return v.isoformat()
        return v

    def parsed_visible_until(self) -> Optional[datetime]:
        """
        Parse ``visible_until`` into a naive UTC datetime.

        Raises:
            ValueError: the value is not an ISO-8601 date or datetime
        """
        if self.visible_until is None:
            return None
        try:
            value = _datetime_adapter.validate_python(self.visible_until.strip())
        except ValidationError as e:
            raise ValueError(f"Invalid visibleUntil: {self.visible_until}") from e
        return to_naive_utc(value)


# =============================================================================
# Response Schemas
# =============================================================================
class PoolResponse(TimestampSchema):
    id: str
    user_id: str
    title: str
    city: str
    capacity: int
    images: List[str]
    price_per_day: Optional[float] = None
    description: Optional[str] = None
    filters: Optional[PoolFiltersSchema] = None
    busy_days: Optional[List[str]] = None
    is_visible: bool = False
    visible_until: Optional[datetime] = None

    @field_validator("visible_until", mode="after")
    @classmethod
    def mark_visible_until_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class PoolEnvelope(BaseSchema):
    pool: PoolResponse


class PoolListResponse(BaseSchema):
    pools: List[PoolResponse]
