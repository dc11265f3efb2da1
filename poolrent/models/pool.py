"""
Pool Document Model for MongoDB.

A pool listing owned by exactly one user.
"""
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

from poolrent.models.base import BaseDocument, PyObjectId


class PoolFilters(BaseModel):
    """Exact-match amenity flags."""
    heated: bool = False
    pets_allowed: bool = False


class PoolDocument(BaseDocument):
    """
    Pool document for MongoDB.

    Collection: pools

    Indexes:
        - user_id
        - city
        - is_visible
        - visible_until
        - (is_visible, visible_until, created_at desc) compound
    """

    # Owner reference, stored as ObjectId
    user_id: PyObjectId

    title: str
    city: str
    capacity: int
    images: list[str] = Field(default_factory=list)
    price_per_day: Optional[float] = None
    description: Optional[str] = None
    filters: Optional[PoolFilters] = None
    busy_days: Optional[list[str]] = None

    # Visibility is toggled by the admin endpoint only
    is_visible: bool = False
    visible_until: Optional[datetime] = None

    def to_mongo(self) -> dict[str, Any]:
        data = super().to_mongo()
        data["user_id"] = ObjectId(self.user_id)
        # Always stored so the public filter can match on null.
        data["is_visible"] = self.is_visible
        data["visible_until"] = self.visible_until
        return data
