"""
MongoDB Base Models.

Provides base classes and utilities for MongoDB documents:
- PyObjectId for MongoDB ObjectId handling
- BaseDocument with common fields
- Serialization helpers
"""
from datetime import datetime
from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def utcnow() -> datetime:
    """Naive UTC timestamp, the form MongoDB hands back."""
    return datetime.utcnow()


def _validate_object_id(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, ObjectId):
        return str(v)
    if isinstance(v, str):
        if ObjectId.is_valid(v):
            return v
        raise ValueError(f"Invalid ObjectId: {v}")
    raise TypeError(f"ObjectId or str required, got {type(v)}")


# ObjectId carried as its hex string.
PyObjectId = Annotated[str, BeforeValidator(_validate_object_id)]


def is_object_id(value: Any) -> bool:
    """True for a 24-char hex string (or ObjectId) that MongoDB would accept."""
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


class BaseDocument(BaseModel):
    """
    Base class for MongoDB documents.

    Provides:
    - id field mapped to MongoDB _id
    - Timestamp fields (created_at, updated_at)
    - Serialization methods
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        from_attributes=True,
    )

    # MongoDB _id field
    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_mongo(self) -> dict[str, Any]:
        """
        Convert document to MongoDB-compatible dict.

        - Converts id to _id
        - Excludes None values
        - Updates updated_at timestamp
        """
        data = self.model_dump(by_alias=True, exclude_none=True)

        # Remove id if None (let MongoDB generate)
        if "_id" in data and data["_id"] is None:
            del data["_id"]
        elif "_id" in data:
            data["_id"] = ObjectId(data["_id"])

        data["updated_at"] = utcnow()

        return data

    def to_insert(self) -> dict[str, Any]:
        """
        Convert document for insertion (excludes _id).
        """
        data = self.to_mongo()
        data.pop("_id", None)
        data["created_at"] = data["updated_at"]
        return data

    @classmethod
    def from_mongo(cls, data: Optional[dict[str, Any]]):
        """
        Create document instance from MongoDB dict.

        Converts _id ObjectId to string.
        """
        if data is None:
            return None

        data = dict(data)
        if "_id" in data:
            data["_id"] = str(data["_id"])

        return cls(**data)
