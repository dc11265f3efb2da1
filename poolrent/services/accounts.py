"""
Helpers shared by the account endpoints.
"""
import hashlib
from collections import Counter
from typing import Any, Iterable

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from poolrent.models.user import UserDocument
from poolrent.schemas.user import UserResponse


def hash_reset_token(token: str) -> str:
    """Reset tokens are looked up by digest; the raw value only travels by email."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def count_published_pools(
    db: AsyncIOMotorDatabase,
    user_ids: Iterable[ObjectId]
) -> Counter:
    """Pool count per owner, in a single ``$in`` query."""
    ids = list(user_ids)
    if not ids:
        return Counter()
    cursor = db.pools.find({"user_id": {"$in": ids}}, {"user_id": 1})
    pools = await cursor.to_list(length=None)
    return Counter(str(p["user_id"]) for p in pools)


def user_to_response(doc: dict[str, Any], published_pools_count: int = 0) -> UserResponse:
    """Convert a users document to its public shape."""
    user = UserDocument.from_mongo(doc)
    return UserResponse.model_validate({
        **user.model_dump(exclude={"hashed_password", "reset_password_token", "reset_password_expires"}),
        "published_pools_count": published_pools_count,
    })
