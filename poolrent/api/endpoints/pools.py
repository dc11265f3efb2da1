"""
Pool listing endpoints.

Ownership is enforced inside the store operation itself: update and delete
match on both the pool id and the caller's id, so a pool owned by someone
else looks exactly like a missing one.
"""
import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from poolrent.core.auth import get_current_user_id, get_optional_user_id, require_admin_secret
from poolrent.core.exceptions import (
    InvalidIdException,
    PoolNotFoundException,
    TokenInvalidException,
    ValidationException,
)
from poolrent.db.mongodb import get_database
from poolrent.models.base import is_object_id, utcnow
from poolrent.models.pool import PoolDocument
from poolrent.schemas.pool import (
    PoolEnvelope,
    PoolInput,
    PoolListResponse,
    PoolResponse,
    PoolWriteRequest,
    VisibilityRequest,
)
from poolrent.services.visibility import LISTING_SORT, can_view, listing_filter_for

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pools"])

# Optional fields removed from the document when an update leaves them out
OPTIONAL_FIELDS = ("price_per_day", "description", "filters", "busy_days")


def pool_to_response(doc: dict) -> PoolResponse:
    """Convert MongoDB document to response format."""
    pool = PoolDocument.from_mongo(doc)
    return PoolResponse.model_validate(pool.model_dump())


def _parse_pool_id(pool_id: Optional[str]) -> ObjectId:
    pool_id = (pool_id or "").strip()
    if not is_object_id(pool_id):
        raise InvalidIdException()
    return ObjectId(pool_id)


def _editable_fields(data: PoolInput) -> tuple[dict, dict]:
    """Split owner input into ``$set`` and ``$unset`` parts."""
    fields = data.model_dump()
    to_set = {k: v for k, v in fields.items() if v is not None}
    to_unset = {k: "" for k in OPTIONAL_FIELDS if fields.get(k) is None}
    return to_set, to_unset


@router.get(
    "/pools",
    response_model=PoolListResponse,
    summary="List pools",
)
async def list_pools(
    user_id: Optional[str] = Query(None, alias="userId", description="Owner id for the dashboard view"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    List pools, newest first.

    - With a valid ``userId``: every pool of that owner, visibility ignored
    - Otherwise: only visible, unexpired pools
    """
    query_filter = listing_filter_for(user_id, utcnow())
    pools = await db.pools.find(query_filter).sort(LISTING_SORT).to_list(length=None)
    return PoolListResponse(pools=[pool_to_response(p) for p in pools])


@router.get(
    "/pool",
    response_model=PoolEnvelope,
    summary="Get pool",
)
async def get_pool(
    pool_id: Optional[str] = Query(None, alias="id"),
    caller_id: Optional[str] = Depends(get_optional_user_id),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Public detail for visible pools; owners may also preview hidden ones."""
    oid = _parse_pool_id(pool_id)

    doc = await db.pools.find_one({"_id": oid})
    if not doc:
        raise PoolNotFoundException()

    if not can_view(PoolDocument.from_mongo(doc), caller_id, utcnow()):
        raise PoolNotFoundException()

    return PoolEnvelope(pool=pool_to_response(doc))


@router.post(
    "/pools",
    response_model=PoolEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create pool",
)
async def create_pool(
    body: PoolWriteRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Create a pool owned by the caller. New pools start hidden."""
    if not is_object_id(current_user_id):
        raise TokenInvalidException()

    pool = PoolDocument(user_id=current_user_id, **body.pool.model_dump())
    pool_doc = pool.to_insert()

    result = await db.pools.insert_one(pool_doc)
    pool_doc["_id"] = result.inserted_id

    logger.info(f"Pool {result.inserted_id} created by user {current_user_id}")

    return PoolEnvelope(pool=pool_to_response(pool_doc))


@router.put(
    "/pools/{pool_id}",
    response_model=PoolEnvelope,
    summary="Update pool (owner)",
)
async def update_pool(
    pool_id: str,
    body: PoolWriteRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Replace the owner-editable fields of one of the caller's pools."""
    oid = _parse_pool_id(pool_id)
    if not is_object_id(current_user_id):
        raise PoolNotFoundException()

    to_set, to_unset = _editable_fields(body.pool)
    to_set["updated_at"] = utcnow()

    update = {"$set": to_set}
    if to_unset:
        update["$unset"] = to_unset

    updated = await db.pools.find_one_and_update(
        {"_id": oid, "user_id": ObjectId(current_user_id)},
        update,
        return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise PoolNotFoundException()

    return PoolEnvelope(pool=pool_to_response(updated))


@router.delete(
    "/pools/{pool_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete pool (owner)",
)
async def delete_pool(
    pool_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Permanently delete one of the caller's pools."""
    oid = _parse_pool_id(pool_id)
    if not is_object_id(current_user_id):
        raise PoolNotFoundException()

    deleted = await db.pools.find_one_and_delete(
        {"_id": oid, "user_id": ObjectId(current_user_id)}
    )
    if not deleted:
        raise PoolNotFoundException()

    logger.info(f"Pool {pool_id} deleted by user {current_user_id}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/pools/{pool_id}/visibility",
    response_model=PoolEnvelope,
    summary="Set pool visibility (admin)",
    dependencies=[Depends(require_admin_secret)],
)
async def set_pool_visibility(
    pool_id: str,
    body: Optional[VisibilityRequest] = None,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Publish or hide a pool. Requires the admin secret header.

    ``visibleUntil`` is kept only while the pool is visible.
    """
    oid = _parse_pool_id(pool_id)
    body = body or VisibilityRequest()

    try:
        visible_until = body.parsed_visible_until()
    except ValueError:
        raise ValidationException(message="Invalid visibleUntil")

    updated = await db.pools.find_one_and_update(
        {"_id": oid},
        {"$set": {
            "is_visible": body.is_visible,
            "visible_until": visible_until if body.is_visible else None,
            "updated_at": utcnow(),
        }},
        return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise PoolNotFoundException()

    logger.info(f"Pool {pool_id} visibility set to {body.is_visible}")

    return PoolEnvelope(pool=pool_to_response(updated))
