"""
User account endpoints: self-service profile update and the admin listing.
"""
import logging

from bson import ObjectId
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from poolrent.core.auth import get_current_user_id, get_password_hasher, require_admin_secret
from poolrent.core.exceptions import (
    EmailAlreadyExistsException,
    UnauthorizedException,
    UserNotFoundException,
)
from poolrent.core.security import PasswordHasher
from poolrent.db.mongodb import get_database
from poolrent.models.base import is_object_id, utcnow
from poolrent.schemas.user import UpdateUserRequest, UserEnvelope, UserListResponse
from poolrent.services.accounts import count_published_pools, user_to_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.put(
    "/user",
    response_model=UserEnvelope,
    summary="Update current user (self)",
)
async def update_me(
    user_data: UpdateUserRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_database),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Replace the caller's profile fields, optionally changing the password."""
    if not is_object_id(current_user_id):
        raise UserNotFoundException()
    user_id = ObjectId(current_user_id)

    user = await db.users.find_one({"_id": user_id})
    if not user:
        raise UserNotFoundException()

    if user_data.email != user["email"]:
        if await db.users.find_one({"email": user_data.email}, {"_id": 1}):
            raise EmailAlreadyExistsException()

    to_set = {
        "first_name": user_data.first_name,
        "last_name": user_data.last_name,
        "email": user_data.email,
        "mobile_number": user_data.mobile_number,
        "updated_at": utcnow(),
    }
    to_unset = {}

    if user_data.password_change:
        change = user_data.password_change
        if not await hasher.verify_async(change.current_password, user["hashed_password"]):
            raise UnauthorizedException(
                message="Current password incorrect",
                error_code="INVALID_CURRENT_PASSWORD"
            )
        to_set["hashed_password"] = await hasher.hash_async(change.new_password)

    # Omitted avatarUrl keeps the stored one; null or "" clears it.
    if "avatar_url" in user_data.model_fields_set:
        if user_data.avatar_url:
            to_set["avatar_url"] = user_data.avatar_url
        else:
            to_unset["avatar_url"] = ""

    update = {"$set": to_set}
    if to_unset:
        update["$unset"] = to_unset

    try:
        updated = await db.users.find_one_and_update(
            {"_id": user_id},
            update,
            return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        raise EmailAlreadyExistsException()

    if not updated:
        raise UserNotFoundException()

    counts = await count_published_pools(db, [user_id])
    return UserEnvelope(user=user_to_response(updated, counts[current_user_id]))


@router.get(
    "/admin/users",
    response_model=UserListResponse,
    summary="List all users (admin)",
    dependencies=[Depends(require_admin_secret)],
)
async def list_users(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Return every user, newest first. Requires the admin secret header."""
    users = await db.users.find({}).sort("created_at", DESCENDING).to_list(length=None)
    counts = await count_published_pools(db, [u["_id"] for u in users])

    return UserListResponse(
        users=[user_to_response(u, counts[str(u["_id"])]) for u in users]
    )
