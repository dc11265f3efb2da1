"""
Authentication endpoints.
"""
import logging
import secrets
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from poolrent.config import Settings, get_settings
from poolrent.core.auth import get_password_hasher, get_token_service
from poolrent.core.exceptions import (
    EmailAlreadyExistsException,
    InvalidCredentialsException,
    InvalidResetTokenException,
)
from poolrent.core.security import PasswordHasher, TokenService
from poolrent.db.mongodb import get_database
from poolrent.models.base import utcnow
from poolrent.models.user import UserDocument
from poolrent.schemas.base import MessageResponse
from poolrent.schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from poolrent.services.accounts import count_published_pools, hash_reset_token, user_to_response
from poolrent.services.email import EmailService, deliver_password_reset, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    user_data: RegisterRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """Register a new user and log them in."""
    if await db.users.find_one({"email": user_data.email}, {"_id": 1}):
        raise EmailAlreadyExistsException()

    user = UserDocument(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=user_data.email,
        mobile_number=user_data.mobile_number,
        hashed_password=await hasher.hash_async(user_data.password),
    )
    user_doc = user.to_insert()

    # The unique index settles races the pre-check above cannot.
    try:
        result = await db.users.insert_one(user_doc)
    except DuplicateKeyError:
        raise EmailAlreadyExistsException()
    user_doc["_id"] = result.inserted_id

    logger.info(f"User registered: {result.inserted_id}")

    return AuthResponse(
        user=user_to_response(user_doc, 0),
        access_token=tokens.issue(str(result.inserted_id)),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in with email and password",
)
async def login(
    login_data: LoginRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Exchange credentials for an access token.

    Unknown email, wrong password and malformed input all answer the same
    401 so the response never reveals whether an account exists.
    """
    if not login_data.is_well_formed:
        raise InvalidCredentialsException()

    user = await db.users.find_one({"email": login_data.email})
    if not user:
        await hasher.dummy_verify_async()
        raise InvalidCredentialsException()

    if not await hasher.verify_async(login_data.password, user["hashed_password"]):
        raise InvalidCredentialsException()

    counts = await count_published_pools(db, [user["_id"]])

    return AuthResponse(
        user=user_to_response(user, counts[str(user["_id"])]),
        access_token=tokens.issue(str(user["_id"])),
    )


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request password reset link",
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: AsyncIOMotorDatabase = Depends(get_database),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
):
    """
    Email a reset link if an account exists for the address.

    The answer is 200 for any well-formed email. Delivery runs after the
    response is sent and its failures are only logged.
    """
    user = await db.users.find_one({"email": request_data.email}, {"_id": 1, "email": 1})
    if not user:
        return MessageResponse(message="OK")

    token = secrets.token_hex(32)
    now = utcnow()

    # A newer token replaces any earlier one.
    await db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {
            "reset_password_token": hash_reset_token(token),
            "reset_password_expires": now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
            "updated_at": now,
        }}
    )

    background_tasks.add_task(deliver_password_reset, email_service, user["email"], token)

    return MessageResponse(message="OK")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset password using token",
)
async def reset_password(
    reset_data: ResetPasswordRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Set a new password with the token from the reset email."""
    token_filter = {
        "reset_password_token": hash_reset_token(reset_data.token),
        "reset_password_expires": {"$gt": utcnow()},
    }

    if not await db.users.find_one(token_filter, {"_id": 1}):
        raise InvalidResetTokenException()

    new_hash = await hasher.hash_async(reset_data.new_password)

    # Token match and password write in one operation so a token is spent once.
    updated = await db.users.find_one_and_update(
        token_filter,
        {
            "$set": {"hashed_password": new_hash, "updated_at": utcnow()},
            "$unset": {"reset_password_token": "", "reset_password_expires": ""},
        }
    )
    if not updated:
        raise InvalidResetTokenException()

    logger.info(f"Password reset completed for user {updated['_id']}")

    return MessageResponse(message="Password updated")
