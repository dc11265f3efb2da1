"""
User Schemas.

Pydantic schemas for account and authentication payloads.
"""
from typing import Annotated, List, Optional

from pydantic import EmailStr, Field, StringConstraints, TypeAdapter, ValidationError, field_validator

from poolrent.config import settings
from poolrent.schemas.base import BaseSchema, TimestampSchema

# Same rules as EmailStr fields, so login accepts exactly what register accepts
_email_adapter = TypeAdapter(EmailStr)


def _is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
MobileNumber = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\d{9,15}$")]
Password = Annotated[
    str,
    StringConstraints(
        min_length=settings.PASSWORD_MIN_LENGTH,
        max_length=settings.PASSWORD_MAX_LENGTH
    )
]


class EmailSchema(BaseSchema):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


# =============================================================================
# Request Schemas
# =============================================================================
class RegisterRequest(EmailSchema):
    """Schema for user registration."""
    first_name: Name
    last_name: Name
    mobile_number: MobileNumber
    password: Password


class LoginRequest(BaseSchema):
    """
    Schema for login request.

    Fields are deliberately unconstrained: a malformed email or password
    length is reported as invalid credentials, not as a validation error.
    """
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def is_well_formed(self) -> bool:
        return (
            _is_valid_email(self.email)
            and settings.PASSWORD_MIN_LENGTH <= len(self.password) <= settings.PASSWORD_MAX_LENGTH
        )


class ForgotPasswordRequest(EmailSchema):
    """Schema for requesting a reset link."""


class ResetPasswordRequest(BaseSchema):
    """Schema for completing a password reset."""
    token: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    new_password: Password


class PasswordChange(BaseSchema):
    """Schema for password change."""
    current_password: Annotated[str, StringConstraints(min_length=1)]
    new_password: Password


class UpdateUserRequest(EmailSchema):
    """
    Schema for updating the caller's own profile.

    ``avatar_url``: a string sets it, ``null`` clears it, omitting it keeps
    the stored value.
    """
    first_name: Name
    last_name: Name
    mobile_number: MobileNumber
    avatar_url: Optional[str] = Field(None, max_length=500)
    password_change: Optional[PasswordChange] = None

    @field_validator("avatar_url")
    @classmethod
    def strip_avatar(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None


# =============================================================================
# Response Schemas
# =============================================================================
class UserResponse(TimestampSchema):
    """Public user data; never carries the password hash or reset token."""
    id: str
    first_name: str
    last_name: str
    email: str
    mobile_number: str
    avatar_url: Optional[str] = None
    published_pools_count: int = 0


class UserEnvelope(BaseSchema):
    user: UserResponse


class AuthResponse(BaseSchema):
    """Response for register and login."""
    user: UserResponse
    access_token: str


class UserListResponse(BaseSchema):
    users: List[UserResponse]
