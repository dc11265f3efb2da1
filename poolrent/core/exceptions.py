"""
Custom Exceptions.

Provides custom exception classes for consistent error handling:
- APIException: Base exception with error code and details
- Specific exceptions for the failure kinds the API reports

Every APIException is rendered as ``{"message": ..., "code": ...}`` by the
handler registered in ``poolrent.main``.
"""
from typing import Any, Optional


class APIException(Exception):
    """
    Base API exception.

    All custom exceptions should inherit from this class.

    Attributes:
        status_code: HTTP status code
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Additional error details

    Usage:
        raise APIException(
            status_code=400,
            error_code="VALIDATION_ERROR",
            message="Invalid pool data",
            details={"field": "images", "error": "1..7 required"}
        )
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Any] = None
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


# =============================================================================
# 400 Bad Request Exceptions
# =============================================================================
class ValidationException(APIException):
    """400 Bad Request - Malformed or out-of-range input."""

    def __init__(
        self,
        message: str = "Invalid data",
        details: Optional[Any] = None
    ):
        super().__init__(
            status_code=400,
            error_code="VALIDATION_ERROR",
            message=message,
            details=details
        )


class InvalidIdException(APIException):
    """400 Bad Request - Identifier is not a valid ObjectId."""

    def __init__(self, message: str = "Invalid id"):
        super().__init__(
            status_code=400,
            error_code="INVALID_ID",
            message=message,
            details=None
        )


class InvalidResetTokenException(APIException):
    """400 Bad Request - Password reset token unknown or expired."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(
            status_code=400,
            error_code="INVALID_RESET_TOKEN",
            message=message,
            details=None
        )


class UploadFailedException(APIException):
    """400 Bad Request - Storage provider rejected or failed the upload."""

    def __init__(self, message: str = "Upload failed"):
        super().__init__(
            status_code=400,
            error_code="UPLOAD_FAILED",
            message=message,
            details=None
        )


# =============================================================================
# 401 Unauthorized Exceptions
# =============================================================================
class UnauthorizedException(APIException):
    """401 Unauthorized - Authentication required."""

    def __init__(
        self,
        message: str = "Unauthorized",
        error_code: str = "UNAUTHORIZED",
        details: Optional[Any] = None
    ):
        super().__init__(
            status_code=401,
            error_code=error_code,
            message=message,
            details=details
        )


class InvalidCredentialsException(APIException):
    """401 Unauthorized - Invalid login credentials."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            status_code=401,
            error_code="INVALID_CREDENTIALS",
            message=message,
            details=None
        )


class TokenExpiredException(APIException):
    """401 Unauthorized - Token has expired."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            status_code=401,
            error_code="TOKEN_EXPIRED",
            message=message,
            details=None
        )


class TokenInvalidException(APIException):
    """401 Unauthorized - Token signature or structure rejected."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            status_code=401,
            error_code="TOKEN_INVALID",
            message=message,
            details=None
        )


# =============================================================================
# 404 Not Found Exceptions
# =============================================================================
class UserNotFoundException(APIException):
    """404 Not Found - User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(
            status_code=404,
            error_code="USER_NOT_FOUND",
            message=message,
            details=None
        )


class PoolNotFoundException(APIException):
    """404 Not Found - Pool absent, or not owned by the caller."""

    def __init__(self, message: str = "Pool not found"):
        super().__init__(
            status_code=404,
            error_code="POOL_NOT_FOUND",
            message=message,
            details=None
        )


# =============================================================================
# 409 Conflict Exceptions
# =============================================================================
class EmailAlreadyExistsException(APIException):
    """409 Conflict - Email already registered."""

    def __init__(self, message: str = "Email already used"):
        super().__init__(
            status_code=409,
            error_code="EMAIL_EXISTS",
            message=message,
            details=None
        )


# =============================================================================
# 5xx Server Exceptions
# =============================================================================
class ServerMisconfiguredException(APIException):
    """500 Internal Server Error - A required secret is not configured."""

    def __init__(self, message: str = "Server misconfigured"):
        super().__init__(
            status_code=500,
            error_code="SERVER_MISCONFIGURED",
            message=message,
            details=None
        )


class RequestTimeoutException(APIException):
    """504 Gateway Timeout - Request exceeded its time budget."""

    def __init__(self, message: str = "Request timed out"):
        super().__init__(
            status_code=504,
            error_code="REQUEST_TIMEOUT",
            message=message,
            details=None
        )
