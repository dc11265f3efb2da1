"""
Access control dependencies.

Two gates, used independently per route:
- bearer gate: ``Authorization: Bearer <token>`` resolved to a user id
- admin-secret gate: shared secret header for operations outside
  per-user ownership (visibility toggling, user listing)

The gates read secrets from the injected ``Settings`` only, never from the
module-level settings object.
"""
import hmac
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from poolrent.config import Settings, get_settings
from poolrent.core.exceptions import (
    ServerMisconfiguredException,
    TokenExpiredException,
    TokenInvalidException,
    UnauthorizedException,
)
from poolrent.core.security import (
    PasswordHasher,
    TokenExpiredError,
    TokenInvalidError,
    TokenService,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Service factories
# =============================================================================
def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    try:
        return TokenService(
            secret_key=settings.JWT_SECRET,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            algorithm=settings.JWT_ALGORITHM,
        )
    except ValueError:
        logger.error("JWT_SECRET is not configured")
        raise ServerMisconfiguredException()


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


# =============================================================================
# Bearer gate
# =============================================================================
def authenticate_bearer(token: Optional[str], tokens: Optional[TokenService]) -> str:
    """
    Resolve a bearer token to its subject id.

    A missing token fails before the token service is consulted; expired and
    invalid tokens fail with distinct error codes.
    """
    if not token:
        raise UnauthorizedException(message="Auth required", error_code="AUTH_REQUIRED")

    try:
        claims = tokens.verify(token)
    except TokenExpiredError:
        raise TokenExpiredException()
    except TokenInvalidError:
        raise TokenInvalidException()

    return claims.subject


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Get the authenticated caller's id.

    Raises 401 if the token is missing, expired or invalid.
    """
    token = credentials.credentials if credentials else None
    if not token:
        return authenticate_bearer(None, None)
    return authenticate_bearer(token, get_token_service(settings))


async def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Get the caller's id if a usable token was sent, None otherwise."""
    if not credentials or not settings.JWT_SECRET:
        return None
    try:
        return authenticate_bearer(credentials.credentials, get_token_service(settings))
    except (TokenExpiredException, TokenInvalidException, UnauthorizedException):
        return None


# =============================================================================
# Admin-secret gate
# =============================================================================
def check_admin_secret(provided: Optional[str], expected: Optional[str]) -> None:
    """
    Compare a supplied admin secret against the configured one.

    Fails closed with a 500 when no secret is configured.
    """
    if not expected:
        logger.error("ADMIN_SECRET is not configured")
        raise ServerMisconfiguredException()

    ok = hmac.compare_digest((provided or "").encode("utf-8"), expected.encode("utf-8"))
    if not ok:
        raise UnauthorizedException()


async def require_admin_secret(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Dependency guarding admin-only routes."""
    check_admin_secret(request.headers.get(settings.ADMIN_SECRET_HEADER), settings.ADMIN_SECRET)
