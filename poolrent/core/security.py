"""
Security Utilities.

Provides the two credential primitives the API is built on:
- Password hashing and verification (bcrypt via passlib)
- Signed, expiring access tokens (JWT via python-jose)

Both are plain classes constructed from explicit values so they can be
built with test secrets; FastAPI wiring lives in ``poolrent.core.auth``.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool


# =============================================================================
# Password Hashing
# =============================================================================
class PasswordHasher:
    """bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt (fresh random salt per call)."""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash.

        A digest passlib cannot identify is treated as a mismatch.
        """
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            return False

    async def hash_async(self, password: str) -> str:
        """Hash off the event loop; bcrypt is CPU bound."""
        return await run_in_threadpool(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        return await run_in_threadpool(self.verify, plain_password, hashed_password)

    async def dummy_verify_async(self) -> bool:
        """Spend one verification's worth of time when there is no hash to check."""
        return await run_in_threadpool(self._context.dummy_verify)


# =============================================================================
# JWT Token Management
# =============================================================================
class TokenError(Exception):
    """Base class for access token failures."""


class TokenInvalidError(TokenError):
    """Signature mismatch or malformed token."""


class TokenExpiredError(TokenError):
    """Token is well-formed and signed but past its expiry."""


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies stateless bearer tokens.

    Tokens carry ``sub``, ``iat`` and ``exp`` claims. There is no revocation:
    a token stays valid until ``exp``.
    """

    def __init__(
        self,
        secret_key: str,
        expire_minutes: int = 60 * 24 * 7,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None
    ):
        if not secret_key:
            raise ValueError("JWT secret is not configured")
        self._secret_key = secret_key
        self._ttl = timedelta(minutes=expire_minutes)
        self._algorithm = algorithm
        self._clock = clock or _utcnow

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed access token for ``user_id``."""
        now = self._clock()
        expire = now + (expires_delta if expires_delta is not None else self._ttl)

        to_encode = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and verify a token.

        Raises:
            TokenInvalidError: bad signature, bad structure or missing claims
            TokenExpiredError: current time is at or past ``exp``
        """
        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False}
            )
        except JWTError as exc:
            raise TokenInvalidError("Invalid token") from exc

        subject = payload.get("sub")
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not subject or not isinstance(exp, (int, float)):
            raise TokenInvalidError("Invalid token payload")

        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        issued_at = (
            datetime.fromtimestamp(iat, tz=timezone.utc)
            if isinstance(iat, (int, float)) else expires_at - self._ttl
        )

        if self._clock() >= expires_at:
            raise TokenExpiredError("Token has expired")

        return TokenClaims(subject=str(subject), issued_at=issued_at, expires_at=expires_at)
