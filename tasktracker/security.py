"""Password hashing and JWT handling.

Both halves are pure functions of their inputs plus the process-wide
settings, so they are safe to call from concurrent request handlers.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .settings import settings

BCRYPT_ROUNDS = 10

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


# ---------- Password hashing ----------
def hash_password(plain: str) -> str:
    """Hash a plaintext password using bcrypt; the salt is embedded in the digest."""
    return _pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against its bcrypt hash.

    A digest passlib cannot identify or parse counts as a mismatch.
    """
    try:
        return _pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return _pwd_context.hash("not-a-real-password")


def verify_password_dummy(plain: str) -> bool:
    """Spend one bcrypt verification for a login whose user does not exist.

    Goes through verify_password so that inputs passlib refuses (oversized
    passwords) fail the same way they do for a real user.
    """
    verify_password(plain, _dummy_hash())
    return False


# ---------- JWT ----------
class TokenError(Exception):
    """Raised when a token cannot be accepted."""


class TokenMalformed(TokenError):
    """Unparseable token, bad signature, or a subject that is not a user id."""


class TokenExpired(TokenError):
    """Signature is fine but ``exp`` has passed."""


def token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_access_token(user_id: int, issued_at: Optional[datetime] = None) -> str:
    """Create a JWT access token for ``user_id`` that expires after the configured lifetime."""
    iat = issued_at or datetime.now(tz=timezone.utc)
    to_encode = {
        "sub": str(user_id),
        "iat": iat,
        "exp": iat + token_lifetime(),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> int:
    """Verify signature and expiry and return the user id the token was issued for."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token has expired") from exc
    except JWTError as exc:
        raise TokenMalformed("Invalid token") from exc

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenMalformed("Token subject is not a user id") from exc
