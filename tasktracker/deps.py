"""FastAPI dependencies for DB sessions and authentication.

Provides:
- get_db: scoped SQLAlchemy session generator.
- get_current_user_id: the access guard for protected routes. It resolves the
  bearer token to a user id without touching the database.
"""

from typing import Optional

import structlog
from fastapi import Header, Request
from sqlalchemy.orm import Session

from . import errors, security
from .database import SessionLocal

logger = structlog.get_logger(__name__)


def get_db():
    """Yield a SQLAlchemy session and ensure it is closed afterwards."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> int:
    """Require a valid token and return its user id; raise Unauthenticated otherwise.

    Missing, malformed, forged and expired tokens are all rejected the same way.
    """
    token = extract_bearer_token(authorization)
    if not token:
        raise errors.Unauthenticated()
    try:
        user_id = security.decode_access_token(token)
    except security.TokenError as exc:
        logger.info("auth.token_rejected", reason=type(exc).__name__)
        raise errors.Unauthenticated() from exc

    request.state.user_id = user_id
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return user_id
