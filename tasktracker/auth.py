"""Registration, login and current-user lookup.

Input validation happens on the pydantic schemas before these functions are
called; what remains here is the credential logic and the rule that every
failure path a client can trigger answers with a generic error.
"""

import structlog
from sqlalchemy.orm import Session

from . import crud, errors, models, schemas, security

logger = structlog.get_logger(__name__)


def public_user(user: models.User) -> schemas.UserOut:
    """Strip everything but id, email and username."""
    return schemas.UserOut.model_validate(user)


def _authenticated(user: models.User) -> schemas.AuthOut:
    return schemas.AuthOut(token=security.create_access_token(user.id), user=public_user(user))


def register(db: Session, user_in: schemas.UserCreate) -> schemas.AuthOut:
    """Create an account and return a token for it.

    The pre-check answers the common duplicate case early; the unique
    constraints in the users table settle concurrent registrations.
    """
    email = schemas.normalize_email(user_in.email)
    if crud.user_exists(db, email, user_in.username):
        logger.info("auth.register_duplicate")
        raise errors.DuplicateUser()

    user = crud.create_user(
        db,
        email=email,
        username=user_in.username,
        password_hash=security.hash_password(user_in.password),
    )
    logger.info("auth.registered", user_id=user.id)
    return _authenticated(user)


def login(db: Session, email: str, password: str) -> schemas.AuthOut:
    """Check credentials; unknown email and wrong password fail identically."""
    user = crud.get_user_by_email(db, email)
    if user is None:
        security.verify_password_dummy(password)
        logger.info("auth.login_failed")
        raise errors.InvalidCredentials()
    if not security.verify_password(password, user.password_hash):
        logger.info("auth.login_failed")
        raise errors.InvalidCredentials()

    logger.info("auth.login", user_id=user.id)
    return _authenticated(user)


def current_user(db: Session, user_id: int) -> schemas.UserOut:
    user = crud.get_user(db, user_id)
    if user is None:
        raise errors.NotFound()
    return public_user(user)
