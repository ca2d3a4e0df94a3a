"""CRUD helpers for users and tasks.

This module contains the database operations used by the service and API layers:
- User lookups and insertion for registration/login flows.
- Task operations that always carry the owner id in their WHERE clause, so a
  task belonging to someone else is indistinguishable from a missing one.
"""

from typing import Optional

import structlog
from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from . import errors, models, schemas

logger = structlog.get_logger(__name__)


def _commit(db: Session) -> None:
    """Commit, turning unexpected store faults into an opaque InternalFailure."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("store.commit_failed", error=type(exc).__name__)
        raise errors.InternalFailure() from exc


# -----------------------------------------------------------------------------
# USERS
# -----------------------------------------------------------------------------
def get_user(db: Session, user_id: int) -> models.User | None:
    """Return a user by id or None if not found."""
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> models.User | None:
    """Return a user by normalized email or None if not found."""
    norm = schemas.normalize_email(email)
    if not norm:
        return None
    return db.query(models.User).filter(models.User.email == norm).first()


def user_exists(db: Session, email: str, username: str) -> bool:
    """Return True if any user already holds this email or this username."""
    q = db.query(models.User.id).filter(
        or_(models.User.email == schemas.normalize_email(email), models.User.username == username)
    )
    return q.first() is not None


def create_user(db: Session, *, email: str, username: str, password_hash: str) -> models.User:
    """Insert a user. The unique constraints on email/username raise DuplicateUser."""
    user = models.User(
        email=schemas.normalize_email(email),
        username=username,
        password_hash=password_hash,
    )
    db.add(user)
    try:
        _commit(db)
    except IntegrityError as exc:
        raise errors.DuplicateUser() from exc
    db.refresh(user)
    return user


# -----------------------------------------------------------------------------
# TASKS
# -----------------------------------------------------------------------------
def _owned_tasks(db: Session, owner_id: int) -> Query:
    """Base query for every task operation: rows owned by ``owner_id`` only."""
    return db.query(models.Task).filter(models.Task.user_id == owner_id)


def list_tasks_for_owner(db: Session, owner_id: int, status: Optional[str] = None) -> list[models.Task]:
    """Return the owner's tasks, newest first."""
    q = _owned_tasks(db, owner_id)
    if status:
        q = q.filter(models.Task.status == status)
    return q.order_by(desc(models.Task.created_at), desc(models.Task.id)).all()


def get_task(db: Session, owner_id: int, task_id: int) -> models.Task | None:
    """Return the task if it exists and belongs to ``owner_id``."""
    return _owned_tasks(db, owner_id).filter(models.Task.id == task_id).first()


def create_task(db: Session, owner_id: int, task_in: schemas.TaskCreate) -> models.Task:
    """Create a task owned by ``owner_id``."""
    now = models.utcnow()
    obj = models.Task(
        title=task_in.title,
        description=task_in.description,
        status=task_in.status,
        user_id=owner_id,
        created_at=now,
        updated_at=now,
    )
    db.add(obj)
    _commit(db)
    db.refresh(obj)
    return obj


def update_task(db: Session, owner_id: int, task_id: int, task_in: schemas.TaskUpdate) -> models.Task | None:
    """Apply the supplied fields in a single owner-scoped UPDATE.

    Returns the updated task, or None when no row matched (missing or not owned).
    """
    values = task_in.changes()
    values["updated_at"] = models.utcnow()
    matched = (
        _owned_tasks(db, owner_id)
        .filter(models.Task.id == task_id)
        .update(values, synchronize_session=False)
    )
    if not matched:
        db.rollback()
        return None
    _commit(db)
    return get_task(db, owner_id, task_id)


def delete_task(db: Session, owner_id: int, task_id: int) -> bool:
    """Delete in a single owner-scoped DELETE; True if a row was removed."""
    removed = (
        _owned_tasks(db, owner_id)
        .filter(models.Task.id == task_id)
        .delete(synchronize_session=False)
    )
    if not removed:
        db.rollback()
        return False
    _commit(db)
    return True
