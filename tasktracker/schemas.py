"""Pydantic schemas for users, authentication, and tasks.

These classes define request and response models used by the FastAPI endpoints:
- UserCreate / LoginRequest / UserOut / AuthOut
- TaskCreate / TaskUpdate / TaskOut
- Message

Field rules live here so that every malformed body is rejected before it
reaches a service function.
"""

from datetime import datetime, timezone
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .models import TITLE_MAX_LENGTH


def normalize_email(email: str) -> str:
    """Case-fold and trim an email address."""
    return (email or "").strip().lower()


# ---------- Users ----------
class UserCreate(BaseModel):
    """Payload for registering a new user."""
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    username: str = Field(min_length=3, max_length=50)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """Credentials for login.

    The email is deliberately a plain string: a malformed address simply
    fails to match, so login never answers with anything but success or
    invalid credentials.
    """
    email: str
    password: str


class UserOut(BaseModel):
    """Public representation of a user."""
    id: int
    email: str
    username: str

    model_config = ConfigDict(from_attributes=True)


# ---------- Auth ----------
class AuthOut(BaseModel):
    """Bearer token plus the user it identifies."""
    token: str
    user: UserOut


# ---------- Tasks ----------
TaskStatus = Literal["pending", "completed"]


def _clean_title(v: str) -> str:
    title = v.strip()
    if not title:
        raise ValueError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return title


class TaskCreate(BaseModel):
    """Payload for creating a task. The owner always comes from the token."""
    title: str
    description: str = ""
    status: TaskStatus = "pending"

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class TaskUpdate(BaseModel):
    """Partial update; fields left out of the body keep their value."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Title cannot be null")
        return _clean_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("status")
    @classmethod
    def _status(cls, v):
        if v is None:
            raise ValueError("Status cannot be null")
        return v

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class TaskOut(BaseModel):
    """Representation of a task returned by the API."""
    id: int
    user_id: int
    title: str
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # Stored as UTC; SQLite hands them back without tzinfo.
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)


class Message(BaseModel):
    detail: str
