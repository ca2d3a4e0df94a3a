"""Domain errors and their client-visible form.

Every error carries an HTTP status and a ``detail`` string that is safe to
show to any caller. Several of them are intentionally vague: a caller must
not be able to tell "no such user" from "wrong password", an expired token
from a forged one, or a missing task from somebody else's task.
"""

from typing import Any, Dict, Iterable, Optional


class TaskTrackerError(Exception):
    """Base class for errors that map to a structured HTTP response."""

    status_code: int = 400
    detail: str = "Bad request"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)

    def to_body(self) -> Dict[str, Any]:
        return {"detail": self.detail}


class ValidationError(TaskTrackerError):
    """Malformed input, one message per offending field."""

    status_code = 422
    detail = "Validation failed"

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__()

    def to_body(self) -> Dict[str, Any]:
        return {"detail": self.detail, "errors": self.errors}

    @classmethod
    def from_pydantic(cls, errors: Iterable[Dict[str, Any]]) -> "ValidationError":
        """Collapse pydantic's error list into ``{field: message}``.

        The first message per field wins; the ``body``/``query`` location
        prefix is dropped.
        """
        fields: Dict[str, str] = {}
        for err in errors:
            loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
            field = ".".join(loc) or "body"
            msg = str(err.get("msg", "Invalid value"))
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            fields.setdefault(field, msg)
        return cls(fields)


class DuplicateUser(TaskTrackerError):
    status_code = 409
    detail = "User already exists"


class InvalidCredentials(TaskTrackerError):
    status_code = 401
    detail = "Invalid credentials"


class Unauthenticated(TaskTrackerError):
    status_code = 401
    detail = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class NotFound(TaskTrackerError):
    status_code = 404
    detail = "Not found"


class InternalFailure(TaskTrackerError):
    """Unexpected store or crypto fault. Details go to the log only."""

    status_code = 500
    detail = "Internal server error"
