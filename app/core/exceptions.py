"""
Application error taxonomy.

Every failure the API reports is one ``ErrorKind``. Services and repositories
raise ``UserServiceError`` (or a subclass) tagged with the kind at the point
where the failure is understood; ``app.api.errors`` renders it.
"""

from enum import Enum
from typing import Iterable, Optional


class ErrorKind(str, Enum):
    """Stable external error kinds: (code, HTTP status, label)."""

    VALIDATION = ("VALIDATION_ERROR", 400, "Invalid data")
    DUPLICATE_EMAIL = ("DUPLICATE_EMAIL", 409, "Duplicate email")
    NOT_FOUND = ("USER_NOT_FOUND", 404, "User not found")
    INVALID_SEARCH_TERM = ("INVALID_SEARCH_TERM", 400, "Invalid search term")
    INVALID_REFERENCE = ("INVALID_REFERENCE", 400, "Invalid reference")
    CONSTRAINT_VIOLATION = ("CONSTRAINT_VIOLATION", 400, "Invalid data")
    STORAGE_UNAVAILABLE = ("DATABASE_CONNECTION_ERROR", 503, "Service unavailable")
    STORAGE_TIMEOUT = ("TIMEOUT_ERROR", 504, "Timeout")
    MALFORMED_BODY = ("INVALID_JSON", 400, "Invalid JSON")
    PAYLOAD_TOO_LARGE = ("FILE_TOO_LARGE", 413, "Payload too large")
    ROUTE_NOT_FOUND = ("NOT_FOUND", 404, "Endpoint not found")
    METHOD_NOT_ALLOWED = ("METHOD_NOT_ALLOWED", 405, "Method not allowed")
    DELETE_FAILED = ("DELETE_ERROR", 500, "Delete failed")
    INTERNAL = ("INTERNAL_SERVER_ERROR", 500, "Internal server error")

    def __new__(cls, code: str, status_code: int, label: str):
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.status_code = status_code
        obj.label = label
        return obj

    @property
    def code(self) -> str:
        return self.value


# Messages used when the raiser has nothing more specific to say
DEFAULT_MESSAGES = {
    ErrorKind.VALIDATION: "The submitted data is not valid",
    ErrorKind.DUPLICATE_EMAIL: "Email is already registered",
    ErrorKind.NOT_FOUND: "User not found",
    ErrorKind.INVALID_SEARCH_TERM: "Search term must be at least 2 characters long",
    ErrorKind.INVALID_REFERENCE: "The referenced record does not exist",
    ErrorKind.CONSTRAINT_VIOLATION: "The submitted data violates database constraints",
    ErrorKind.STORAGE_UNAVAILABLE: "Cannot connect to the database",
    ErrorKind.STORAGE_TIMEOUT: "The operation took too long",
    ErrorKind.MALFORMED_BODY: "Request body is not valid JSON",
    ErrorKind.PAYLOAD_TOO_LARGE: "Request body exceeds the allowed size",
    ErrorKind.ROUTE_NOT_FOUND: "The requested route does not exist",
    ErrorKind.METHOD_NOT_ALLOWED: "The method is not allowed on this route",
    ErrorKind.DELETE_FAILED: "The user could not be deleted",
    ErrorKind.INTERNAL: "Internal server error",
}


class UserServiceError(Exception):
    """
    Base exception for every reportable failure.

    - kind: the ErrorKind deciding status, code and label
    - message: human-friendly message (safe to show to clients)
    - details: optional list of per-field messages (validation only)
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: Optional[str] = None, *, kind: Optional[ErrorKind] = None,
                 details: Optional[Iterable[str]] = None):
        if kind is not None:
            self.kind = kind
        self.message = message or DEFAULT_MESSAGES[self.kind]
        self.details = list(details) if details is not None else None
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def __str__(self) -> str:
        return f"{self.message} (code: {self.kind.code})"


class DuplicateEmail(UserServiceError):
    kind = ErrorKind.DUPLICATE_EMAIL


class UserNotFound(UserServiceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"No user found with ID {user_id}")


class InvalidSearchTerm(UserServiceError):
    kind = ErrorKind.INVALID_SEARCH_TERM


class DeleteFailed(UserServiceError):
    kind = ErrorKind.DELETE_FAILED


__all__ = [
    "ErrorKind",
    "UserServiceError",
    "DuplicateEmail",
    "UserNotFound",
    "InvalidSearchTerm",
    "DeleteFailed",
]
