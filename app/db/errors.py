"""
Storage failure classification.

Repositories run their statements inside ``storage_errors(session)``. Any
SQLAlchemy failure is rolled back and re-raised as a ``UserServiceError``
tagged with the matching ``ErrorKind``, so nothing above the repository ever
sees a raw driver exception.

Integrity errors are classified from the PostgreSQL SQLSTATE when the driver
exposes one (``orig.pgcode`` / ``orig.sqlstate``) and from the message text
otherwise (SQLite, MySQL).
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Generator, Optional

from sqlalchemy import exc as sa_exc
from sqlmodel import Session

from app.core.exceptions import ErrorKind, UserServiceError

logger = logging.getLogger(__name__)


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"
    QUERY_CANCELED = "57014"


PGCODE_KIND_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: ErrorKind.DUPLICATE_EMAIL,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ErrorKind.INVALID_REFERENCE,
    PostgresErrorCodes.CHECK_VIOLATION: ErrorKind.CONSTRAINT_VIOLATION,
    PostgresErrorCodes.NOT_NULL_VIOLATION: ErrorKind.CONSTRAINT_VIOLATION,
}

# Checked in order; the first match wins
MESSAGE_KIND_RULES = [
    (("unique constraint", "unique failed", "unique violation", "duplicate"), ErrorKind.DUPLICATE_EMAIL),
    (("foreign key",), ErrorKind.INVALID_REFERENCE),
    (("check constraint", "check failed"), ErrorKind.CONSTRAINT_VIOLATION),
    (("not null", "null value in column"), ErrorKind.CONSTRAINT_VIOLATION),
]

TIMEOUT_MARKERS = ("timeout", "timed out", "canceling statement")


def _sqlstate(orig) -> Optional[str]:
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def classify_integrity_error(exc: sa_exc.IntegrityError) -> ErrorKind:
    """Map a constraint violation to the error kind reported to clients."""
    pgcode = _sqlstate(exc.orig)
    if pgcode:
        kind = PGCODE_KIND_MAP.get(pgcode)
        if kind is not None:
            return kind
        logger.warning("Unknown Postgres integrity error code encountered: %s", pgcode)
        return ErrorKind.CONSTRAINT_VIOLATION

    normalized = str(exc.orig).lower()
    for keywords, kind in MESSAGE_KIND_RULES:
        if any(keyword in normalized for keyword in keywords):
            return kind

    logger.warning("Unknown integrity error message encountered: %s", normalized[:200])
    return ErrorKind.CONSTRAINT_VIOLATION


def classify_operational_error(exc: sa_exc.DBAPIError) -> ErrorKind:
    """Tell a storage timeout apart from an unreachable database."""
    if _sqlstate(exc.orig) == PostgresErrorCodes.QUERY_CANCELED:
        return ErrorKind.STORAGE_TIMEOUT
    normalized = str(exc.orig).lower()
    if any(marker in normalized for marker in TIMEOUT_MARKERS):
        return ErrorKind.STORAGE_TIMEOUT
    return ErrorKind.STORAGE_UNAVAILABLE


def classify_storage_error(exc: sa_exc.SQLAlchemyError) -> ErrorKind:
    """Single entry point: any SQLAlchemy exception -> ErrorKind."""
    if isinstance(exc, sa_exc.IntegrityError):
        return classify_integrity_error(exc)
    if isinstance(exc, sa_exc.TimeoutError):
        # Pool exhausted: no connection became free within pool_timeout
        return ErrorKind.STORAGE_TIMEOUT
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.InterfaceError)):
        return classify_operational_error(exc)
    if isinstance(exc, sa_exc.DisconnectionError):
        return ErrorKind.STORAGE_UNAVAILABLE
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return ErrorKind.STORAGE_UNAVAILABLE
    return ErrorKind.INTERNAL


def _rollback(session: Session, operation: str) -> None:
    try:
        session.rollback()
    except sa_exc.SQLAlchemyError:
        logger.exception("Failed to rollback session after %s error", operation)


@contextmanager
def storage_errors(session: Session, operation: str) -> Generator[None, None, None]:
    """
    Usage:
        with storage_errors(self.session, "create"):
            ... statements that may fail ...

    Rolls back on failure and raises a UserServiceError of the classified kind.
    """
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        _rollback(session, operation)
        kind = classify_storage_error(exc)

        if kind in (ErrorKind.DUPLICATE_EMAIL, ErrorKind.INVALID_REFERENCE, ErrorKind.CONSTRAINT_VIOLATION):
            logger.warning("users.%s rejected by constraint: %s", operation, kind.code)
            raise UserServiceError(kind=kind) from exc
        if kind in (ErrorKind.STORAGE_UNAVAILABLE, ErrorKind.STORAGE_TIMEOUT):
            logger.error("users.%s storage failure (%s): %s", operation, kind.code, exc.__class__.__name__)
            raise UserServiceError(kind=kind) from exc

        logger.exception("Unexpected database error during users.%s", operation)
        # Hidden behind a generic message in production by the error handler
        detail = getattr(exc, "orig", None) or exc
        raise UserServiceError(f"Database error during {operation}: {detail}", kind=ErrorKind.INTERNAL) from exc
