"""
Database session management.

``Database`` owns the SQLModel engine and its bounded connection pool. The
application creates one at startup, stores it on ``app.state.db`` and
disposes of it at shutdown; routes receive a session through ``get_db``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, text

from app.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _engine_options(config: Settings) -> dict[str, Any]:
    url = make_url(config.DATABASE_URL)
    options: dict[str, Any] = {"echo": config.DEBUG}  # Log SQL queries in debug mode

    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
        return options

    connect_args: dict[str, Any] = {"connect_timeout": config.DATABASE_CONNECT_TIMEOUT}
    if config.DATABASE_STATEMENT_TIMEOUT_MS > 0:
        connect_args["options"] = f"-c statement_timeout={config.DATABASE_STATEMENT_TIMEOUT_MS}"

    options.update(
        connect_args=connect_args,
        pool_pre_ping=True,                          # Verify connections before using
        pool_size=config.DATABASE_POOL_SIZE,         # Connection pool size
        max_overflow=config.DATABASE_MAX_OVERFLOW,   # Max connections beyond pool_size
        pool_timeout=config.DATABASE_POOL_TIMEOUT,
        pool_recycle=config.DATABASE_POOL_RECYCLE,
    )
    return options


class Database:
    """Engine owner: hands out sessions and releases the pool on shutdown."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.engine = create_engine(self.config.DATABASE_URL, **_engine_options(self.config))

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a session whose connection goes back to the pool on exit."""
        with Session(self.engine) as session:
            yield session

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        logger.info("Database connection pool closed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Yields:
        SQLModel Session bound to the application's Database

    Example:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.db
    with database.session() as session:
        yield session
