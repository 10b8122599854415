"""
Database initialization.

Creates the users table when it does not exist yet.
"""

import logging
from typing import Optional

from sqlalchemy import inspect
from sqlmodel import SQLModel

from app.db.session import Database

logger = logging.getLogger(__name__)


def init_db(database: Optional[Database] = None) -> None:
    """
    Initialize database schema.

    - Creates all SQLModel tables (existing tables are left untouched)
    """

    # Import all models so SQLModel.metadata has them
    from app.db import base  # noqa: F401

    owned = database is None
    database = database or Database()
    try:
        SQLModel.metadata.create_all(database.engine)
        tables = inspect(database.engine).get_table_names()
        logger.info("Database tables ready: %s", ", ".join(sorted(tables)))
    finally:
        if owned:
            database.dispose()


if __name__ == "__main__":
    init_db()
