"""
Database initialization script.

Creates the users table if it does not exist.

Usage:
    python scripts/init_db.py
"""

import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.db.repositories.user import UserRepository
from app.db.session import Database

logger = logging.getLogger("init_db")

if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    database = Database(settings)
    try:
        init_db(database)
        with database.session() as session:
            total = UserRepository(session).count()
        logger.info("Database initialized, users in table: %d", total)
    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        database.dispose()
