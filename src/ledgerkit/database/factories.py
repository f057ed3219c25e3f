"""Database factory functions for creating ledger database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from ledgerkit.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DATABASE_URL_ENV = "LEDGERKIT_DATABASE_URL"
DATABASE_PATH_ENV = "LEDGERKIT_DB_PATH"
DEFAULT_LEDGER_DIR = Path("~/.ledgerkit")
DEFAULT_LEDGER_FILE = "ledgerkit.db"


def resolve_ledger_path(database_path: Optional[str] = None) -> Path:
    """Return the SQLite ledger file, creating its directory if needed.

    ``database_path`` wins over LEDGERKIT_DB_PATH, which wins over
    ``~/.ledgerkit/ledgerkit.db``. A leading ``~`` is expanded.
    """
    if database_path is None:
        database_path = os.environ.get(DATABASE_PATH_ENV)

    if database_path is None:
        path = DEFAULT_LEDGER_DIR.expanduser() / DEFAULT_LEDGER_FILE
    else:
        path = Path(database_path).expanduser()

    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a ledger stored in a SQLite file.

    Args:
        database_path: Path to SQLite database file. If None, checks LEDGERKIT_DB_PATH
            environment variable, then defaults to ~/.ledgerkit/ledgerkit.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_ledger_path(database_path)
    logger.debug("Opening ledger at %s", path)
    return SQLAlchemyDatabase(f"sqlite:///{path}")


def create_database(database_path: Optional[str] = None, database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a ledger database from the command line or environment settings.

    An explicit ``database_path`` selects a SQLite file. Otherwise a
    SQLAlchemy URL from ``database_url`` or LEDGERKIT_DATABASE_URL (e.g. a
    PostgreSQL server shared by several users) takes precedence over the
    SQLite defaults.

    Args:
        database_path: Optional SQLite database file
        database_url: Optional SQLAlchemy database URL

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_path is None:
        database_url = database_url or os.environ.get(DATABASE_URL_ENV)
        if database_url:
            logger.debug("Opening ledger at %s", database_url)
            return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path)
