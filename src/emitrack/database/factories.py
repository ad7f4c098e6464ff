"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from emitrack.database.models import create_session_factory
from emitrack.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "EMITRACK_DB_PATH"
DATABASE_URL_ENV = "EMITRACK_DATABASE_URL"
SQL_ECHO_ENV = "EMITRACK_SQL_ECHO"
TRUTHY = {"1", "true", "yes", "on"}


def default_database_path() -> str:
    """~/.emitrack/emitrack.db, creating the directory if needed."""
    db_dir = Path.home() / ".emitrack"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "emitrack.db")


def resolve_database_url(database_path: Optional[str] = None) -> str:
    """Pick the database URL from an explicit path or the environment.

    Precedence: ``database_path``, then EMITRACK_DB_PATH, then
    EMITRACK_DATABASE_URL (any SQLAlchemy URL), then the default SQLite file.
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)
    if database_path is None:
        database_url = os.environ.get(DATABASE_URL_ENV)
        if database_url:
            return database_url
        database_path = default_database_path()
    return f"sqlite:///{database_path}"


def sql_echo_enabled() -> bool:
    return os.environ.get(SQL_ECHO_ENV, "").strip().lower() in TRUTHY


def create_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance from configuration.

    Args:
        database_path: Path to a SQLite database file. If None, the location
            comes from the environment (see resolve_database_url)

    Returns:
        SQLAlchemyDatabase instance, echoing SQL when EMITRACK_SQL_ECHO is set
    """
    database_url = resolve_database_url(database_path)
    session_factory = create_session_factory(database_url, echo=sql_echo_enabled())
    return SQLAlchemyDatabase(database_url, session_factory=session_factory)
