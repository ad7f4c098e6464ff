"""Database layer for emitrack application."""

from emitrack.database.base import Database
from emitrack.database.factories import create_database
from emitrack.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = ["Database", "SQLAlchemyDatabase", "create_database"]
