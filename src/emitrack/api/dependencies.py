"""Per-request database and service wiring."""

from typing import Iterator

from fastapi import Depends, Request

from emitrack.database.sqlalchemy_db import SQLAlchemyDatabase
from emitrack.domain.emi import EmiService
from emitrack.domain.transaction import TransactionService


def get_db(request: Request) -> Iterator[SQLAlchemyDatabase]:
    """Open a session on the app's engine for the duration of one request."""
    shared = request.app.state.database
    db = SQLAlchemyDatabase(shared.database_url, session_factory=shared.session_factory)
    try:
        yield db
    finally:
        db.disconnect()


def get_emi_service(db: SQLAlchemyDatabase = Depends(get_db)) -> EmiService:
    return EmiService(db)


def get_transaction_service(db: SQLAlchemyDatabase = Depends(get_db)) -> TransactionService:
    return TransactionService(db)
