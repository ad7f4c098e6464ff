"""FastAPI application factory and error envelope."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from emitrack.api import emis, transactions
from emitrack.api.auth import get_secret_key
from emitrack.database.factories import create_database
from emitrack.database.sqlalchemy_db import SQLAlchemyDatabase
from emitrack.domain.errors import (
    DomainError,
    InternalError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = (
    (ValidationError, 400),
    (InvalidStateError, 400),
    (UnauthorizedError, 401),
    (NotFoundError, 404),
    (InternalError, 500),
)
INTERNAL_ERROR_MESSAGE = "Internal server error"


def status_code_for(error: DomainError) -> int:
    for error_cls, code in ERROR_STATUS_CODES:
        if isinstance(error, error_cls):
            return code
    return 400


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=code, content={"success": False, "message": INTERNAL_ERROR_MESSAGE}
        )

    content = {"success": False, "message": str(exc)}
    field = getattr(exc, "field", None)
    if field is not None:
        content["errors"] = [{"field": field, "message": str(exc)}]
    return JSONResponse(status_code=code, content=content)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query" prefix from the location
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({"field": ".".join(location), "message": error.get("msg", "")})
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500, content={"success": False, "message": INTERNAL_ERROR_MESSAGE}
    )


def create_app(
    database: Optional[SQLAlchemyDatabase] = None, secret_key: Optional[str] = None
) -> FastAPI:
    """Build the API application.

    Args:
        database: Database whose engine requests share (defaults to the
            database configured by EMITRACK_DB_PATH or EMITRACK_DATABASE_URL)
        secret_key: Token verification secret (defaults to EMITRACK_SECRET_KEY)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(title="emitrack", description="EMI and ledger tracking API")
    app.state.database = database or create_database()
    app.state.secret_key = secret_key or get_secret_key()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(emis.router)
    app.include_router(transactions.router)

    @app.get("/")
    def read_root():
        return {
            "success": True,
            "message": "Welcome to the emitrack API",
            "endpoints": {"health": "/health", "emis": "/emis", "transactions": "/transactions"},
        }

    @app.get("/health")
    def health():
        return {"status": "OK", "message": "emitrack API is running"}

    return app
