"""Shared pytest fixtures for emitrack tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import jwt
import pytest

from emitrack.database.factories import create_database
from emitrack.domain.emi import EmiService
from emitrack.domain.reconciler import EmiReconciler
from emitrack.domain.transaction import TransactionService

TEST_USER = "user-1"
OTHER_USER = "user-2"
TEST_SECRET = "emitrack-test-secret-0123456789abcdef"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def emi_service(temp_db):
    """Create an EmiService with a temporary database."""
    return EmiService(temp_db)


@pytest.fixture
def reconciler(temp_db, emi_service):
    """Create an EmiReconciler sharing the EMI service."""
    return EmiReconciler(temp_db, emi_service=emi_service)


@pytest.fixture
def transaction_service(temp_db, reconciler):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db, reconciler=reconciler)


@pytest.fixture
def phone_loan(emi_service):
    """A 12 x 1000 installment loan starting 2024-01-15."""
    return emi_service.create_emi(
        user_id=TEST_USER,
        name="Phone Loan",
        emi_type="mobile_emi",
        payment_type="emi",
        emi_amount=Decimal("1000"),
        start_date=date(2024, 1, 15),
        total_installments=12,
    )


@pytest.fixture
def subscription(emi_service):
    """A monthly streaming subscription starting 2024-01-01."""
    return emi_service.create_emi(
        user_id=TEST_USER,
        name="Netflix",
        emi_type="subscription",
        payment_type="subscription",
        emi_amount=Decimal("649"),
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


def make_token(user_id: str = TEST_USER, secret: str = TEST_SECRET) -> str:
    """Sign a bearer token for a user."""
    return jwt.encode({"sub": user_id}, secret, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Authorization headers for the default test user."""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_auth_headers():
    """Authorization headers for a second user."""
    return {"Authorization": f"Bearer {make_token(OTHER_USER)}"}


@pytest.fixture
def api_client(temp_db):
    """Create a FastAPI test client on the temporary database."""
    from fastapi.testclient import TestClient

    from emitrack.api.app import create_app

    app = create_app(database=temp_db, secret_key=TEST_SECRET)
    with TestClient(app) as client:
        yield client
