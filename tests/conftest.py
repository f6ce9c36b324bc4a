"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped
after, so every test starts from an empty ledger.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from atm_system.api.dependencies import get_service
from atm_system.main import app
from atm_system.models import Base
from atm_system.models.base import make_session_factory
from atm_system.repositories.account_repository import AccountRepository
from atm_system.services.account_service import AccountService


# Use SQLite for tests, no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    return make_session_factory(engine=engine)


@pytest.fixture
def repository(session_factory):
    return AccountRepository(session_factory)


@pytest.fixture
def service(repository):
    return AccountService(repository)


@pytest.fixture
def alice(service):
    """An active customer account with 1000.00, login alice / 12345."""
    return service.create_customer_account(
        "alice", "12345", "Alice", Decimal("1000.00")
    )


@pytest.fixture
def admin(service):
    """An administrator, login admin / 54321."""
    service.provision_administrator("admin", "54321", "Bank Admin")
    return ("admin", "54321")


@pytest.fixture
def client(service):
    """
    Provide a test client wired to the test database.

    We override the get_service dependency so the FastAPI app
    uses our repository instead of the configured database.
    """
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
