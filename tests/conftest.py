"""Pytest configuration and fixtures."""

import os

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"].rsplit("/", 1)[0] + "/projects_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

# Must be set before the app reads its settings
os.environ.setdefault("DATABASE_URL", SQLALCHEMY_DATABASE_URL)
os.environ.setdefault("BCRYPT_ROUNDS", "4")  # cheap hashes
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src import models  # noqa: E402, F401
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402

DEFAULT_PASSWORD = "secret123"


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's details."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        email: str | None = None,
        username: str | None = None,
        token: str | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.username = username
        self.token = token


connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _register(client, username: str, email: str | None = None, password: str = DEFAULT_PASSWORD):
    """Register a user through the API and return auth headers for them."""
    email = email or f"{username.lower()}@example.com"
    response = client.post(
        "/v1/register",
        json={
            "name": username.title(),
            "email": email,
            "username": username,
            "password": password,
            "password_confirmation": password,
        },
    )
    assert response.status_code == 201, response.json()
    data = response.json()

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=email,
        username=username,
        token=data["token"],
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return _register(client, "test_user", email="test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return _register(client, "other_user", email="other@example.com")


@pytest.fixture
def register_user(client):
    """Factory fixture: ``register_user("alice")`` registers and returns auth headers."""

    def _factory(username: str, email: str | None = None, password: str = DEFAULT_PASSWORD):
        return _register(client, username, email=email, password=password)

    return _factory
