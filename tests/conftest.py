"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient

from audiobook.database import Base, Database, get_db
from audiobook.main import app
from audiobook.models.enums import UserRole
from audiobook.models.user import User
from audiobook.services.uploads import UploadService, get_upload_service


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/audiobooks", "/audiobooks_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

test_database = Database(SQLALCHEMY_DATABASE_URL)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    test_database.connect()
    test_database.create_all()
    # The app lifespan keeps a handle it finds already installed
    app.state.database = test_database
    yield
    del app.state.database
    test_database.close()


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = test_database.session()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def database():
    """The test database handle, for tests that open their own sessions."""
    return test_database


@pytest.fixture
def upload_dir(tmp_path):
    """Directory that stands in for the configured upload root."""
    return tmp_path / "uploads"


@pytest.fixture(scope="function")
def client(db, upload_dir):
    """Create a test client with database and upload directory overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_upload_service] = lambda: UploadService(upload_dir)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _signup(client, email: str, name: str) -> AuthHeaders:
    response = client.post(
        "/auth/signup",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    data = response.json()
    token = data["access_token"]
    user_id = data["user"]["id"]

    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user_id, email=email)


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return _signup(client, "test@example.com", "Test User")


@pytest.fixture
def admin_headers(client, db):
    """Create an admin user and return auth headers with user info."""
    headers = _signup(client, "admin@example.com", "Admin User")
    db.query(User).filter(User.id == headers.user_id).update({User.role: UserRole.ADMIN.value})
    db.commit()
    return headers


@pytest.fixture
def create_book(client, admin_headers):
    """Factory that creates a book through the admin API and returns its JSON."""

    def _create(**fields):
        payload = {"title": "Test Book", "duration": 60}
        payload.update(fields)
        response = client.post("/books", headers=admin_headers, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
