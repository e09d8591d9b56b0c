"""
Test fixtures: an in-memory SQLite database injected into the app through
the get_db dependency, and helpers to register users.
"""

import os

# Cheap bcrypt and a fixed secret; must be set before the app is imported.
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.database import get_db
from src.api.main import app
from src.api.models import Base, User
from src.api.auth import get_password_hash

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture()
def db_session():
    """A session on fresh tables, dropped after the test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture()
def client(db_session):
    def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def register(client, email, password="secret123", name="Test User"):
    """Register a user and return bearer headers for them.

    The auth cookie set by the response is cleared so later requests only
    authenticate through the headers they pass.
    """
    response = client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def alice(client):
    return register(client, "alice@example.com", name="Alice")


@pytest.fixture()
def bob(client):
    return register(client, "bob@example.com", name="Bob")


@pytest.fixture()
def make_user(db_session):
    """Insert a user row directly, for service-level tests."""
    def _make_user(email, name="Test User"):
        user = User(name=name, email=email, password_hash=get_password_hash("secret123"))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def register_user(client):
    def _register_user(email, password="secret123", name="Test User"):
        return register(client, email, password=password, name=name)

    return _register_user
