"""Pytest fixtures: in-memory database, API client and user helpers."""

import os
import tempfile

# Must be set before archivo.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_MEDIA_PATH"] = tempfile.mkdtemp(prefix="archivo-test-uploads-")
os.environ["BASE_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient

import archivo.models  # noqa: F401
from archivo.auth import register_user
from archivo.database import Base, SessionLocal, engine

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    """A plain session for store-level tests."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Create users directly in the database."""

    def _make(username: str, display_name: str | None = None):
        return register_user(
            db,
            username=username,
            password=DEFAULT_PASSWORD,
            display_name=display_name or username.title(),
        )

    return _make


@pytest.fixture
def client():
    from archivo.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """
    Register through the API. Returns (user_json, headers) where headers
    carry a bearer token, so several users can share one client.
    """

    def _signup(username: str, display_name: str | None = None):
        response = client.post(
            "/api/register",
            json={
                "username": username,
                "password": DEFAULT_PASSWORD,
                "display_name": display_name or username.title(),
            },
        )
        assert response.status_code == 200, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}

    return _signup
