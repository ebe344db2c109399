"""Shared fixtures: in-memory database, API test client, logged-in users."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from taskmanager.main import app, get_session
from taskmanager.client import ApiClient, TokenStore


@pytest.fixture(name="test_engine")
def test_engine_fixture():
    """Create a test database engine."""
    # One shared connection so the worker threads see the same in-memory DB
    test_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    return test_engine


@pytest.fixture(name="session")
def session_fixture(test_engine):
    """Create a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    """Create a test client with dependency overrides."""
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(client):
    """Register and log in a user; returns its credentials and token."""
    user_data = {
        "name": "Test User",
        "email": "test@example.com",
        "password": "testpassword123",
    }

    response = client.post("/register", json=user_data)
    assert response.status_code == 201

    response = client.post("/login", json={
        "email": user_data["email"],
        "password": user_data["password"],
    })
    assert response.status_code == 200
    token = response.json()["token"]

    return {**user_data, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture(name="api")
def api_fixture(client, test_user):
    """ApiClient talking to the in-process app with the test user's token."""
    return ApiClient("http://testserver", TokenStore(test_user["token"]), session=client)
