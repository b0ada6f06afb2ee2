"""
Pytest configuration and fixtures for User Service tests.

Each test function gets freshly created tables in the in-memory database
and an application whose event publisher is an InMemoryPublisher.
"""

from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from services.users.database import Base, SessionLocal, engine
from services.users.main import app
from shared.events.publisher import InMemoryPublisher


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, Any, None]:
    """
    Provide a database session over freshly created tables.

    Tables are dropped after the test, ensuring complete isolation
    between tests.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, Any, None]:
    """Provide a FastAPI test client running the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def publisher(client: TestClient) -> InMemoryPublisher:
    """The in-memory publisher the running application publishes to."""
    return app.state.broker_publisher


# --- Test Data Factories ---


@pytest.fixture
def user_data() -> dict[str, str]:
    """Provide default user signup data."""
    return {
        "email": "a@b.com",
        "name": "alice",
        "password": "abc123!",
    }


@pytest.fixture
def create_user(client: TestClient, user_data: dict[str, str]):
    """
    Factory fixture to sign up a user and return their data.

    Returns a function that creates users with optional custom data.
    """
    def _create_user(
        email: str | None = None,
        name: str | None = None,
        password: str | None = None,
    ) -> dict[str, Any]:
        data = {
            "email": email or user_data["email"],
            "name": name or user_data["name"],
            "password": password or user_data["password"],
        }
        response = client.post("/api/v1/users/signup", json=data)
        assert response.status_code == 201
        return {**response.json()["result"], "password": data["password"]}

    return _create_user
