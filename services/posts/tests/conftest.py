"""
Pytest configuration and fixtures for Post Service tests.

Each test function gets freshly created tables in the in-memory database
and an application consuming from an InMemorySubscriber.
"""

from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from services.posts.database import Base, SessionLocal, engine
from services.posts.main import app
from services.posts.models import Post
from services.posts.shadow_store import ShadowUserStore
from shared.events.payloads.users import UserDeleteEvent, UserSignupEvent


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
def store(db_session: Session) -> ShadowUserStore:
    """Provide a shadow user store over the test tables."""
    return ShadowUserStore(SessionLocal)


# --- Test Data Factories ---

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def signup_event():
    """Factory for signup events with a controllable timestamp."""
    def _signup_event(
        user_id: str = "user-1",
        email: str = "a@b.com",
        name: str = "alice",
        minutes: int = 0,
    ) -> UserSignupEvent:
        return UserSignupEvent(
            user_id=user_id,
            email=email,
            name=name,
            occurred_at=BASE_TIME + timedelta(minutes=minutes),
        )

    return _signup_event


@pytest.fixture
def delete_event():
    """Factory for delete events with a controllable timestamp."""
    def _delete_event(user_id: str = "user-1", minutes: int = 0) -> UserDeleteEvent:
        return UserDeleteEvent(
            user_id=user_id,
            occurred_at=BASE_TIME + timedelta(minutes=minutes),
        )

    return _delete_event


@pytest.fixture
def create_post(db_session: Session):
    """
    Factory fixture to insert a post directly into the database.

    Posts are created through the database because the service does not
    route post creation.
    """
    def _create_post(
        title: str = "Hello",
        content: str = "First post",
        user_id: str = "user-1",
        minutes: int = 0,
    ) -> Post:
        post = Post(
            title=title,
            content=content,
            user_id=user_id,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _create_post
