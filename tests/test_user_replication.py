"""End-to-end user replication from the User Service to the Post Service.

The User Service's in-memory publisher is wired straight into the Post
Service's subscriber, so every published body goes through the same decode,
dispatch and shadow-store path a RabbitMQ delivery would.
"""

import asyncio
import json
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from services.posts import database as posts_db
from services.posts.main import app as posts_app
from services.posts.models import Post
from services.users import database as users_db
from services.users.main import app as users_app
from shared.events.publisher import InMemoryPublisher

SIGNUP = {"email": "a@b.com", "name": "alice", "password": "abc123!"}


@pytest.fixture
def databases() -> Generator[None, Any, None]:
    """Create fresh tables for both services."""
    for db in (users_db, posts_db):
        db.Base.metadata.drop_all(bind=db.engine)
        db.Base.metadata.create_all(bind=db.engine)
    yield
    for db in (users_db, posts_db):
        db.Base.metadata.drop_all(bind=db.engine)


@pytest.fixture
def posts_client(databases) -> Generator[TestClient, Any, None]:
    with TestClient(posts_app) as client:
        yield client


@pytest.fixture
def users_client(posts_client: TestClient) -> Generator[TestClient, Any, None]:
    """User Service client whose published events reach the Post Service."""
    with TestClient(users_app) as client:
        users_app.state.broker_publisher.subscribe(
            posts_app.state.user_subscriber.process_body
        )
        yield client


@pytest.fixture
def publisher(users_client: TestClient) -> InMemoryPublisher:
    """The User Service publisher; its messages are the wire bodies in order."""
    return users_app.state.broker_publisher


@pytest.fixture
def shadow_store(posts_client: TestClient):
    return posts_app.state.shadow_store


def create_post(user_id: str) -> str:
    with posts_db.SessionLocal() as session:
        post = Post(title="Hello", content="First post", user_id=user_id)
        session.add(post)
        session.commit()
        return post.id


class TestUserReplication:
    """Scenarios spanning both services."""

    def test_signup_replicates_user(self, users_client, publisher, shadow_store):
        """Test a signup publishes one event and creates one shadow record."""
        response = users_client.post("/api/v1/users/signup", json=SIGNUP)

        assert response.status_code == 201
        user_id = response.json()["result"]["id"]

        assert len(publisher.messages) == 1
        message = publisher.messages[0]
        assert {k: message[k] for k in ("userId", "email", "name", "event")} == {
            "userId": user_id,
            "email": "a@b.com",
            "name": "alice",
            "event": "user_signup",
        }

        shadow = shadow_store.get(user_id)
        assert shadow is not None
        assert (shadow.email, shadow.name) == ("a@b.com", "alice")
        assert shadow_store.count() == 1

    def test_delete_removes_shadow_and_leaves_posts(
        self, users_client, posts_client, publisher, shadow_store
    ):
        """Test a delete removes the shadow record but not the user's posts."""
        user_id = users_client.post("/api/v1/users/signup", json=SIGNUP).json()["result"]["id"]
        post_id = create_post(user_id)
        assert posts_client.get(f"/api/v1/posts/{post_id}").json()["creator_name"] == "alice"

        response = users_client.post(f"/api/v1/users/delete/{user_id}")

        assert response.status_code == 200
        assert len(publisher.messages) == 2
        assert publisher.messages[1]["event"] == "user_delete"
        assert publisher.messages[1]["userId"] == user_id
        assert shadow_store.get(user_id) is None

        post = posts_client.get(f"/api/v1/posts/{post_id}")
        assert post.status_code == 200
        assert post.json()["user_id"] == user_id
        assert post.json()["creator_name"] is None

    def test_redelivery_is_idempotent(self, users_client, shadow_store):
        """Test a signup delivered twice leaves one shadow record."""
        users_client.post("/api/v1/users/signup", json=SIGNUP)
        body = users_app.state.broker_publisher.bodies[0]

        asyncio.run(posts_app.state.user_subscriber.process_body(body))

        assert shadow_store.count() == 1

    def test_late_signup_after_delete(self, users_client, shadow_store):
        """Test a signup redelivered after the delete does not resurrect the user."""
        user_id = users_client.post("/api/v1/users/signup", json=SIGNUP).json()["result"]["id"]
        users_client.post(f"/api/v1/users/delete/{user_id}")
        signup_body = users_app.state.broker_publisher.bodies[0]

        asyncio.run(posts_app.state.user_subscriber.process_body(signup_body))

        assert shadow_store.get(user_id) is None

    def test_malformed_message_then_valid(self, users_client, shadow_store):
        """Test a malformed message is dropped and the next valid one applies."""
        subscriber = posts_app.state.user_subscriber
        dropped = asyncio.run(
            subscriber.process_body(json.dumps({"userId": "x", "email": "x@y.z"}).encode())
        )

        response = users_client.post("/api/v1/users/signup", json=SIGNUP)

        assert dropped is False
        assert shadow_store.get(response.json()["result"]["id"]) is not None

    def test_rejected_signup_publishes_nothing(self, users_client, publisher, shadow_store):
        """Test invalid input publishes no event and replicates nothing."""
        response = users_client.post(
            "/api/v1/users/signup",
            json={**SIGNUP, "password": "abc"},
        )

        assert response.status_code == 400
        assert publisher.messages == []
        assert shadow_store.count() == 0
