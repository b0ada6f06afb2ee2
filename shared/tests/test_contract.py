"""Tests for the user event wire contract."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from shared.events import USER_EVENTS_QUEUE, UserEventType
from shared.events.payloads.users import (
    EventDecodeError,
    UserDeleteEvent,
    UserSignupEvent,
    decode_user_event,
)


class TestEncoding:
    """Test cases for event serialization."""

    def test_signup_wire_format(self):
        """Test a signup serializes with the camelCase wire names."""
        event = UserSignupEvent(user_id="u1", email="a@b.com", name="alice")

        data = event.to_dict()

        assert data["event"] == "user_signup"
        assert data["userId"] == "u1"
        assert data["email"] == "a@b.com"
        assert data["name"] == "alice"
        assert data["eventId"]
        assert data["occurredAt"].startswith(str(datetime.now(timezone.utc).year))
        assert "user_id" not in data

    def test_delete_wire_format(self):
        """Test a delete carries only the user id and metadata."""
        event = UserDeleteEvent(user_id="u1")

        data = json.loads(event.to_json_bytes())

        assert set(data) == {"event", "userId", "eventId", "occurredAt"}
        assert data["event"] == "user_delete"

    def test_events_are_immutable(self):
        """Test events cannot be modified after construction."""
        event = UserDeleteEvent(user_id="u1")

        with pytest.raises(ValidationError):
            event.user_id = "u2"

    def test_shared_names(self):
        """Test the queue name and tags both services rely on."""
        assert USER_EVENTS_QUEUE == "user_events"
        assert {t.value for t in UserEventType} == {"user_signup", "user_delete"}


class TestDecoding:
    """Test cases for decode_user_event."""

    def test_decode_signup(self):
        """Test decoding a signup body as the User Service sends it."""
        body = json.dumps(
            {"userId": "u1", "email": "a@b.com", "name": "alice", "event": "user_signup"}
        ).encode()

        event = decode_user_event(body)

        assert isinstance(event, UserSignupEvent)
        assert event.user_id == "u1"
        assert event.email == "a@b.com"
        assert event.name == "alice"
        assert event.occurred_at is None

    def test_decode_delete(self):
        """Test decoding a delete body."""
        event = decode_user_event('{"userId": "u1", "event": "user_delete"}')

        assert isinstance(event, UserDeleteEvent)
        assert event.user_id == "u1"

    def test_decode_keeps_metadata(self):
        """Test eventId and occurredAt survive encoding and decoding."""
        original = UserDeleteEvent(
            user_id="u1",
            occurred_at=datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc),
        )

        decoded = decode_user_event(original.to_json_bytes())

        assert decoded == original

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"\xff\xfe",
            b"[1, 2, 3]",
            b'"user_signup"',
            b'{"userId": "u1", "email": "a@b.com", "name": "alice"}',
            b'{"event": "user_renamed", "userId": "u1"}',
            b'{"event": "user_signup", "userId": "u1", "name": "alice"}',
            b'{"event": "user_delete", "userId": ""}',
            b'{"event": "user_delete"}',
        ],
        ids=[
            "invalid-json",
            "not-utf8",
            "array",
            "string",
            "missing-event",
            "unknown-event",
            "missing-email",
            "empty-user-id",
            "missing-user-id",
        ],
    )
    def test_decode_rejects_malformed(self, body: bytes):
        """Test malformed bodies raise EventDecodeError."""
        with pytest.raises(EventDecodeError) as exc_info:
            decode_user_event(body)

        assert exc_info.value.body == body
