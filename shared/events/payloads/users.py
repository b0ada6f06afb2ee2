"""User lifecycle event definitions.

The user events queue carries a closed set of event shapes, discriminated by
the ``event`` field. Anything that does not decode into one of them is
rejected with :class:`EventDecodeError`.
"""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, ValidationError

from shared.events.base import UserEventBase


class UserSignupEvent(UserEventBase):
    """A user account was created."""

    event: Literal["user_signup"] = "user_signup"
    email: str
    name: str


class UserDeleteEvent(UserEventBase):
    """A user account was deleted."""

    event: Literal["user_delete"] = "user_delete"


UserEvent = Annotated[
    Union[UserSignupEvent, UserDeleteEvent],
    Field(discriminator="event"),
]

_user_event_adapter: TypeAdapter[UserEvent] = TypeAdapter(UserEvent)


class EventDecodeError(Exception):
    """Exception raised when a message body is not a valid user event."""

    def __init__(self, message: str, body: Any = None) -> None:
        """Initialize decode error.

        Args:
            message: Error message
            body: The raw body that failed to decode
        """
        super().__init__(message)
        self.body = body


def decode_user_event(body: bytes | str | dict[str, Any]) -> UserSignupEvent | UserDeleteEvent:
    """Decode a message body into a user event.

    Args:
        body: Raw message body (JSON bytes or text) or an already parsed dict

    Returns:
        The concrete event

    Raises:
        EventDecodeError: If the body is not JSON, not an object, carries a
            missing or unknown ``event`` tag, or lacks required fields
    """
    data: Any = body
    if isinstance(body, (bytes, bytearray, str)):
        try:
            data = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise EventDecodeError(f"Message body is not valid JSON: {e}", body) from e

    if not isinstance(data, dict):
        raise EventDecodeError(
            f"Message body must be a JSON object, got {type(data).__name__}", body
        )

    # A message without a timestamp has no ordering information; it must not
    # be stamped with the time it happened to be decoded
    if "occurredAt" not in data and "occurred_at" not in data:
        data = {**data, "occurredAt": None}

    try:
        return _user_event_adapter.validate_python(data)
    except ValidationError as e:
        raise EventDecodeError(f"Invalid user event: {e.errors()[0]['msg']}", body) from e
