"""Event payload definitions for user replication events.

Provides typed models for the events carried on the user events queue.
"""

from shared.events.payloads.users import (
    EventDecodeError,
    UserDeleteEvent,
    UserEvent,
    UserSignupEvent,
    decode_user_event,
)

__all__ = [
    "EventDecodeError",
    "UserDeleteEvent",
    "UserEvent",
    "UserSignupEvent",
    "decode_user_event",
]
