"""Event type definitions for user replication events.

Defines the queue name and event tags shared verbatim by the user service
(publisher) and the post service (consumer).
"""

from enum import StrEnum

# Single durable queue carrying user lifecycle events. Both services import
# this constant; a second spelling would silently create a second queue.
USER_EVENTS_QUEUE = "user_events"


class UserEventType(StrEnum):
    """User lifecycle event tags (the ``event`` field on the wire)."""

    USER_SIGNUP = "user_signup"
    USER_DELETE = "user_delete"
