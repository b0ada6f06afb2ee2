"""Base model for user replication events.

Provides the fields and serialization shared by every event on the
user events queue, using Pydantic for validation and serialization.
"""

import json
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class UserEventBase(BaseModel):
    """Common fields for all user events.

    Fields are declared with snake_case names and serialized with the
    camelCase aliases used on the wire (``userId``, ``eventId``,
    ``occurredAt``). Either spelling is accepted when constructing.

    Attributes:
        event: Event tag, narrowed to a literal by each concrete event
        user_id: Identity of the user the event is about
        event_id: Unique identifier for this event instance
        occurred_at: When the mutation was committed (UTC). Optional on
            decode so that messages from producers which do not send it are
            still accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event: str
    user_id: str = Field(..., alias="userId", min_length=1)
    event_id: str = Field(default_factory=lambda: str(uuid4()), alias="eventId")
    occurred_at: datetime | None = Field(default_factory=utc_now, alias="occurredAt")

    @property
    def event_type(self) -> str:
        """The event tag carried in the ``event`` field."""
        return self.event

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to the wire dictionary."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json_bytes(self) -> bytes:
        """Serialize event to a UTF-8 JSON message body."""
        return json.dumps(self.to_dict()).encode("utf-8")
