"""FastAPI dependencies for User Service."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from services.users.config import Settings, get_settings
from services.users.database import get_db
from services.users.events.publisher import UserEventPublisher


def get_event_publisher(request: Request) -> UserEventPublisher:
    """
    Dependency to get the user event publisher.

    The publisher is created in the application lifespan and stored on
    ``app.state``.

    Args:
        request: Current request

    Returns:
        UserEventPublisher: The typed user event publisher
    """
    return request.app.state.event_publisher


# Type aliases for cleaner dependency injection
DBSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
EventPublisher = Annotated[UserEventPublisher, Depends(get_event_publisher)]
