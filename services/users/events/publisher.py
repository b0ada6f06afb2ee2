"""User service event publishing.

Provides a facade for publishing user lifecycle events to the user events
queue.
"""

import logging
from datetime import datetime

from shared.events.payloads.users import UserDeleteEvent, UserSignupEvent
from shared.events.publisher import EventPublisher

logger = logging.getLogger(__name__)


class UserEventPublisher:
    """Facade for publishing user service events.

    Provides typed methods for each user event type, handling event
    construction. Callers publish only after the corresponding database
    change has been committed.

    Example:
        >>> publisher = UserEventPublisher(rabbitmq_publisher)
        >>> await publisher.publish_user_signup(
        ...     user_id="123",
        ...     email="user@example.com",
        ...     name="alice",
        ... )
    """

    def __init__(self, publisher: EventPublisher) -> None:
        """Initialize the user event publisher.

        Args:
            publisher: The underlying broker publisher
        """
        self._publisher = publisher

    @property
    def publisher(self) -> EventPublisher:
        """Get the underlying broker publisher."""
        return self._publisher

    async def publish_user_signup(
        self,
        user_id: str,
        email: str,
        name: str,
        occurred_at: datetime | None = None,
    ) -> UserSignupEvent:
        """Publish a user signup event.

        Args:
            user_id: The new user's ID
            email: The user's email
            name: The user's display name
            occurred_at: When the signup happened (defaults to now)

        Returns:
            The published event

        Raises:
            PublishError: If the event could not be published
        """
        event = UserSignupEvent(user_id=user_id, email=email, name=name)
        if occurred_at is not None:
            event = event.model_copy(update={"occurred_at": occurred_at})

        await self._publisher.publish(event)
        logger.info(f"Published user_signup event for user {user_id}")
        return event

    async def publish_user_delete(self, user_id: str) -> UserDeleteEvent:
        """Publish a user delete event.

        Args:
            user_id: The deleted user's ID

        Returns:
            The published event

        Raises:
            PublishError: If the event could not be published
        """
        event = UserDeleteEvent(user_id=user_id)

        await self._publisher.publish(event)
        logger.info(f"Published user_delete event for user {user_id}")
        return event
