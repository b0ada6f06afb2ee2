"""Event handler protocol.

Defines the contract for event handlers following the Strategy pattern.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from shared.events.base import UserEventBase

EventT = TypeVar("EventT", bound=UserEventBase)


class EventHandler(ABC, Generic[EventT]):
    """Abstract base class for event handlers.

    Implement this protocol to create handlers for specific event types.
    Each handler should focus on a single responsibility. Handlers must be
    idempotent: the queue delivers at least once.

    Example:
        >>> class UserSignupHandler(EventHandler[UserSignupEvent]):
        ...     async def handle(self, event: UserSignupEvent) -> None:
        ...         store.apply_signup(event)
        ...
        ...     def can_handle(self, event_type: str) -> bool:
        ...         return event_type == UserEventType.USER_SIGNUP
    """

    @abstractmethod
    async def handle(self, event: EventT) -> None:
        """Process the event.

        Returning normally means the event's effects are committed and the
        message may be acknowledged.

        Args:
            event: The event to process

        Raises:
            Exception: If event processing fails
        """
        pass

    @abstractmethod
    def can_handle(self, event_type: str) -> bool:
        """Check if this handler can process the given event type.

        Args:
            event_type: The event type string to check

        Returns:
            True if this handler can process the event type
        """
        pass
