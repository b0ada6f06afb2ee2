"""Event publisher abstraction with Strategy pattern.

Provides a pluggable publisher interface with a RabbitMQ implementation
(see ``shared.events.rabbitmq_publisher``) and an in-memory one for tests and
local development.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine

from shared.events.payloads.users import UserDeleteEvent, UserSignupEvent

logger = logging.getLogger(__name__)

PublishedEvent = UserSignupEvent | UserDeleteEvent


class EventPublisher(ABC):
    """Abstract base class for event publishers.

    Implement this interface to create publishers for different
    message broker backends (Strategy pattern).

    Example:
        >>> publisher = RabbitMQPublisher(BrokerConnection(rabbitmq_url))
        >>> await publisher.publish(event)
    """

    @abstractmethod
    async def publish(self, event: PublishedEvent) -> None:
        """Publish a user event to the user events queue.

        Args:
            event: The event to publish

        Raises:
            PublishError: If publishing fails
        """
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the message broker."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the message broker."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the publisher currently holds a usable connection."""
        pass


# Type alias for message callbacks, called with the encoded body
MessageCallback = Callable[[bytes], Coroutine[Any, Any, None]]


class InMemoryPublisher(EventPublisher):
    """In-memory event publisher for testing and development.

    Stores events together with their encoded message bodies and can notify
    registered callbacks. Useful for unit tests and local development without
    a message broker.
    """

    def __init__(self) -> None:
        """Initialize the in-memory publisher."""
        self._events: list[PublishedEvent] = []
        self._bodies: list[bytes] = []
        self._callbacks: list[MessageCallback] = []
        self._connected = False

    @property
    def events(self) -> list[PublishedEvent]:
        """Get all published events."""
        return self._events.copy()

    @property
    def bodies(self) -> list[bytes]:
        """Get the encoded body of every published event."""
        return self._bodies.copy()

    @property
    def messages(self) -> list[dict[str, Any]]:
        """Get every published body decoded back to a dict."""
        return [json.loads(body) for body in self._bodies]

    @property
    def is_connected(self) -> bool:
        """Whether connect() has been called."""
        return self._connected

    def clear(self) -> None:
        """Clear all stored events."""
        self._events.clear()
        self._bodies.clear()

    def subscribe(self, callback: MessageCallback) -> None:
        """Register a callback that receives every published body.

        Args:
            callback: Async function to call when an event is published
        """
        self._callbacks.append(callback)

    async def publish(self, event: PublishedEvent) -> None:
        """Publish event to in-memory store and notify callbacks.

        Args:
            event: The event to publish
        """
        body = event.to_json_bytes()
        self._events.append(event)
        self._bodies.append(body)
        logger.debug(f"Published event: {event.event_type} (id={event.event_id})")

        for callback in self._callbacks:
            try:
                await callback(body)
            except Exception as e:
                logger.error(f"Callback error for {event.event_type}: {e}")

    async def connect(self) -> None:
        """No-op for in-memory publisher."""
        self._connected = True
        logger.debug("InMemoryPublisher connected")

    async def disconnect(self) -> None:
        """No-op for in-memory publisher."""
        self._connected = False
        logger.debug("InMemoryPublisher disconnected")

    def get_events_by_type(self, event_type: str) -> list[PublishedEvent]:
        """Filter events by type.

        Args:
            event_type: The event type to filter by

        Returns:
            List of events matching the type
        """
        return [e for e in self._events if e.event_type == event_type]


class PublishError(Exception):
    """Exception raised when event publishing fails."""

    def __init__(self, message: str, event: PublishedEvent | None = None) -> None:
        """Initialize publish error.

        Args:
            message: Error message
            event: The event that failed to publish
        """
        super().__init__(message)
        self.event = event


class PublishTimeoutError(PublishError):
    """Exception raised when the broker does not confirm a publish in time."""
