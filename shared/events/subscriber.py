"""Event subscriber abstraction.

Provides a pluggable subscriber interface for consuming user events
from different message brokers.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from shared.events.handlers import EventHandler
from shared.events.payloads.users import (
    EventDecodeError,
    UserDeleteEvent,
    UserSignupEvent,
    decode_user_event,
)
from shared.events.types import UserEventType

logger = logging.getLogger(__name__)


class EventSubscriber(ABC):
    """Abstract base class for event subscribers.

    Implement this interface to create subscribers for different
    message broker backends (Strategy pattern).

    Example:
        >>> subscriber = RabbitMQSubscriber(BrokerConnection(rabbitmq_url))
        >>> subscriber.register_handler(UserSignupHandler(store))
        >>> subscriber.register_handler(UserDeleteHandler(store))
        >>> await subscriber.start()
    """

    def __init__(self) -> None:
        """Initialize with empty handler registry."""
        self._handlers: list[EventHandler[Any]] = []

    def register_handler(self, handler: EventHandler[Any]) -> None:
        """Register an event handler.

        Args:
            handler: The event handler to register
        """
        self._handlers.append(handler)
        logger.debug(f"Registered handler: {handler.__class__.__name__}")

    def ensure_exhaustive(self) -> None:
        """Check that every user event type has at least one handler.

        Raises:
            SubscriptionError: If some event type would go unhandled
        """
        missing = [
            event_type
            for event_type in UserEventType
            if not any(h.can_handle(event_type) for h in self._handlers)
        ]
        if missing:
            raise SubscriptionError(
                f"No handler registered for event types: {', '.join(missing)}"
            )

    async def dispatch(self, event: UserSignupEvent | UserDeleteEvent) -> None:
        """Dispatch event to all registered handlers that can handle it.

        Handler errors propagate so that the message is not acknowledged.

        Args:
            event: The event to dispatch
        """
        handlers = [h for h in self._handlers if h.can_handle(event.event_type)]
        if not handlers:
            logger.warning(f"No handler for event {event.event_type} (id={event.event_id})")
            return

        for handler in handlers:
            await handler.handle(event)

    async def process_body(self, body: bytes) -> bool:
        """Decode a message body and dispatch the event.

        Malformed bodies are logged and dropped; they can never become valid
        on redelivery.

        Args:
            body: Raw message body

        Returns:
            True if an event was dispatched, False if the body was dropped

        Raises:
            Exception: Whatever a handler raised
        """
        try:
            event = decode_user_event(body)
        except EventDecodeError as e:
            logger.error(f"Dropping malformed user event: {e} (body={body[:200]!r})")
            return False

        logger.debug(f"Received event: {event.event_type} (id={event.event_id})")
        await self.dispatch(event)
        return True

    @property
    @abstractmethod
    def is_consuming(self) -> bool:
        """Whether events are currently being consumed."""
        pass

    @abstractmethod
    async def start(self) -> None:
        """Start consuming events."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop consuming events."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the message broker."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the message broker."""
        pass


class InMemorySubscriber(EventSubscriber):
    """In-memory event subscriber for testing and development.

    Runs the same decode and dispatch path as the broker-backed subscriber
    over an in-process queue of message bodies.
    """

    def __init__(self) -> None:
        """Initialize the in-memory subscriber."""
        super().__init__()
        self._running = False
        self._queue: asyncio.Queue[bytes] | None = None
        self._consumer_task: asyncio.Task[None] | None = None
        self._processed: list[bytes] = []
        self._failed: list[bytes] = []

    @property
    def processed(self) -> list[bytes]:
        """Bodies that were handled (dispatched or dropped as malformed)."""
        return self._processed.copy()

    @property
    def failed(self) -> list[bytes]:
        """Bodies whose handler raised."""
        return self._failed.copy()

    @property
    def is_consuming(self) -> bool:
        """Whether the consumer loop is running."""
        return self._running

    async def inject(self, body: bytes) -> None:
        """Queue a message body for the consumer loop.

        Args:
            body: The body to inject
        """
        if self._queue is None:
            self._queue = asyncio.Queue()
        await self._queue.put(body)

    async def join(self) -> None:
        """Wait until every injected body has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def _consume(self) -> None:
        """Internal consumer loop."""
        assert self._queue is not None
        while self._running:
            body = await self._queue.get()
            try:
                await self.process_body(body)
                self._processed.append(body)
            except Exception as e:
                logger.error(f"Handler failed for in-memory message: {e}")
                self._failed.append(body)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        """Start the consumer loop."""
        self.ensure_exhaustive()
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._running = True
        self._consumer_task = asyncio.create_task(self._consume())
        logger.debug("InMemorySubscriber started")

    async def stop(self) -> None:
        """Stop the consumer loop."""
        self._running = False
        if self._consumer_task:
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass
            self._consumer_task = None
        logger.debug("InMemorySubscriber stopped")

    async def connect(self) -> None:
        """No-op for in-memory subscriber."""
        logger.debug("InMemorySubscriber connected")

    async def disconnect(self) -> None:
        """No-op for in-memory subscriber."""
        logger.debug("InMemorySubscriber disconnected")


class SubscriptionError(Exception):
    """Exception raised when subscription fails."""

    def __init__(self, message: str, queue: str | None = None) -> None:
        """Initialize subscription error.

        Args:
            message: Error message
            queue: The queue that failed
        """
        super().__init__(message)
        self.queue = queue
