"""RabbitMQ event publisher implementation.

Publishes user events to the user events queue through the default exchange.
"""

import asyncio
import logging

import aio_pika

from shared.events.connection import BrokerConnection, BrokerConnectionError
from shared.events.infrastructure.queue_setup import InfrastructureError
from shared.events.publisher import EventPublisher, PublishedEvent, PublishError, PublishTimeoutError

logger = logging.getLogger(__name__)


class RabbitMQPublisher(EventPublisher):
    """RabbitMQ-based event publisher.

    The connection is not opened until the first publish (or an explicit
    connect()). A cached connection that has gone stale is replaced before
    publishing; a failure after that is reported, not retried.

    Example:
        >>> publisher = RabbitMQPublisher(BrokerConnection("amqp://localhost/"))
        >>> await publisher.publish(UserDeleteEvent(user_id="42"))
    """

    def __init__(
        self,
        connection: BrokerConnection,
        publish_timeout: float = 5.0,
    ) -> None:
        """Initialize the RabbitMQ publisher.

        Args:
            connection: Broker connection owned by the service
            publish_timeout: Seconds allowed for a single publish
        """
        self._connection = connection
        self._publish_timeout = publish_timeout

    @property
    def connection(self) -> BrokerConnection:
        """Get the underlying broker connection."""
        return self._connection

    @property
    def is_connected(self) -> bool:
        """Whether the cached connection is usable."""
        return self._connection.is_usable

    async def connect(self) -> None:
        """Open the broker connection eagerly."""
        await self._connection.ensure_connected()
        logger.info(f"RabbitMQPublisher connected to queue: {self._connection.queue_name}")

    async def disconnect(self) -> None:
        """Close the broker connection."""
        await self._connection.close()
        logger.info("RabbitMQPublisher disconnected")

    async def publish(self, event: PublishedEvent) -> None:
        """Publish a user event to RabbitMQ.

        Args:
            event: The event to publish

        Raises:
            PublishTimeoutError: If the broker does not confirm in time
            PublishError: If the connection cannot be established or the
                publish fails
        """
        message = aio_pika.Message(
            body=event.to_json_bytes(),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            message_id=event.event_id,
            type=event.event_type,
        )

        try:
            channel = await self._connection.channel()
        except (BrokerConnectionError, InfrastructureError) as e:
            logger.error(f"Failed to publish event {event.event_type}: {e}")
            raise PublishError(f"Broker unavailable: {e}", event) from e

        try:
            await channel.default_exchange.publish(
                message,
                routing_key=self._connection.queue_name,
                timeout=self._publish_timeout,
            )
        except asyncio.TimeoutError as e:
            self._connection.mark_broken()
            logger.error(
                f"Timed out publishing event {event.event_type} "
                f"after {self._publish_timeout}s"
            )
            raise PublishTimeoutError(
                f"Publish timed out after {self._publish_timeout}s", event
            ) from e
        except Exception as e:
            self._connection.mark_broken()
            logger.error(f"Failed to publish event {event.event_type}: {e}")
            raise PublishError(f"Failed to publish event to RabbitMQ: {e}", event) from e

        logger.debug(
            f"Published event {event.event_type} "
            f"(id={event.event_id}) to {self._connection.queue_name}"
        )
