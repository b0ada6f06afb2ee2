"""RabbitMQ event subscriber implementation.

Consumes user events pushed by the broker and acknowledges each message only
after its handlers have returned.
"""

import logging
from typing import Awaitable

from aio_pika.abc import AbstractIncomingMessage, AbstractQueue

from shared.events.connection import BrokerConnection
from shared.events.subscriber import EventSubscriber, SubscriptionError

logger = logging.getLogger(__name__)


class RabbitMQSubscriber(EventSubscriber):
    """RabbitMQ push consumer for the user events queue.

    Acknowledgement discipline:
        * handler returned: ack
        * body could not be decoded: ack (dropped, logged)
        * handler raised on first delivery: nack with requeue
        * handler raised on a redelivery: reject without requeue, which
          dead-letters the message if the queue has a dead-letter exchange

    Example:
        >>> subscriber = RabbitMQSubscriber(BrokerConnection(url, prefetch_count=10))
        >>> subscriber.register_handler(UserSignupHandler(store))
        >>> subscriber.register_handler(UserDeleteHandler(store))
        >>> await subscriber.start()
    """

    def __init__(self, connection: BrokerConnection) -> None:
        """Initialize the RabbitMQ subscriber.

        Args:
            connection: Broker connection owned by the service
        """
        super().__init__()
        self._connection = connection
        self._queue: AbstractQueue | None = None
        self._consumer_tag: str | None = None

    @property
    def connection(self) -> BrokerConnection:
        """Get the underlying broker connection."""
        return self._connection

    @property
    def is_consuming(self) -> bool:
        """Whether a consumer is registered with the broker."""
        return self._consumer_tag is not None

    async def connect(self) -> None:
        """Open the broker connection."""
        await self._connection.ensure_connected()
        logger.info(f"RabbitMQSubscriber connected to queue: {self._connection.queue_name}")

    async def disconnect(self) -> None:
        """Close the broker connection."""
        await self._connection.close()
        logger.info("RabbitMQSubscriber disconnected")

    async def start(self) -> None:
        """Register the push consumer.

        Raises:
            SubscriptionError: If handlers are missing or the consumer cannot
                be registered
        """
        if self._consumer_tag is not None:
            logger.warning("RabbitMQSubscriber already running")
            return

        self.ensure_exhaustive()

        try:
            self._queue = await self._connection.queue()
            self._consumer_tag = await self._queue.consume(self.on_message, no_ack=False)
        except Exception as e:
            raise SubscriptionError(
                f"Failed to start consumer: {e}", self._connection.queue_name
            ) from e

        logger.info(f"RabbitMQSubscriber consuming from queue: {self._connection.queue_name}")

    async def stop(self) -> None:
        """Cancel the consumer; in-flight messages are redelivered later."""
        if self._queue is not None and self._consumer_tag is not None:
            try:
                await self._queue.cancel(self._consumer_tag)
            except Exception as e:
                logger.warning(f"Error cancelling consumer: {e!r}")
        self._consumer_tag = None
        self._queue = None
        logger.info("RabbitMQSubscriber stopped")

    async def on_message(self, message: AbstractIncomingMessage) -> None:
        """Process one delivery and settle it.

        Never raises: one bad message must not end the subscription.

        Args:
            message: The delivered message
        """
        try:
            await self.process_body(message.body)
        except Exception as e:
            if message.redelivered:
                logger.error(
                    f"Handler failed again for redelivered message "
                    f"{message.message_id}, rejecting: {e!r}"
                )
                await self._settle(message.reject(requeue=False))
            else:
                logger.error(
                    f"Handler failed for message {message.message_id}, requeueing: {e!r}"
                )
                await self._settle(message.nack(requeue=True))
            return

        await self._settle(message.ack())

    async def _settle(self, settlement: Awaitable[None]) -> None:
        """Await an ack/nack/reject, logging channel errors."""
        try:
            await settlement
        except Exception as e:
            # The broker redelivers unsettled messages once the channel recovers
            logger.error(f"Failed to settle message: {e!r}")
