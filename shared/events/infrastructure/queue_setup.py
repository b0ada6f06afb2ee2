"""RabbitMQ queue setup utilities."""

import logging

from aio_pika.abc import AbstractChannel, AbstractQueue
from aio_pika.exceptions import AMQPError

from shared.events.types import USER_EVENTS_QUEUE

logger = logging.getLogger(__name__)


class InfrastructureError(Exception):
    """Exception raised when infrastructure setup fails."""

    pass


async def declare_user_events_queue(
    channel: AbstractChannel,
    queue_name: str = USER_EVENTS_QUEUE,
) -> AbstractQueue:
    """Declare the user events queue.

    Declaring is idempotent: an existing queue with the same arguments is
    returned as is. The queue is durable and never auto-deleted so that
    events survive a broker restart and periods without consumers.

    Args:
        channel: Open channel to declare the queue on
        queue_name: Name of the queue

    Returns:
        The declared queue

    Raises:
        InfrastructureError: If the broker refuses the declaration, e.g. when
            a queue of that name exists with different arguments
    """
    try:
        queue = await channel.declare_queue(
            queue_name,
            durable=True,
            auto_delete=False,
        )
    except AMQPError as e:
        raise InfrastructureError(f"Failed to declare queue {queue_name}: {e}") from e

    logger.info(f"Declared queue: {queue_name}")
    return queue
