"""Shared events library for the user and post services.

This module provides the user replication contract and its plumbing:
- Event models with Pydantic validation and the wire decoder
- The shared queue name and event type tags
- Publisher abstraction (Strategy pattern for different backends)
- Subscriber abstraction for consuming events
- Broker connection management for RabbitMQ
"""

from shared.events.base import UserEventBase
from shared.events.connection import (
    BrokerConnection,
    BrokerConnectionError,
    BrokerTimeoutError,
    ConnectionState,
)
from shared.events.handlers import EventHandler
from shared.events.payloads.users import (
    EventDecodeError,
    UserDeleteEvent,
    UserEvent,
    UserSignupEvent,
    decode_user_event,
)
from shared.events.publisher import (
    EventPublisher,
    InMemoryPublisher,
    PublishError,
    PublishTimeoutError,
)
from shared.events.rabbitmq_publisher import RabbitMQPublisher
from shared.events.rabbitmq_subscriber import RabbitMQSubscriber
from shared.events.subscriber import EventSubscriber, InMemorySubscriber, SubscriptionError
from shared.events.types import USER_EVENTS_QUEUE, UserEventType

__all__ = [
    # Contract
    "USER_EVENTS_QUEUE",
    "UserEventType",
    "UserEventBase",
    "UserEvent",
    "UserSignupEvent",
    "UserDeleteEvent",
    "EventDecodeError",
    "decode_user_event",
    # Connection
    "BrokerConnection",
    "BrokerConnectionError",
    "BrokerTimeoutError",
    "ConnectionState",
    # Publisher
    "EventPublisher",
    "InMemoryPublisher",
    "RabbitMQPublisher",
    "PublishError",
    "PublishTimeoutError",
    # Subscriber
    "EventSubscriber",
    "InMemorySubscriber",
    "RabbitMQSubscriber",
    "SubscriptionError",
    # Handlers
    "EventHandler",
]
