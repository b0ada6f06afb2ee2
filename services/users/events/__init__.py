"""User service event publishing."""

from services.users.events.publisher import UserEventPublisher

__all__ = [
    "UserEventPublisher",
]
