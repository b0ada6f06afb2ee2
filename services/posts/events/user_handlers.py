"""Handlers for user events in the post service.

These handlers keep the replicated user table in line with the User
Service. Posts are never touched: deleting a user leaves its posts in place.
The store is synchronous and runs in the threadpool, off the event loop.
"""

import logging

from starlette.concurrency import run_in_threadpool

from services.posts.shadow_store import ShadowUserStore
from shared.events.handlers import EventHandler
from shared.events.payloads.users import UserDeleteEvent, UserSignupEvent
from shared.events.types import UserEventType

logger = logging.getLogger(__name__)


class UserSignupHandler(EventHandler[UserSignupEvent]):
    """Handler for user signup events from the user service."""

    def __init__(self, store: ShadowUserStore) -> None:
        self._store = store

    def can_handle(self, event_type: str) -> bool:
        """Check if this handler processes the given event type."""
        return event_type == UserEventType.USER_SIGNUP

    async def handle(self, event: UserSignupEvent) -> None:
        """Create or refresh the shadow record for the new user.

        Args:
            event: The user signup event
        """
        logger.info(
            f"Processing user signup event: "
            f"user_id={event.user_id}, email={event.email}, name={event.name}"
        )
        await run_in_threadpool(self._store.apply_signup, event)


class UserDeleteHandler(EventHandler[UserDeleteEvent]):
    """Handler for user delete events from the user service."""

    def __init__(self, store: ShadowUserStore) -> None:
        self._store = store

    def can_handle(self, event_type: str) -> bool:
        """Check if this handler processes the given event type."""
        return event_type == UserEventType.USER_DELETE

    async def handle(self, event: UserDeleteEvent) -> None:
        """Remove the shadow record of the deleted user.

        Args:
            event: The user delete event
        """
        logger.info(f"Processing user delete event: user_id={event.user_id}")
        await run_in_threadpool(self._store.apply_delete, event)
