"""Replicated user store for Post Service.

Applies user events to the ``shadow_users`` table. Every event is applied in
its own transaction together with the per-user sync state, which records the
newest event seen for that user id. Events older than that are ignored, so
redelivered or reordered messages cannot resurrect a deleted user or roll
back newer data.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from services.posts.models import ShadowUser, UserSyncState
from shared.events.payloads.users import UserDeleteEvent, UserSignupEvent

logger = logging.getLogger(__name__)

AppliedEvent = UserSignupEvent | UserDeleteEvent
Mutation = Callable[[Session, Any], None]


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ShadowUserStore:
    """Idempotent writer for replicated users.

    Example:
        >>> store = ShadowUserStore(SessionLocal)
        >>> store.apply_signup(event)
        True
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory for database sessions
        """
        self._session_factory = session_factory

    def get(self, user_id: str) -> ShadowUser | None:
        """Return the shadow record for a user id, if any."""
        with self._session_factory() as session:
            return session.get(ShadowUser, user_id)

    def count(self) -> int:
        """Return the number of shadow records."""
        with self._session_factory() as session:
            return session.query(ShadowUser).count()

    def apply_signup(self, event: UserSignupEvent) -> bool:
        """Create or overwrite the shadow record for a signup.

        Returns:
            False if the event was older than the last applied one
        """
        return self._apply(event, self._upsert)

    def apply_delete(self, event: UserDeleteEvent) -> bool:
        """Remove the shadow record for a deleted user.

        Deleting an id that has no shadow record is a no-op.

        Returns:
            False if the event was older than the last applied one
        """
        return self._apply(event, self._remove)

    def _apply(self, event: AppliedEvent, mutate: Mutation) -> bool:
        """Run ``mutate`` and record the event in one transaction.

        A concurrent writer inserting the same user id first makes the commit
        fail with an IntegrityError; the event is then applied once more
        against the committed state.
        """
        try:
            return self._apply_once(event, mutate)
        except IntegrityError:
            logger.info(
                f"Concurrent write for user {event.user_id}, "
                f"re-applying {event.event_type}"
            )
            return self._apply_once(event, mutate)

    def _apply_once(self, event: AppliedEvent, mutate: Mutation) -> bool:
        with self._session_factory() as session:
            try:
                state = session.get(UserSyncState, event.user_id)
                if self._is_stale(state, event):
                    logger.info(
                        f"Ignoring stale {event.event_type} for user {event.user_id} "
                        f"(event at {event.occurred_at}, last applied "
                        f"{state.last_event_type} at {state.last_event_at})"
                    )
                    return False

                mutate(session, event)
                self._record(session, state, event)
                session.commit()
            except Exception:
                session.rollback()
                raise

        logger.info(f"Applied {event.event_type} for user {event.user_id}")
        return True

    @staticmethod
    def _upsert(session: Session, event: UserSignupEvent) -> None:
        user = session.get(ShadowUser, event.user_id)
        if user is None:
            session.add(ShadowUser(id=event.user_id, email=event.email, name=event.name))
        else:
            user.email = event.email
            user.name = event.name

    @staticmethod
    def _remove(session: Session, event: UserDeleteEvent) -> None:
        user = session.get(ShadowUser, event.user_id)
        if user is None:
            logger.debug(f"No shadow record for deleted user {event.user_id}")
            return
        session.delete(user)

    @staticmethod
    def _is_stale(state: UserSyncState | None, event: AppliedEvent) -> bool:
        """Whether a newer event than ``event`` was already applied.

        Equal timestamps are not stale, so a redelivered event is re-applied
        with the same result.
        """
        if state is None or state.last_event_at is None or event.occurred_at is None:
            return False
        return as_utc(state.last_event_at) > as_utc(event.occurred_at)

    @staticmethod
    def _record(session: Session, state: UserSyncState | None, event: AppliedEvent) -> None:
        occurred_at = as_utc(event.occurred_at) if event.occurred_at else None
        if state is None:
            session.add(
                UserSyncState(
                    user_id=event.user_id,
                    last_event_type=event.event_type,
                    last_event_at=occurred_at,
                )
            )
            return
        state.last_event_type = event.event_type
        # Events without a timestamp never move the watermark back
        if occurred_at is not None:
            state.last_event_at = occurred_at
