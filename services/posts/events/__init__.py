"""Event handlers for the Post service."""

from services.posts.events.user_handlers import (
    UserDeleteHandler,
    UserSignupHandler,
)

__all__ = [
    "UserDeleteHandler",
    "UserSignupHandler",
]
