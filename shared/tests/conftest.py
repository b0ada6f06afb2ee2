"""Pytest fixtures for the shared events library."""

from unittest.mock import MagicMock

import pytest

from shared.tests.fakes import make_amqp_connection


@pytest.fixture
def amqp_connection() -> MagicMock:
    """Provide an open fake broker connection."""
    return make_amqp_connection()
