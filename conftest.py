"""
Pytest configuration shared by every test package.

Sets test environment variables BEFORE any service module is imported,
because both services read their settings at import time. Tests run against
in-memory SQLite databases and the in-memory event backend.
"""

import os

# These can be overridden by actual environment variables
_test_env_defaults = {
    "USERS_DATABASE_URL": "sqlite://",
    "POSTS_DATABASE_URL": "sqlite://",
    "USERS_JWT_SECRET_KEY": "test-secret-key-not-for-production",
    "USERS_JWT_ALGORITHM": "HS256",
    "USERS_ACCESS_TOKEN_EXPIRE_MINUTES": "30",
    "EVENTS_BACKEND": "memory",
    "DEBUG": "false",
}

# Set defaults only if not already set
for key, value in _test_env_defaults.items():
    if key not in os.environ:
        os.environ[key] = value
