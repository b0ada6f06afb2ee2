"""User and Post services."""
