"""User Service: canonical user accounts and user event publishing."""
