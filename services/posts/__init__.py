"""Post Service: posts and the replicated shadow copy of users."""
