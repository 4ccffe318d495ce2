"""Request authentication for the session API."""
