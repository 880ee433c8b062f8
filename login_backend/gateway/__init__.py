"""Request authentication and path authorization."""
