"""Core seams: ports (Protocols), error types and the application state."""
