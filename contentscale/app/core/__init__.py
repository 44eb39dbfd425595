"""Core configuration and logging for the API."""
