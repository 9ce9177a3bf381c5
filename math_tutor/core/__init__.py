"""Core configuration, logging and rate limiting."""
