"""Task management REST backend: auth tokens, task queries and analytics."""

__version__ = "1.0.0"
