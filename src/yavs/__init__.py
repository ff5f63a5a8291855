"""Vanity import server backed by a periodically refreshed remote feed."""

__version__ = "0.1.0"
