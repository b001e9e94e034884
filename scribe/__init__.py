"""Scribe: an author creation service with a ports-and-adapters core."""

__version__ = "0.1.0"
