"""Metrics adapters for recording author creation outcomes."""
