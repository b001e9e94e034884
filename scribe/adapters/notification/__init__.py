"""Notification adapters for announcing new authors.

Implementations:
- stdout: Print a short report to the terminal
- webhook: POST a JSON event to an HTTP endpoint
- noop: Discard notifications
"""
