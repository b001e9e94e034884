"""Stdout notification adapter.

Implements AuthorNotifier by printing new authors to the terminal with
human-readable formatting.
"""

import asyncio
import logging

from scribe.core.models import Author
from scribe.core.ports import AuthorNotifier

logger = logging.getLogger(__name__)


class StdoutNotificationAdapter(AuthorNotifier):
    """Prints a short report for every created author."""

    def __init__(self, verbose: bool = False):
        """Initialize stdout notification adapter.

        Args:
            verbose: If True, include the author id and email.
        """
        self.verbose = verbose

    async def author_created(self, author: Author) -> None:
        """Report a created author to stdout."""
        await asyncio.to_thread(print, self._format_report(author))

    def _format_report(self, author: Author) -> str:
        """Format the report block."""
        lines = [
            "=" * 80,
            "NEW AUTHOR",
            "=" * 80,
            f"Name: {author.name}",
        ]
        if self.verbose:
            lines.append(f"ID: {author.id}")
            lines.append(f"Email: {author.email if author.email is not None else '-'}")
        lines.append("=" * 80)
        return "\n".join(lines)


class NoopNotificationAdapter(AuthorNotifier):
    """Discards notifications."""

    async def author_created(self, author: Author) -> None:
        logger.debug(f"Notification disabled, skipping author {author.id}")
