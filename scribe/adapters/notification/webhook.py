"""Webhook notification adapter.

Implements AuthorNotifier by POSTing an ``author.created`` JSON event to a
configured HTTP endpoint.
"""

import logging
from typing import Any

import httpx

from scribe.core.models import Author
from scribe.core.ports import AuthorNotifier

logger = logging.getLogger(__name__)


class WebhookNotificationAdapter(AuthorNotifier):
    """Delivers author events to an HTTP endpoint."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize webhook notification adapter.

        Args:
            url: Endpoint receiving the events.
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport (used by tests).
        """
        if not url:
            raise ValueError("Webhook notification requires a URL")
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def author_created(self, author: Author) -> None:
        """POST the event.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx response.
        """
        client = await self._get_client()
        try:
            response = await client.post(self.url, json=self._format_event(author))
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to deliver author.created webhook: {e}",
                extra={"author_id": str(author.id), "url": self.url},
            )
            raise

        logger.debug(
            "Delivered author.created webhook",
            extra={"author_id": str(author.id), "status_code": response.status_code},
        )

    @staticmethod
    def _format_event(author: Author) -> dict[str, Any]:
        return {
            "event": "author.created",
            "author": {
                "id": str(author.id),
                "name": str(author.name),
                "email_address": str(author.email) if author.email is not None else None,
            },
        }
