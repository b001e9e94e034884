"""Composition root for the Scribe author service.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Dependency injection
- HTTP server startup
"""

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError

from scribe.adapters.http.handlers import ApiRequestHandler
from scribe.adapters.http.server import ScribeHTTPServer
from scribe.adapters.metrics.prometheus import PrometheusAuthorMetrics
from scribe.adapters.notification.stdout import NoopNotificationAdapter, StdoutNotificationAdapter
from scribe.adapters.notification.webhook import WebhookNotificationAdapter
from scribe.adapters.store.sqlite import SQLiteRepository, sqlite_path_from_url
from scribe.config import Settings, load_settings
from scribe.core.author_service import AuthorService
from scribe.core.ports import AuthorNotifier
from scribe.core.post_service import PostService

if TYPE_CHECKING:
    from scribe.adapters.store.postgresql import PostgreSQLRepository

logger = logging.getLogger(__name__)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_repository(settings: Settings) -> "SQLiteRepository | PostgreSQLRepository":
    """Instantiate the repository selected by the database URL.

    Returns:
        SQLiteRepository or PostgreSQLRepository. Both implement
        AuthorRepository and PostRepository.
    """
    if settings.store_backend == "postgresql":
        # Lazy import for optional PostgreSQL dependency
        from scribe.adapters.store.postgresql import PostgreSQLRepository

        logger.info("Repository: PostgreSQL")
        return PostgreSQLRepository(
            dsn=settings.database_url,
            pool_size=settings.store_pool_size,
        )

    db_path = sqlite_path_from_url(settings.database_url)
    logger.info(f"Repository: SQLite at {db_path}")
    return SQLiteRepository(
        db_path=db_path,
        pool_size=settings.store_pool_size,
        busy_timeout=settings.sqlite_busy_timeout_seconds,
    )


def build_notifier(settings: Settings) -> AuthorNotifier:
    """Instantiate the notification adapter selected in settings."""
    if settings.notification_backend == "stdout":
        logger.info("Notification adapter: Stdout")
        return StdoutNotificationAdapter(verbose=settings.debug)
    if settings.notification_backend == "webhook":
        logger.info("Notification adapter: Webhook")
        return WebhookNotificationAdapter(url=settings.notification_webhook_url)
    logger.info("Notification adapter: disabled")
    return NoopNotificationAdapter()


async def bootstrap(settings: Settings | None = None) -> None:
    """Load configuration, wire adapters, and run the HTTP server.

    This is the composition root: the single place where all components
    are instantiated and wired together.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize core services
    5. Serve HTTP until cancelled
    """
    if settings is None:
        settings = load_settings()

    configure_logging(settings.log_level, settings.log_format)
    logger.info("Starting Scribe author service...")

    repository = build_repository(settings)
    metrics = PrometheusAuthorMetrics()
    notifier = build_notifier(settings)

    author_service = AuthorService(repo=repository, metrics=metrics, notifier=notifier)
    post_service = PostService(repo=repository)

    http_server = ScribeHTTPServer(
        api=ApiRequestHandler(author_service=author_service, post_service=post_service),
        host=settings.server_host,
        port=settings.server_port,
        metrics=metrics,
        request_timeout=settings.request_timeout_seconds,
    )

    try:
        await http_server.serve_forever()
    finally:
        await http_server.stop()
        await repository.close_pool()
        if isinstance(notifier, WebhookNotificationAdapter):
            await notifier.close()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Invalid configuration or fatal runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(bootstrap(settings))
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
