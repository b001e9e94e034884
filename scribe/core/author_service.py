"""Author creation service.

Canonical implementation of AuthorServicePort. All author-domain
business rules live here: persist, then report the outcome, then notify.
"""

import logging

from .errors import CreateAuthorError
from .models import Author, CreateAuthorRequest
from .ports import AuthorMetrics, AuthorNotifier, AuthorRepository, AuthorServicePort

logger = logging.getLogger(__name__)


class AuthorService(AuthorServicePort):
    """Orchestrates author creation.

    Uses ports but contains no adapter-specific logic. Persistence is the
    only step with a correctness contract; metrics and notification are
    best-effort and can never change the returned result.
    """

    def __init__(
        self,
        repo: AuthorRepository,
        metrics: AuthorMetrics,
        notifier: AuthorNotifier,
    ):
        self.repo = repo
        self.metrics = metrics
        self.notifier = notifier

    async def create_author(self, req: CreateAuthorRequest) -> Author:
        """Create the author specified in req and trigger notifications.

        Steps:
        1. Delegate to the repository
        2. Record a success or failure metric
        3. On success, notify about the new author

        Raises:
            CreateAuthorError: Propagated unchanged from the repository.
                Never retried.
        """
        try:
            author = await self.repo.create_author(req)
        except CreateAuthorError as e:
            logger.info(f"Author creation failed for name {req.name}: {e}")
            await self._record_failure()
            raise
        except Exception:
            # Repository broke its contract; still counts as a failure
            logger.error(
                f"Repository raised an untranslated error for name {req.name}",
                exc_info=True,
            )
            await self._record_failure()
            raise

        logger.info(f"Created author {author.id} with name {author.name}")
        await self._record_success()
        await self._notify(author)
        return author

    async def _record_success(self) -> None:
        try:
            await self.metrics.record_creation_success()
        except Exception as e:
            logger.error(f"Failed to record author creation success: {e}", exc_info=True)

    async def _record_failure(self) -> None:
        try:
            await self.metrics.record_creation_failure()
        except Exception as e:
            logger.error(f"Failed to record author creation failure: {e}", exc_info=True)

    async def _notify(self, author: Author) -> None:
        # Failure here must not undo or mask the persisted author
        try:
            await self.notifier.author_created(author)
        except Exception as e:
            logger.error(
                f"Failed to notify about created author {author.id}: {e}",
                exc_info=True,
            )
