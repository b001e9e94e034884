"""Port interfaces for the Scribe author service.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - AuthorRepository: Persist new authors
   - PostRepository: Persist new posts
   - AuthorMetrics: Record author creation outcomes
   - AuthorNotifier: Announce newly created authors

2. **Driving Ports** (adapters/external systems call into core)
   - AuthorServicePort: Entry point for author creation
   - PostServicePort: Entry point for post creation

Implementations of every port must be safe to share between
concurrently running requests: they hold no mutable per-call state.
"""

from abc import ABC, abstractmethod

from .models import Author, CreateAuthorRequest, CreatePostRequest, Post


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class AuthorRepository(ABC):
    """Port for persisting authors.

    Implementations must enforce name uniqueness in the store itself
    (a uniqueness constraint on the name column), never with a
    check-then-insert sequence in application code. Two concurrent
    callers creating the same name must see exactly one success.
    """

    @abstractmethod
    async def create_author(self, req: CreateAuthorRequest) -> Author:
        """Persist a new author with a freshly generated identifier.

        Args:
            req: Validated creation request.

        Returns:
            The stored Author.

        Raises:
            DuplicateAuthorError: MUST be raised if an author with the same
                name already exists. The store is left unchanged.
            UnknownAuthorError: For any other failure, including a failed
                commit whose outcome is indeterminate.
        """


class PostRepository(ABC):
    """Port for persisting posts.

    The reference to the author must be checked by the store (a foreign
    key), not by a prior lookup in application code.
    """

    @abstractmethod
    async def create_post(self, req: CreatePostRequest) -> Post:
        """Persist a new post with a freshly generated identifier.

        Args:
            req: Validated creation request.

        Returns:
            The stored Post.

        Raises:
            AuthorNotFoundError: MUST be raised if the referenced author
                does not exist. The store is left unchanged.
            UnknownPostError: For any other failure.
        """


class AuthorMetrics(ABC):
    """Port for an aggregator of author-related metrics.

    Calls are advisory. The service logs and discards any exception
    raised here.
    """

    @abstractmethod
    async def record_creation_success(self) -> None:
        """Record a successful author creation."""

    @abstractmethod
    async def record_creation_failure(self) -> None:
        """Record a failed author creation."""


class AuthorNotifier(ABC):
    """Port for announcing newly created authors.

    Adapters deliver the announcement through some medium (stdout,
    webhook, email, ...). Delivery is best-effort: the service logs and
    discards any exception raised here.
    """

    @abstractmethod
    async def author_created(self, author: Author) -> None:
        """Announce that an author was created.

        Args:
            author: The author that was just persisted.

        Raises:
            Exception: If the notification channel is unavailable.
        """


# ============================================================================
# DRIVING PORTS (Adapters/external systems call into core)
# ============================================================================


class AuthorServicePort(ABC):
    """Public API of the author domain.

    Inbound adapters (HTTP handlers, CLIs) depend on this port, never on
    a repository directly.
    """

    @abstractmethod
    async def create_author(self, req: CreateAuthorRequest) -> Author:
        """Create the author described by req.

        Raises:
            DuplicateAuthorError: If an author with the same name exists.
            UnknownAuthorError: For any other failure.
        """


class PostServicePort(ABC):
    """Public API of the posts domain."""

    @abstractmethod
    async def create_post(self, req: CreatePostRequest) -> Post:
        """Create the post described by req.

        Raises:
            AuthorNotFoundError: If the referenced author does not exist.
            UnknownPostError: For any other failure.
        """
