"""Error types for the Scribe domain.

Repository adapters may only raise the domain errors defined here, and
inbound adapters (the HTTP layer, future CLIs) must be prepared to handle
every one of them.

The hierarchies are closed. A new failure scenario that needs distinct
handling gets a new subclass; it must not be folded into the Unknown*
variants. Adding a subclass means revisiting every consumer.
"""

from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .models import AuthorName


# ============================================================================
# Validation errors (raised by value types, before any I/O)
# ============================================================================


class ValidationError(ValueError):
    """Base class for input that fails value type construction."""


class EmptyAuthorNameError(ValidationError):
    """The author name is empty after trimming."""

    def __init__(self) -> None:
        super().__init__("author name cannot be empty")


class InvalidEmailAddressError(ValidationError):
    """The email address was rejected by the email validator."""

    def __init__(self, invalid_email: str):
        self.invalid_email = invalid_email
        super().__init__(f"{invalid_email} is not a valid email address")


class EmptyPostTitleError(ValidationError):
    """The post title is empty after trimming."""

    def __init__(self) -> None:
        super().__init__("post title cannot be empty")


# ============================================================================
# Author creation
# ============================================================================


class CreateAuthorError(Exception):
    """Base class for author creation failures.

    Subclasses: DuplicateAuthorError, UnknownAuthorError.
    """


class DuplicateAuthorError(CreateAuthorError):
    """An author with the same name already exists."""

    def __init__(self, name: "AuthorName"):
        self.name = name
        super().__init__(f"author with name {name} already exists")


class UnknownAuthorError(CreateAuthorError):
    """Any other author creation failure.

    Wraps the underlying cause opaquely. Callers should log it and report
    a generic failure; they must not inspect the cause to branch on it.
    """

    def __init__(self, cause: BaseException, message: str | None = None):
        self.cause = cause
        super().__init__(message or f"failed to create author: {cause}")
        self.__cause__ = cause


# ============================================================================
# Post creation
# ============================================================================


class CreatePostError(Exception):
    """Base class for post creation failures.

    Subclasses: AuthorNotFoundError, UnknownPostError.
    """


class AuthorNotFoundError(CreatePostError):
    """The author referenced by a post does not exist."""

    def __init__(self, author_id: UUID):
        self.author_id = author_id
        super().__init__(f"author with id {author_id} was not found")


class UnknownPostError(CreatePostError):
    """Any other post creation failure, wrapping its cause opaquely."""

    def __init__(self, cause: BaseException, message: str | None = None):
        self.cause = cause
        super().__init__(message or f"failed to create post: {cause}")
        self.__cause__ = cause
