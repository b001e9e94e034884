"""Core domain logic for the Scribe author service.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .errors import (
    AuthorNotFoundError,
    CreateAuthorError,
    CreatePostError,
    DuplicateAuthorError,
    EmptyAuthorNameError,
    EmptyPostTitleError,
    InvalidEmailAddressError,
    UnknownAuthorError,
    UnknownPostError,
    ValidationError,
)
from .models import (
    Author,
    AuthorName,
    CreateAuthorRequest,
    CreatePostRequest,
    EmailAddress,
    Post,
    PostTitle,
    validate_email_address,
)

__all__ = [
    "Author",
    "AuthorName",
    "AuthorNotFoundError",
    "CreateAuthorError",
    "CreateAuthorRequest",
    "CreatePostError",
    "CreatePostRequest",
    "DuplicateAuthorError",
    "EmailAddress",
    "EmptyAuthorNameError",
    "EmptyPostTitleError",
    "InvalidEmailAddressError",
    "Post",
    "PostTitle",
    "UnknownAuthorError",
    "UnknownPostError",
    "ValidationError",
    "validate_email_address",
]
