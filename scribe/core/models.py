"""Domain models for the Scribe author service.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.

Value types validate their input on creation, so code that receives an
AuthorName or EmailAddress never has to re-validate it.
"""

import re
from collections.abc import Callable
from dataclasses import InitVar, dataclass
from uuid import UUID

from .errors import EmptyAuthorNameError, EmptyPostTitleError, InvalidEmailAddressError

EmailValidator = Callable[[str], bool]

# One "@", no whitespace, at least one dot in the domain part.
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_email_address(candidate: str) -> bool:
    """Default email validation rule.

    Accepts ``local@domain.tld`` shaped strings. This is a structural
    check, not RFC 5322 parsing; pass another validator to EmailAddress
    where stricter rules are needed.
    """
    return _EMAIL_PATTERN.match(candidate) is not None


@dataclass(frozen=True, order=True)
class AuthorName:
    """A valid author name: trimmed and never empty."""

    value: str

    def __post_init__(self) -> None:
        """Trim the raw value and reject empty names."""
        trimmed = self.value.strip()
        if not trimmed:
            raise EmptyAuthorNameError()
        object.__setattr__(self, "value", trimmed)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class EmailAddress:
    """A valid email address.

    The validator is an init-only argument: it decides whether the
    trimmed value is acceptable and is not stored on the instance.

    Raises:
        InvalidEmailAddressError: If the validator rejects the value.
    """

    value: str
    validator: InitVar[EmailValidator] = validate_email_address

    def __post_init__(self, validator: EmailValidator) -> None:
        trimmed = self.value.strip()
        if not validator(trimmed):
            raise InvalidEmailAddressError(trimmed)
        object.__setattr__(self, "value", trimmed)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class PostTitle:
    """The trimmed title of a post; never empty."""

    value: str

    def __post_init__(self) -> None:
        trimmed = self.value.strip()
        if not trimmed:
            raise EmptyPostTitleError()
        object.__setattr__(self, "value", trimmed)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Author:
    """A uniquely identifiable author of posts.

    Created only by a repository, never mutated afterwards.
    """

    id: UUID
    name: AuthorName
    email: EmailAddress | None = None


@dataclass(frozen=True)
class CreateAuthorRequest:
    """The fields required by the domain to create an Author."""

    name: AuthorName
    email: EmailAddress | None = None


@dataclass(frozen=True)
class Post:
    """A post published by an existing author."""

    id: UUID
    title: PostTitle
    content: str
    author_id: UUID


@dataclass(frozen=True)
class CreatePostRequest:
    """The fields required by the domain to create a Post."""

    title: PostTitle
    content: str
    author_id: UUID
