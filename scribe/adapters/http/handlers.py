"""HTTP request handling for the Scribe API.

Turns decoded JSON request bodies into domain requests, calls the driving
ports, and maps every outcome, including every domain error variant, to
an ApiResponse. Independent of the transport so it can be tested without
a socket.

Response envelope:
    {"status_code": <int>, "data": <payload>}
Error payload:
    {"message": <str>}
"""

import logging
import uuid
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from scribe.core.errors import (
    AuthorNotFoundError,
    CreateAuthorError,
    CreatePostError,
    DuplicateAuthorError,
    UnknownAuthorError,
    UnknownPostError,
    ValidationError,
)
from scribe.core.models import (
    Author,
    AuthorName,
    CreateAuthorRequest,
    CreatePostRequest,
    EmailAddress,
    Post,
    PostTitle,
)
from scribe.core.ports import AuthorServicePort, PostServicePort

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class ApiResponse:
    """A status code and the JSON body to send with it."""

    status_code: int
    body: dict[str, Any]

    @classmethod
    def success(cls, status: HTTPStatus, data: dict[str, Any]) -> "ApiResponse":
        return cls(int(status), {"status_code": int(status), "data": data})

    @classmethod
    def error(cls, status: HTTPStatus, message: str) -> "ApiResponse":
        return cls(int(status), {"status_code": int(status), "data": {"message": message}})

    @classmethod
    def internal_error(cls) -> "ApiResponse":
        return cls.error(HTTPStatus.INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR_MESSAGE)


class RequestBodyError(ValueError):
    """The request body is missing a field or a field has the wrong type."""


def _require_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise RequestBodyError("request body must be a JSON object")
    return data


def _require_str(data: dict[str, Any], field: str) -> str:
    if field not in data:
        raise RequestBodyError(f"missing field `{field}`")
    value = data[field]
    if not isinstance(value, str):
        raise RequestBodyError(f"field `{field}` must be a string")
    return value


def _optional_str(data: dict[str, Any], field: str) -> str | None:
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise RequestBodyError(f"field `{field}` must be a string")
    return value


def parse_create_author_body(data: Any) -> CreateAuthorRequest:
    """Convert a decoded request body into a domain request.

    Raises:
        RequestBodyError: If fields are missing or mistyped.
        ValidationError: If a value type rejects its input.
    """
    body = _require_object(data)
    name = AuthorName(_require_str(body, "name"))
    raw_email = _optional_str(body, "email_address")
    email = EmailAddress(raw_email) if raw_email is not None else None
    return CreateAuthorRequest(name=name, email=email)


def parse_create_post_body(data: Any) -> CreatePostRequest:
    """Convert a decoded request body into a domain request.

    Raises:
        RequestBodyError: If fields are missing, mistyped, or author_id
            is not a UUID.
        ValidationError: If the title is empty.
    """
    body = _require_object(data)
    title = PostTitle(_require_str(body, "title"))
    content = _require_str(body, "content")
    raw_author_id = _require_str(body, "author_id")
    try:
        author_id = uuid.UUID(raw_author_id)
    except ValueError as e:
        raise RequestBodyError(f"{raw_author_id} is not a valid author id") from e
    return CreatePostRequest(title=title, content=content, author_id=author_id)


def author_response_data(author: Author) -> dict[str, Any]:
    return {"id": str(author.id), "name": str(author.name)}


def post_response_data(post: Post) -> dict[str, Any]:
    return {"id": str(post.id), "title": str(post.title), "author_id": str(post.author_id)}


def create_author_error_response(error: CreateAuthorError) -> ApiResponse:
    """Map every CreateAuthorError variant to a response.

    Raises:
        TypeError: For a variant this function does not know, so that a
            new variant cannot silently fall through.
    """
    if isinstance(error, DuplicateAuthorError):
        return ApiResponse.error(HTTPStatus.UNPROCESSABLE_ENTITY, str(error))
    if isinstance(error, UnknownAuthorError):
        logger.error(f"Author creation failed: {error}", exc_info=error)
        return ApiResponse.internal_error()
    raise TypeError(f"Unhandled CreateAuthorError variant: {type(error).__name__}")


def create_post_error_response(error: CreatePostError) -> ApiResponse:
    """Map every CreatePostError variant to a response.

    Raises:
        TypeError: For a variant this function does not know.
    """
    if isinstance(error, AuthorNotFoundError):
        return ApiResponse.error(HTTPStatus.UNPROCESSABLE_ENTITY, str(error))
    if isinstance(error, UnknownPostError):
        logger.error(f"Post creation failed: {error}", exc_info=error)
        return ApiResponse.internal_error()
    raise TypeError(f"Unhandled CreatePostError variant: {type(error).__name__}")


class ApiRequestHandler:
    """Handles API requests by forwarding them to the driving ports."""

    def __init__(
        self,
        author_service: AuthorServicePort,
        post_service: PostServicePort | None = None,
    ):
        """Initialize the request handler.

        Args:
            author_service: AuthorServicePort implementation.
            post_service: Optional PostServicePort implementation. Post
                requests are answered with 404 when it is absent.
        """
        self.author_service = author_service
        self.post_service = post_service

    async def handle_create_author(self, data: Any) -> ApiResponse:
        """Create an author.

        Responses:
            201: The author was created.
            422: Invalid input or an author with the same name exists.
            500: Any other failure; the cause is only logged.
        """
        try:
            req = parse_create_author_body(data)
        except (RequestBodyError, ValidationError) as e:
            return ApiResponse.error(HTTPStatus.UNPROCESSABLE_ENTITY, str(e))

        try:
            author = await self.author_service.create_author(req)
        except CreateAuthorError as e:
            return create_author_error_response(e)

        return ApiResponse.success(HTTPStatus.CREATED, author_response_data(author))

    async def handle_create_post(self, data: Any) -> ApiResponse:
        """Create a post.

        Responses:
            201: The post was created.
            404: Posts are not enabled on this server.
            422: Invalid input or unknown author.
            500: Any other failure; the cause is only logged.
        """
        if self.post_service is None:
            return ApiResponse.error(HTTPStatus.NOT_FOUND, "Not found")

        try:
            req = parse_create_post_body(data)
        except (RequestBodyError, ValidationError) as e:
            return ApiResponse.error(HTTPStatus.UNPROCESSABLE_ENTITY, str(e))

        try:
            post = await self.post_service.create_post(req)
        except CreatePostError as e:
            return create_post_error_response(e)

        return ApiResponse.success(HTTPStatus.CREATED, post_response_data(post))

    @staticmethod
    def handle_health() -> ApiResponse:
        return ApiResponse.success(HTTPStatus.OK, {"status": "healthy"})
