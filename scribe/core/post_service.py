"""Post creation service."""

import logging

from .errors import CreatePostError
from .models import CreatePostRequest, Post
from .ports import PostRepository, PostServicePort

logger = logging.getLogger(__name__)


class PostService(PostServicePort):
    """Creates posts for existing authors through a PostRepository."""

    def __init__(self, repo: PostRepository):
        self.repo = repo

    async def create_post(self, req: CreatePostRequest) -> Post:
        """Persist the post described by req.

        Raises:
            CreatePostError: Propagated unchanged from the repository.
        """
        try:
            post = await self.repo.create_post(req)
        except CreatePostError as e:
            logger.info(f"Post creation failed for author {req.author_id}: {e}")
            raise

        logger.info(f"Created post {post.id} for author {post.author_id}")
        return post
