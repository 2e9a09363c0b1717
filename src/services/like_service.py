"""Business logic for post likes."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.repositories import (
    add_post_like,
    fetch_post,
    fetch_post_likes,
    fetch_posts_by_ids,
    remove_post_like,
)
from src.errors import DuplicateLikeError, PostNotFoundError, UserNotFoundError
from src.services.post_service import serialize_post

logger = logging.getLogger(__name__)


class LikeService:
    """Service layer for like endpoints."""

    _session: AsyncSession

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _likes_of(self, post_id: int) -> int | None:
        post = await fetch_post(self._session, post_id)
        return post.likes if post is not None else None

    async def like(self, user_id: int, post_id: int) -> dict[str, object]:
        """Like a post. A repeated like is reported, not raised."""

        try:
            await add_post_like(self._session, user_id, post_id)
        except DuplicateLikeError:
            logger.debug("User %s already liked post %s", user_id, post_id)
            return {
                "user_id": user_id,
                "post_id": post_id,
                "status": "already_liked",
                "likes": await self._likes_of(post_id),
                "message": "Post already liked",
            }
        except (PostNotFoundError, UserNotFoundError) as exc:
            return {
                "user_id": user_id,
                "post_id": post_id,
                "status": "not_found",
                "message": str(exc),
            }

        return {
            "user_id": user_id,
            "post_id": post_id,
            "status": "liked",
            "likes": await self._likes_of(post_id),
            "message": "Post liked",
        }

    async def unlike(self, user_id: int, post_id: int) -> dict[str, object]:
        deleted = await remove_post_like(self._session, user_id, post_id)

        if not deleted:
            return {
                "user_id": user_id,
                "post_id": post_id,
                "status": "not_found",
                "message": "Like not found",
            }

        return {
            "user_id": user_id,
            "post_id": post_id,
            "status": "unliked",
            "likes": await self._likes_of(post_id),
            "message": "Like removed",
        }

    async def toggle(self, user_id: int, post_id: int) -> dict[str, object]:
        """Unlike when the like exists, otherwise like."""

        existing = await fetch_post_likes(
            self._session, user_id=user_id, post_id=post_id, limit=1
        )
        if existing:
            return await self.unlike(user_id, post_id)
        return await self.like(user_id, post_id)

    async def list_liked_posts(
        self, user_id: int, limit: int = 50
    ) -> list[dict[str, object]]:
        """List a user's liked posts, most recent like first."""

        likes = await fetch_post_likes(self._session, user_id=user_id, limit=limit)
        post_ids = [like.post_id for like in likes]
        if not post_ids:
            return []

        posts = {post.id: post for post in await fetch_posts_by_ids(self._session, post_ids)}

        result = []
        for like in likes:
            post = posts.get(like.post_id)
            if post:
                result.append(
                    {
                        "like_id": like.id,
                        "user_id": like.user_id,
                        "post_id": like.post_id,
                        "created_at": like.created_at.isoformat()
                        if like.created_at
                        else None,
                        "post": serialize_post(post),
                    }
                )
        return result
