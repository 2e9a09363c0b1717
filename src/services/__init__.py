"""Service layer."""

from src.services.like_service import LikeService
from src.services.post_service import PostService

__all__ = ["LikeService", "PostService"]
