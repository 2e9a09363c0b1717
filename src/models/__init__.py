"""SQLAlchemy ORM models."""

from src.models.base import Base
from src.models.city import City
from src.models.post import Post
from src.models.post_like import PostLike
from src.models.user import User

__all__ = ["Base", "City", "Post", "PostLike", "User"]
