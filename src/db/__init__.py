"""Database session and repository utilities."""

from src.db.session import (
    build_engine,
    dispose_engine,
    get_db_session,
    get_engine,
    get_sessionmaker,
    session_context,
)
from src.db.repositories import (
    PostCreate,
    add_post_like,
    create_post,
    create_user,
    delete_post,
    delete_user,
    fetch_cities,
    fetch_post,
    fetch_post_likes,
    fetch_posts_by_ids,
    reconcile_like_counts,
    remove_post_like,
    search_posts,
    update_post,
    upsert_city,
)

__all__ = [
    "build_engine",
    "dispose_engine",
    "get_db_session",
    "get_engine",
    "get_sessionmaker",
    "session_context",
    "PostCreate",
    "add_post_like",
    "create_post",
    "create_user",
    "delete_post",
    "delete_user",
    "fetch_cities",
    "fetch_post",
    "fetch_post_likes",
    "fetch_posts_by_ids",
    "reconcile_like_counts",
    "remove_post_like",
    "search_posts",
    "update_post",
    "upsert_city",
]
