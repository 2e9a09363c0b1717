"""JSON routes for listing search, posts, likes, and reference data."""

import json
import logging
from datetime import UTC, datetime
from typing import cast

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import LikeIn, PostIn, PostUpdate
from src.cache import build_search_cache_key, cache_get, cache_set
from src.config import get_settings
from src.db.repositories import PostCreate, delete_user, fetch_cities
from src.db.session import get_db_session
from src.search.filters import CATEGORY_LABELS, normalize_filter
from src.services import LikeService, PostService
from src.taskiq_app.tasks import enqueue_reconcile_like_counts

logger = logging.getLogger(__name__)
settings = get_settings()

search_router = APIRouter(tags=["search"])
router = APIRouter(prefix="/api", tags=["api"])

_LIKE_STATUS_CODES = {
    "liked": status.HTTP_201_CREATED,
    "already_liked": status.HTTP_200_OK,
    "unliked": status.HTTP_200_OK,
    "not_found": status.HTTP_404_NOT_FOUND,
}


@search_router.get(settings.search_base_path)
async def search_posts(
    session: AsyncSession = Depends(get_db_session),
    query: str | None = None,
    category: str | None = None,
    city: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1),
) -> dict[str, object]:
    """Search posts by free text, category id, and city slug."""

    search_filter = normalize_filter(query, category, city)
    ttl = settings.search_cache_ttl_seconds
    cache_key = build_search_cache_key(search_filter, page, per_page)

    if ttl > 0:
        try:
            cached = await cache_get(cache_key)
        except RedisError as exc:
            logger.warning("Search cache read failed for %s: %s", cache_key, exc)
            cached = None
        if cached:
            result = cast(dict[str, object], json.loads(cached))
            result["cache_hit"] = True
            return result

    service = PostService(session)
    result = await service.search(search_filter, page=page, per_page=per_page)
    result["cache_hit"] = False

    if ttl > 0:
        try:
            await cache_set(cache_key, result, ttl)
        except RedisError as exc:
            logger.warning("Search cache write failed for %s: %s", cache_key, exc)
    return result


@router.get("/categories")
async def categories() -> list[dict[str, str]]:
    enabled = set(settings.enabled_categories)
    return [
        {"id": category.value, "name": label}
        for category, label in CATEGORY_LABELS.items()
        if category.value == "all" or category.value in enabled
    ]


@router.get("/cities")
async def cities(
    session: AsyncSession = Depends(get_db_session),
) -> list[dict[str, object]]:
    rows = await fetch_cities(session)
    return [{"id": city.id, "name": city.name, "slug": city.slug} for city in rows]


@router.get("/posts/{post_id}")
async def get_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    post = await PostService(session).get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostIn,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    return await PostService(session).create_post(PostCreate(**payload.model_dump()))


@router.patch("/posts/{post_id}")
async def update_post(
    post_id: int,
    payload: PostUpdate,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    changes = payload.model_dump(exclude_unset=True)
    nulled = sorted(key for key, value in changes.items() if value is None and key != "image")
    if nulled:
        raise HTTPException(
            status_code=422, detail=f"Fields cannot be null: {', '.join(nulled)}"
        )

    post = await PostService(session).update_post(post_id, changes)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, str]:
    if not await PostService(session).delete_post(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return {"status": "deleted"}


@router.post("/posts/{post_id}/likes")
async def like_post(
    post_id: int,
    payload: LikeIn,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    result = await LikeService(session).like(payload.user_id, post_id)
    response.status_code = _LIKE_STATUS_CODES[cast(str, result["status"])]
    return result


@router.post("/posts/{post_id}/likes/toggle")
async def toggle_like(
    post_id: int,
    payload: LikeIn,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    result = await LikeService(session).toggle(payload.user_id, post_id)
    response.status_code = _LIKE_STATUS_CODES[cast(str, result["status"])]
    return result


@router.delete("/posts/{post_id}/likes/{user_id}")
async def unlike_post(
    post_id: int,
    user_id: int,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    result = await LikeService(session).unlike(user_id, post_id)
    response.status_code = _LIKE_STATUS_CODES[cast(str, result["status"])]
    return result


@router.get("/users/{user_id}/likes")
async def liked_posts(
    user_id: int,
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, object]:
    items = await LikeService(session).list_liked_posts(user_id, limit)
    return {"user_id": user_id, "count": len(items), "items": items}


@router.delete("/users/{user_id}")
async def remove_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, str]:
    """Delete a user; their posts and likes are removed with them."""

    if not await delete_user(session, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"status": "deleted"}


@router.post("/maintenance/reconcile-likes", status_code=status.HTTP_202_ACCEPTED)
async def trigger_reconcile_likes(force: bool = False) -> dict[str, object]:
    """Enqueue like-counter reconciliation; repeated triggers are deduplicated."""

    fingerprint = "manual"
    if force:
        fingerprint = f"force-{datetime.now(UTC).isoformat()}"
    return await enqueue_reconcile_like_counts(fingerprint=fingerprint)
