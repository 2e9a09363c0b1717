"""Business logic for post search and management."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.repositories import (
    PostCreate,
    create_post,
    delete_post,
    fetch_post,
    update_post,
)
from src.models.post import Post
from src.search.executor import StoreQueryExecutor
from src.search.filters import SearchFilter
from src.search.pagination import Page


def serialize_post(post: Post) -> dict[str, object]:
    return {
        "id": post.id,
        "title": post.title,
        "description": post.description,
        "city": post.city,
        "city_slug": post.city,
        "sector": post.sector,
        "price": float(post.price) if post.price is not None else None,
        "product": post.product,
        "type": post.type,
        "bedrooms": post.bedrooms,
        "bathrooms": post.bathrooms,
        "area": float(post.area) if post.area is not None else None,
        "address": post.address,
        "address_maps": post.address_maps,
        "image": post.image,
        "likes": post.likes,
        "user_id": post.user_id,
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


def serialize_page(page: Page[Any], search_filter: SearchFilter) -> dict[str, object]:
    """JSON shape of a search page: filters, data, links, meta."""

    data = [
        serialize_post(item) if isinstance(item, Post) else dict(item)
        for item in page.items
    ]
    return {
        "filters": search_filter.as_query_params(),
        "data": data,
        "links": [link.to_dict() for link in page.links],
        "meta": page.meta(),
    }


class PostService:
    """Service layer for post endpoints."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def search(
        self,
        search_filter: SearchFilter,
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> dict[str, object]:
        """Run a store-backed search and serialize the page."""

        executor = StoreQueryExecutor(self._session)
        result = await executor.execute(search_filter, page=page, per_page=per_page)
        return serialize_page(result, search_filter)

    async def get_post(self, post_id: int) -> dict[str, object] | None:
        post = await fetch_post(self._session, post_id)
        return serialize_post(post) if post is not None else None

    async def create_post(self, payload: PostCreate) -> dict[str, object]:
        post = await create_post(self._session, payload)
        return serialize_post(post)

    async def update_post(
        self, post_id: int, changes: Mapping[str, object]
    ) -> dict[str, object] | None:
        post = await update_post(self._session, post_id, changes)
        return serialize_post(post) if post is not None else None

    async def delete_post(self, post_id: int) -> bool:
        return await delete_post(self._session, post_id)
