"""Redis cache helpers for search result pages."""

import hashlib
import json
from typing import Any, cast

from redis.asyncio import Redis

from src.config import get_settings
from src.search.filters import SearchFilter

settings = get_settings()


def build_search_cache_key(
    search_filter: SearchFilter,
    page: int,
    per_page: int | None,
) -> str:
    filters = {
        "query": search_filter.query or "",
        "category": search_filter.category.value if search_filter.category else "",
        "city": search_filter.city or "",
        "page": page,
        "per_page": per_page,
    }
    data = json.dumps(filters, sort_keys=True)
    hash_val = hashlib.md5(data.encode()).hexdigest()[:16]
    return f"search:posts:{hash_val}"


async def cache_get(key: str) -> str | None:
    client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        value = await client.get(key)
        return cast(str, value) if value else None
    finally:
        await client.aclose()


async def cache_set(key: str, value: Any, ttl_seconds: int) -> None:
    json_value = json.dumps(value)
    client = Redis.from_url(settings.redis_url, encoding="utf-8")
    try:
        await client.set(key, json_value, ex=ttl_seconds)
    finally:
        await client.aclose()
