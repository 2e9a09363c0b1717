"""Dedup locks for task enqueue and execution.

Redis ``SET NX EX`` in production; a process-local dict under TASKIQ_TESTING.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from time import monotonic

from redis.asyncio import Redis

from src.config import get_settings

_MEMORY_LOCKS: dict[str, float] = {}


def build_dedup_key(*, scope: str, task_name: str, fingerprint: str) -> str:
    return f"dedup:{scope}:{task_name}:{fingerprint}"


def _acquire_memory_lock(key: str, ttl_seconds: int) -> bool:
    now = monotonic()
    for lock_key in [k for k, expiry in _MEMORY_LOCKS.items() if expiry <= now]:
        del _MEMORY_LOCKS[lock_key]

    if key in _MEMORY_LOCKS:
        return False
    _MEMORY_LOCKS[key] = now + ttl_seconds
    return True


async def acquire_dedup_lock(key: str, ttl_seconds: int) -> bool:
    """Return True when the caller now holds ``key`` for ``ttl_seconds``."""

    settings = get_settings()
    if settings.taskiq_testing:
        return _acquire_memory_lock(key, ttl_seconds)

    client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        return bool(await client.set(key, "1", nx=True, ex=ttl_seconds))
    finally:
        await client.aclose()


async def release_dedup_lock(key: str) -> None:
    settings = get_settings()
    if settings.taskiq_testing:
        _MEMORY_LOCKS.pop(key, None)
        return

    client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        await client.delete(key)
    finally:
        await client.aclose()


@asynccontextmanager
async def held_lock(key: str, ttl_seconds: int) -> AsyncIterator[bool]:
    """Hold an execution lock for the body; yields False if already held."""

    acquired = await acquire_dedup_lock(key, ttl_seconds)
    try:
        yield acquired
    finally:
        if acquired:
            await release_dedup_lock(key)
