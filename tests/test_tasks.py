from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, cast

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import src.taskiq_app.tasks as task_module
from src.db.repositories import add_post_like, fetch_post
from src.models import Post
from src.taskiq_app.dedup import _MEMORY_LOCKS, acquire_dedup_lock, build_dedup_key
from src.taskiq_app.tasks import (
    RECONCILE_TASK_NAME,
    enqueue_reconcile_like_counts,
    reconcile_like_counts_task,
)

EXECUTION_KEY = build_dedup_key(
    scope="execution", task_name=RECONCILE_TASK_NAME, fingerprint="default"
)


@pytest.mark.anyio
async def test_reconcile_task_reports_repaired_count(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_reconcile() -> int:
        return 3

    monkeypatch.setattr("src.taskiq_app.tasks._reconcile", fake_reconcile)

    task_fn = cast(Any, reconcile_like_counts_task)
    task = await task_fn.kiq()
    result = await task.wait_result(timeout=30)

    assert result.is_err is False
    assert result.return_value == {"status": "ok", "repaired": 3}
    assert EXECUTION_KEY not in _MEMORY_LOCKS


@pytest.mark.anyio
async def test_reconcile_task_skips_when_execution_lock_held(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[str] = []

    async def fake_reconcile() -> int:
        calls.append("ran")
        return 0

    monkeypatch.setattr("src.taskiq_app.tasks._reconcile", fake_reconcile)
    assert await acquire_dedup_lock(EXECUTION_KEY, 60) is True

    task_fn = cast(Any, reconcile_like_counts_task)
    task = await task_fn.kiq()
    result = await task.wait_result(timeout=30)

    assert result.return_value == {"status": "skipped_duplicate_execution", "repaired": 0}
    assert calls == []
    assert EXECUTION_KEY in _MEMORY_LOCKS


@pytest.mark.anyio
async def test_reconcile_task_releases_lock_on_failure(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_reconcile() -> int:
        raise RuntimeError("Simulated store failure")

    monkeypatch.setattr("src.taskiq_app.tasks._reconcile", fake_reconcile)

    task_fn = cast(Any, reconcile_like_counts_task)
    task = await task_fn.kiq()
    result = await task.wait_result(timeout=30)

    assert result.is_err is True
    assert EXECUTION_KEY not in _MEMORY_LOCKS


@pytest.mark.anyio
async def test_reconcile_task_repairs_store(
    monkeypatch: pytest.MonkeyPatch,
    db_sessionmaker: async_sessionmaker[AsyncSession],
    db_session: AsyncSession,
    make_user: Any,
    make_post: Any,
) -> None:
    owner = await make_user(name="Owner")
    post = await make_post(owner)
    await add_post_like(db_session, owner.id, post.id)
    await db_session.execute(update(Post).where(Post.id == post.id).values(likes=4))
    await db_session.commit()

    @asynccontextmanager
    async def fake_session_context() -> AsyncIterator[AsyncSession]:
        async with db_sessionmaker() as session:
            yield session

    monkeypatch.setattr(task_module, "session_context", fake_session_context)

    task_fn = cast(Any, reconcile_like_counts_task)
    task = await task_fn.kiq()
    result = await task.wait_result(timeout=30)

    assert result.return_value == {"status": "ok", "repaired": 1}
    refreshed = await fetch_post(db_session, post.id)
    assert refreshed is not None
    assert refreshed.likes == 1


@pytest.mark.anyio
async def test_enqueue_reconcile_like_counts_dedup(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    class DummyTask:
        task_id: str = "reconcile-task-123"

    async def fake_kiq(*args: object, **kwargs: object):  # noqa: ARG001
        return DummyTask()

    task_fn = cast(Any, reconcile_like_counts_task)
    monkeypatch.setattr(task_fn, "kiq", fake_kiq)

    first = await enqueue_reconcile_like_counts(fingerprint="manual-test")
    second = await enqueue_reconcile_like_counts(fingerprint="manual-test")
    other = await enqueue_reconcile_like_counts(fingerprint="another")

    assert first == {"enqueued": True, "task_id": "reconcile-task-123"}
    assert second == {"enqueued": False, "reason": "duplicate_enqueue"}
    assert other["enqueued"] is True


@pytest.mark.anyio
async def test_reconcile_task_is_scheduled() -> None:
    labels = cast(Any, reconcile_like_counts_task).labels

    assert labels["schedule"] == [{"cron": "15 */6 * * *"}]
