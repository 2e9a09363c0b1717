"""Taskiq tasks for like-counter maintenance."""

import logging
from typing import Any, cast

from src.config import get_settings
from src.db.repositories import reconcile_like_counts
from src.db.session import session_context
from src.taskiq_app.broker import broker
from src.taskiq_app.dedup import acquire_dedup_lock, build_dedup_key, held_lock

logger = logging.getLogger(__name__)
settings = get_settings()

RECONCILE_TASK_NAME = "reconcile_like_counts"


async def _reconcile() -> int:
    async with session_context() as session:
        return await reconcile_like_counts(session)


@broker.task(
    task_name=RECONCILE_TASK_NAME,
    schedule=[{"cron": "15 */6 * * *"}],
    retry_on_error=True,
    max_retries=3,
)
async def reconcile_like_counts_task() -> dict[str, object]:
    """Bring every post's like counter back in line with its like rows."""

    dedup_key = build_dedup_key(
        scope="execution", task_name=RECONCILE_TASK_NAME, fingerprint="default"
    )
    async with held_lock(dedup_key, settings.reconcile_dedup_ttl_seconds) as acquired:
        if not acquired:
            logger.info("%s skipped due to dedup lock", RECONCILE_TASK_NAME)
            return {"status": "skipped_duplicate_execution", "repaired": 0}

        repaired = await _reconcile()
        logger.info("%s repaired %s posts", RECONCILE_TASK_NAME, repaired)
        return {"status": "ok", "repaired": repaired}


async def enqueue_reconcile_like_counts(
    *, fingerprint: str = "manual"
) -> dict[str, object]:
    """Enqueue counter reconciliation once per dedup window."""

    dedup_key = build_dedup_key(
        scope="enqueue", task_name=RECONCILE_TASK_NAME, fingerprint=fingerprint
    )
    if not await acquire_dedup_lock(dedup_key, settings.reconcile_dedup_ttl_seconds):
        return {"enqueued": False, "reason": "duplicate_enqueue"}

    task = await cast(Any, reconcile_like_counts_task).kiq()
    return {"enqueued": True, "task_id": task.task_id}
