"""Taskiq broker and scheduler configuration."""

import importlib

import taskiq_fastapi
from taskiq import InMemoryBroker, TaskiqScheduler
from taskiq.schedule_sources import LabelScheduleSource
from taskiq_redis import RedisAsyncResultBackend, RedisStreamBroker

from src.config import get_settings

settings = get_settings()

if settings.taskiq_testing:
    broker = InMemoryBroker()
else:
    broker = RedisStreamBroker(url=settings.redis_url).with_result_backend(
        RedisAsyncResultBackend(
            redis_url=settings.redis_url,
            result_ex_time=settings.task_result_ttl_seconds,
        )
    )

taskiq_fastapi.init(broker, "src.main:app")

# Scheduled tasks declare their cron via the `schedule` task label.
scheduler = TaskiqScheduler(broker=broker, sources=[LabelScheduleSource(broker)])

importlib.import_module("src.taskiq_app.tasks")

__all__ = ["broker", "scheduler"]
