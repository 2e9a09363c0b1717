"""Worker and scheduler entrypoints.

Run with ``taskiq worker src.taskiq_app.worker:broker`` and
``taskiq scheduler src.taskiq_app.worker:scheduler``.
"""

from src.taskiq_app.broker import broker, scheduler
from src.taskiq_app import tasks as _tasks  # noqa: F401

__all__ = ["broker", "scheduler"]
