"""Background task scheduling."""

from virtualtv.tasks.scheduler import ScheduledTask, TaskScheduler

__all__ = ["ScheduledTask", "TaskScheduler"]
