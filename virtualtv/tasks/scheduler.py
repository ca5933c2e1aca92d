"""
Task scheduler for periodic background work.

Runs guide refresh, maintenance, and auto-channel updates on fixed
intervals. Each task calls the same public operation that on-demand
callers use.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ScheduledTask:
    """A periodic task."""

    name: str
    func: Callable[..., Awaitable[Any]]
    interval_seconds: int
    args: tuple = field(default_factory=tuple)
    kwargs: Dict[str, Any] = field(default_factory=dict)

    # State
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    run_count: int = 0
    failure_count: int = 0
    is_running: bool = False

    def calculate_next_run(self) -> datetime:
        base = self.last_run or _now()
        return base + timedelta(seconds=self.interval_seconds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "interval_seconds": self.interval_seconds,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "run_count": self.run_count,
            "failure_count": self.failure_count,
            "is_running": self.is_running,
        }


class TaskScheduler:
    """
    Interval scheduler for async background tasks.

    Features:
    - Interval-based scheduling
    - Optional immediate first run
    - Manual triggering
    - Graceful shutdown
    """

    def __init__(self, tick_seconds: float = 1.0):
        self._tasks: Dict[str, ScheduledTask] = {}
        self._running = False
        self._tick_seconds = tick_seconds
        self._loop_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._running

    def add_task(
        self,
        name: str,
        func: Callable[..., Awaitable[Any]],
        interval_seconds: int,
        run_immediately: bool = False,
        first_delay_seconds: Optional[int] = None,
        *args,
        **kwargs,
    ) -> None:
        """
        Add a periodic task.

        Args:
            name: Unique task name.
            func: Async function to execute.
            interval_seconds: Run interval in seconds.
            run_immediately: Run once as soon as the scheduler starts.
            first_delay_seconds: Delay before the first run; defaults to
                the interval.
        """
        task = ScheduledTask(
            name=name,
            func=func,
            interval_seconds=interval_seconds,
            args=args,
            kwargs=kwargs,
        )

        if run_immediately:
            task.next_run = _now()
        else:
            delay = interval_seconds if first_delay_seconds is None else first_delay_seconds
            task.next_run = _now() + timedelta(seconds=delay)

        self._tasks[name] = task
        logger.info(f"Scheduled task added: {name} (every {interval_seconds}s)")

    def remove_task(self, name: str) -> bool:
        """Remove a scheduled task."""
        if self._tasks.pop(name, None) is not None:
            logger.info(f"Scheduled task removed: {name}")
            return True
        return False

    async def start(self) -> None:
        """Start the scheduler."""
        if self._running:
            return

        self._running = True
        self._loop_task = asyncio.create_task(self._scheduler_loop())
        logger.info("Task scheduler started")

    async def stop(self) -> None:
        """Stop the scheduler and cancel tasks still running."""
        if not self._running:
            return

        self._running = False

        pending = [t for t in (self._loop_task, *self._inflight) if t is not None]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._inflight.clear()

        logger.info("Task scheduler stopped")

    async def run_task(self, name: str) -> bool:
        """Manually trigger a task. Returns False if it does not exist."""
        task = self._tasks.get(name)
        if not task:
            return False

        await self._execute_task(task)
        return True

    def get_tasks(self) -> List[Dict[str, Any]]:
        """Get status for all tasks."""
        return [task.to_dict() for task in self._tasks.values()]

    async def _scheduler_loop(self) -> None:
        """Main scheduler loop."""
        while self._running:
            now = _now()
            for task in list(self._tasks.values()):
                if task.next_run and task.next_run <= now and not task.is_running:
                    # Mark before the task gets a chance to run
                    task.is_running = True
                    runner = asyncio.create_task(self._execute_task(task))
                    self._inflight.add(runner)
                    runner.add_done_callback(self._inflight.discard)

            await asyncio.sleep(self._tick_seconds)

    async def _execute_task(self, task: ScheduledTask) -> None:
        """Execute a task once."""
        task.is_running = True
        task.last_run = _now()

        try:
            logger.debug(f"Running scheduled task: {task.name}")
            await task.func(*task.args, **task.kwargs)
            task.run_count += 1
            logger.debug(f"Scheduled task completed: {task.name}")

        except asyncio.CancelledError:
            raise

        except Exception as e:
            task.failure_count += 1
            logger.error(f"Scheduled task failed: {task.name}: {e}", exc_info=True)

        finally:
            task.is_running = False
            task.next_run = task.calculate_next_run()
