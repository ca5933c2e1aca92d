"""
Unit tests for the background task scheduler.
"""

import asyncio

import pytest

from virtualtv.tasks import TaskScheduler


@pytest.mark.unit
class TestTaskScheduler:
    """Tests for TaskScheduler."""

    def test_add_and_remove(self):
        """Test registering and removing tasks."""
        scheduler = TaskScheduler()

        async def noop():
            return None

        scheduler.add_task("refresh", noop, 60)

        tasks = scheduler.get_tasks()
        assert [t["name"] for t in tasks] == ["refresh"]
        assert tasks[0]["interval_seconds"] == 60
        assert tasks[0]["next_run"] is not None
        assert scheduler.remove_task("refresh") is True
        assert scheduler.remove_task("refresh") is False

    @pytest.mark.asyncio
    async def test_run_task_manually(self):
        """Test a task can be triggered on demand."""
        calls = []

        async def refresh(label):
            calls.append(label)

        scheduler = TaskScheduler()
        scheduler.add_task("refresh", refresh, 3600, False, None, "manual")

        assert await scheduler.run_task("refresh") is True
        assert await scheduler.run_task("missing") is False
        assert calls == ["manual"]
        assert scheduler.get_tasks()[0]["run_count"] == 1

    @pytest.mark.asyncio
    async def test_failures_are_counted(self):
        """Test a failing task is recorded and does not raise."""
        async def broken():
            raise RuntimeError("boom")

        scheduler = TaskScheduler()
        scheduler.add_task("broken", broken, 60)

        await scheduler.run_task("broken")

        status = scheduler.get_tasks()[0]
        assert status["failure_count"] == 1
        assert status["is_running"] is False

    @pytest.mark.asyncio
    async def test_immediate_task_runs_after_start(self):
        """Test run_immediately tasks fire once the loop starts."""
        ran = asyncio.Event()

        async def refresh():
            ran.set()

        scheduler = TaskScheduler(tick_seconds=0.01)
        scheduler.add_task("refresh", refresh, 3600, run_immediately=True)

        await scheduler.start()
        try:
            await asyncio.wait_for(ran.wait(), timeout=2)
        finally:
            await scheduler.stop()

        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_stop_cancels_running_tasks(self):
        """Test stopping cancels tasks still in flight."""
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def slow():
            started.set()
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        scheduler = TaskScheduler(tick_seconds=0.01)
        scheduler.add_task("slow", slow, 3600, run_immediately=True)
        await scheduler.start()
        await asyncio.wait_for(started.wait(), timeout=2)

        await scheduler.stop()

        assert cancelled.is_set()
