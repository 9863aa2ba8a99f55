"""Tests for TaskQueue."""

import threading
from concurrent.futures import wait

import pytest

from vault_metadata.config import TaskQueueConfig
from vault_metadata.dispatch import QueueFullError, TaskQueue


class TestTaskQueue:
    """Tests for TaskQueue."""

    def test_runs_tasks(self):
        """Submitted tasks run and their futures complete."""
        results = []

        with TaskQueue(TaskQueueConfig(max_threads=2, max_queue_size=10)) as queue:
            futures = [queue.submit(lambda i=i: results.append(i)) for i in range(5)]
            wait(futures)

        assert sorted(results) == [0, 1, 2, 3, 4]

    def test_thread_names(self):
        """Workers are named after the configured format."""
        names = []
        config = TaskQueueConfig(name_format="dv-worker-%d", max_threads=1)

        with TaskQueue(config) as queue:
            queue.submit(lambda: names.append(threading.current_thread().name)).result()

        assert names[0].startswith("dv-worker")

    def test_rejects_when_full(self):
        """Submissions beyond running plus waiting capacity are rejected."""
        release = threading.Event()
        config = TaskQueueConfig(max_threads=1, max_queue_size=1)

        with TaskQueue(config) as queue:
            queue.submit(release.wait)
            queue.submit(release.wait)
            with pytest.raises(QueueFullError, match="full"):
                queue.submit(release.wait)
            release.set()

    def test_capacity_freed_after_completion(self):
        """A finished task makes room for a new one."""
        config = TaskQueueConfig(max_threads=1, max_queue_size=0)

        with TaskQueue(config) as queue:
            queue.submit(lambda: None).result()
            # The slot is released by a done callback, which may lag result().
            for _ in range(100):
                try:
                    future = queue.submit(lambda: "again")
                    break
                except QueueFullError:
                    threading.Event().wait(0.01)
            assert future.result() == "again"

    def test_submit_after_shutdown(self):
        """A stopped queue rejects submissions and gives the slot back."""
        queue = TaskQueue(TaskQueueConfig(max_threads=1, max_queue_size=0))
        queue.shutdown()

        with pytest.raises(RuntimeError):
            queue.submit(lambda: None)
        with pytest.raises(RuntimeError):
            queue.submit(lambda: None)
