"""Bounded worker pool for running workflow step tasks concurrently."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from vault_metadata.config import TaskQueueConfig

logger = logging.getLogger(__name__)


class QueueFullError(Exception):
    """Raised when a task is submitted to a queue that has no room left."""

    pass


class TaskQueue:
    """Runs tasks on a fixed number of worker threads.

    At most ``max_threads`` tasks run at once and at most
    ``max_queue_size`` more wait for a worker; further submissions are
    rejected instead of piling up.

    Example:
        with TaskQueue(config.task_queue) as queue:
            for invocation in invocations:
                queue.submit(factory.create(invocation).run)
    """

    def __init__(self, config: TaskQueueConfig):
        self.config = config
        self._executor = ThreadPoolExecutor(
            max_workers=config.max_threads,
            thread_name_prefix=config.thread_name_prefix,
        )
        self._slots = threading.BoundedSemaphore(config.max_threads + config.max_queue_size)

    def submit(self, task: Callable[[], None]) -> Future:
        """Schedule a task.

        Raises:
            QueueFullError: If the queue is at capacity
        """
        if not self._slots.acquire(blocking=False):
            raise QueueFullError(
                f"Task queue is full ({self.config.max_threads} running, "
                f"{self.config.max_queue_size} waiting)"
            )

        try:
            future = self._executor.submit(task)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        logger.debug(f"Submitted {task!r}")
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks, optionally waiting for queued ones to finish."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "TaskQueue":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)
