"""Dispatching of workflow step invocations."""

from .task_queue import QueueFullError, TaskQueue

__all__ = ["QueueFullError", "TaskQueue"]
