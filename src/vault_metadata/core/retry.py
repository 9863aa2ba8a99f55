"""Bounded retry of a single call."""

import logging
from dataclasses import dataclass, field
from time import sleep
from typing import Callable, TypeVar

from vault_metadata.clients import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_not_found(error: Exception) -> bool:
    return isinstance(error, NotFoundError)


@dataclass(frozen=True)
class RetryPolicy:
    """Retries a call a fixed number of times with a fixed delay.

    Only errors accepted by ``retry_on`` are retried; any other error is
    raised at once. When all attempts fail the last error is raised.

    Attributes:
        max_attempts: Total number of calls, including the first
        delay: Seconds to sleep between attempts
        retry_on: Predicate selecting the retryable errors
    """

    max_attempts: int = 10
    delay: float = 1.0
    retry_on: Callable[[Exception], bool] = field(default=is_not_found)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    def call(
        self,
        func: Callable[[], T],
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> T:
        """Call ``func`` until it succeeds or the policy gives up."""
        log = log or logger

        for attempt in range(1, self.max_attempts + 1):
            try:
                return func()
            except Exception as e:
                if not self.retry_on(e):
                    raise
                log.warning(f"Attempt {attempt}/{self.max_attempts} failed: {e}")
                if attempt == self.max_attempts:
                    raise
                log.debug(f"Sleeping {self.delay}s before next attempt")
                sleep(self.delay)
