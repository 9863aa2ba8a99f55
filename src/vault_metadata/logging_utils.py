"""Logging helpers for the vault metadata step."""

import logging
from typing import Any, MutableMapping

from schemas.invocation import StepInvocation


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


class InvocationLoggerAdapter(logging.LoggerAdapter):
    """Logger that tags every record with the invocation it belongs to.

    Several invocations run concurrently, so each message is prefixed with
    the invocation id and dataset global id, which are also added to the
    record as ``invocation_id`` and ``global_id``.
    """

    def __init__(self, logger: logging.Logger, invocation: StepInvocation):
        super().__init__(
            logger,
            {"invocation_id": invocation.invocation_id, "global_id": invocation.global_id},
        )

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"[{extra['invocation_id']} {extra['global_id']}] {msg}", kwargs


def invocation_logger(
    logger: logging.Logger | logging.LoggerAdapter, invocation: StepInvocation
) -> logging.LoggerAdapter:
    """Wrap a module logger for one invocation.

    An adapter that is already bound is returned unchanged.
    """
    if isinstance(logger, logging.LoggerAdapter):
        return logger
    return InvocationLoggerAdapter(logger, invocation)
