"""Resuming the paused Dataverse workflow."""

import logging
from typing import Literal

from schemas.invocation import StepInvocation
from schemas.resume_message import ResumeMessage
from vault_metadata.logging_utils import invocation_logger

from .repository import RepositoryClient
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class WorkflowResumer:
    """Tells Dataverse to continue (or abort) the paused publication.

    Dataverse may answer 404 when the step calls back before the paused
    workflow record is visible, so those responses are retried under the
    policy. Other errors are not retried.

    Attributes:
        repository: Repository that receives the resume call
        retry_policy: Policy applied around each resume call
    """

    def __init__(self, repository: RepositoryClient, retry_policy: RetryPolicy | None = None):
        self.repository = repository
        self.retry_policy = retry_policy or RetryPolicy()

    def resume(
        self,
        invocation: StepInvocation,
        status: Literal["Success", "Failure"],
        message: str = "",
        detail: str = "",
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Resume the workflow of the invocation.

        Args:
            invocation: The step invocation to resume
            status: "Success" or "Failure"
            message: Message for the user
            detail: Detail of the failure for the Dataverse log

        Raises:
            NotFoundError: If the workflow was still not found after all attempts
            ClientError: On any other repository failure
        """
        log = invocation_logger(log or logger, invocation)
        resume_message = ResumeMessage(status=status, reason=detail, message=message)

        log.debug(f"Resuming workflow with status {status}")
        try:
            self.retry_policy.call(
                lambda: self.repository.resume_workflow(invocation, resume_message),
                log=log,
            )
        except Exception as e:
            log.error(f"Workflow could not be resumed with status {status}: {e}")
            raise
