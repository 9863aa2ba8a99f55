"""The vault metadata workflow step for one invocation."""

import logging
from enum import Enum

from schemas.invocation import StepInvocation
from schemas.resume_message import FAILURE, FAILURE_MESSAGE, SUCCESS, ResumeMessage
from vault_metadata.identifiers import IdMintingService, IdValidator
from vault_metadata.logging_utils import invocation_logger

from .bag_validator import BagMetadataValidator
from .repository import RepositoryClient
from .resumer import WorkflowResumer
from .retry import RetryPolicy
from .synthesizer import MetadataSynthesizer

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    """Progress of a task. The two RESUMED_* states are final."""

    START = "start"
    LOCKED = "locked"
    SYNTHESIZED = "synthesized"
    VALIDATED = "validated"
    WRITTEN = "written"
    RESUMED_SUCCESS = "resumed_success"
    RESUMED_FAILURE = "resumed_failure"


class VaultMetadataTask:
    """Sets the vault metadata of a dataset version and resumes its workflow.

    The task locks the dataset, computes and validates the vault metadata,
    writes it to the draft and resumes the workflow with "Success". Any
    error along the way resumes the workflow with "Failure" instead, so
    that Dataverse reports the problem to the user. ``run`` never raises.

    Attributes:
        invocation: The step invocation being processed
        state: How far the task got
        error: The error that made the task fail, if any
    """

    def __init__(
        self,
        invocation: StepInvocation,
        repository: RepositoryClient,
        synthesizer: MetadataSynthesizer,
        validator: BagMetadataValidator,
        resumer: WorkflowResumer,
    ):
        self.invocation = invocation
        self.repository = repository
        self.synthesizer = synthesizer
        self.validator = validator
        self.resumer = resumer
        self.state = TaskState.START
        self.error: Exception | None = None
        self.log = invocation_logger(logger, invocation)

    def __repr__(self) -> str:
        return f"VaultMetadataTask(invocation_id='{self.invocation.invocation_id}')"

    @property
    def succeeded(self) -> bool:
        return self.state is TaskState.RESUMED_SUCCESS

    def run(self) -> None:
        """Run the task to one of its final states."""
        self.log.info(f"Running task {self!r}")
        try:
            self._run_steps()
        except Exception as e:
            self.error = e
            self.log.exception(
                f"Task failed in state '{self.state.value}', resuming workflow with Failure"
            )
            self._resume_with_failure(e)
        self.log.info(f"Completed task {self!r} with state '{self.state.value}'")

    def _run_steps(self) -> None:
        invocation = self.invocation

        self.log.info("Locking dataset")
        self.repository.lock_dataset(invocation)
        self.state = TaskState.LOCKED

        draft = self.synthesizer.fetch_draft(invocation)
        history = self.repository.get_released_or_deaccessioned_versions(invocation)
        field_set = self.synthesizer.synthesize(
            invocation, history=history, log=self.log, draft=draft
        )
        self.state = TaskState.SYNTHESIZED

        self.log.info("Validating metadata")
        self.validator.validate(invocation, field_set, history, log=self.log)
        self.state = TaskState.VALIDATED

        self.log.info("Updating metadata")
        self.repository.edit_metadata(invocation, field_set)
        self.state = TaskState.WRITTEN

        self.resumer.resume(invocation, SUCCESS, log=self.log)
        self.state = TaskState.RESUMED_SUCCESS
        self.log.info("Vault metadata set, workflow resumed")

    def _resume_with_failure(self, error: Exception) -> None:
        # One attempt only; the failure itself is already being reported.
        resume_message = ResumeMessage(
            status=FAILURE,
            reason=getattr(error, "message", None) or str(error) or type(error).__name__,
            message=FAILURE_MESSAGE,
        )
        try:
            self.repository.resume_workflow(self.invocation, resume_message)
        except Exception:
            self.log.exception("Error resuming workflow with Failure status")
        self.state = TaskState.RESUMED_FAILURE


class VaultMetadataTaskFactory:
    """Builds tasks that share one set of stateless collaborators.

    Example:
        factory = VaultMetadataTaskFactory(DataverseRepository(client, key))
        factory.create(invocation).run()
    """

    def __init__(
        self,
        repository: RepositoryClient,
        minting_service: IdMintingService | None = None,
        id_validator: IdValidator | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.repository = repository
        self.synthesizer = MetadataSynthesizer(repository, minting_service or IdMintingService())
        self.validator = BagMetadataValidator(id_validator or IdValidator())
        self.resumer = WorkflowResumer(repository, retry_policy)

    def create(self, invocation: StepInvocation) -> VaultMetadataTask:
        return VaultMetadataTask(
            invocation,
            self.repository,
            self.synthesizer,
            self.validator,
            self.resumer,
        )
