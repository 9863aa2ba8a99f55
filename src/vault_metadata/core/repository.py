"""Access to the repository holding the dataset.

The step only needs five repository operations. They are described by
the RepositoryClient protocol so that the synthesizer, validator and task
do not depend on HTTP; DataverseRepository implements them with the
Dataverse API client.
"""

import logging
from typing import Protocol

from schemas.dataset_version import DatasetVersion
from schemas.field_set import FieldSet
from schemas.invocation import StepInvocation
from schemas.resume_message import ResumeMessage
from vault_metadata.clients import DataverseClient, NotFoundError
from vault_metadata.config import VaultMetadataKey

from .versions import sort_descending

logger = logging.getLogger(__name__)

DRAFT_VERSION = ":draft"
WORKFLOW_LOCK = "Workflow"


class RepositoryClient(Protocol):
    def get_version(
        self, invocation: StepInvocation, version_tag: str
    ) -> DatasetVersion | None:
        """Fetch a version of the dataset, or None if it does not exist."""
        ...

    def get_released_or_deaccessioned_versions(
        self, invocation: StepInvocation
    ) -> list[DatasetVersion]:
        """Fetch the released and deaccessioned versions, newest first."""
        ...

    def lock_dataset(self, invocation: StepInvocation) -> None:
        ...

    def edit_metadata(self, invocation: StepInvocation, field_set: FieldSet) -> None:
        ...

    def resume_workflow(
        self, invocation: StepInvocation, resume_message: ResumeMessage
    ) -> None:
        """Resume the paused workflow; raises the client's NotFoundError on 404."""
        ...


class DataverseRepository:
    """RepositoryClient backed by the Dataverse API.

    Attributes:
        client: Dataverse API client
        vault_metadata_key: Key added to metadata edits when active
    """

    def __init__(
        self,
        client: DataverseClient,
        vault_metadata_key: VaultMetadataKey | None = None,
    ):
        self.client = client
        self.vault_metadata_key = vault_metadata_key

    def get_version(
        self, invocation: StepInvocation, version_tag: str
    ) -> DatasetVersion | None:
        # Only "not found" means absent; any other error must surface as itself.
        try:
            return self.client.get_version(
                invocation.global_id, version_tag, invocation.invocation_id
            )
        except NotFoundError:
            logger.debug(f"No version {version_tag} for dataset {invocation.global_id}")
            return None

    def get_released_or_deaccessioned_versions(
        self, invocation: StepInvocation
    ) -> list[DatasetVersion]:
        versions = self.client.get_all_versions(
            invocation.global_id, invocation.invocation_id
        )
        return sort_descending(v for v in versions if v.is_historical)

    def lock_dataset(self, invocation: StepInvocation) -> None:
        self.client.await_lock(
            invocation.global_id, WORKFLOW_LOCK, invocation.invocation_id
        )

    def edit_metadata(self, invocation: StepInvocation, field_set: FieldSet) -> None:
        extra_params = None
        if self.vault_metadata_key is not None:
            extra_params = self.vault_metadata_key.query_params()

        self.client.edit_metadata(
            invocation.global_id,
            field_set,
            invocation_id=invocation.invocation_id,
            extra_params=extra_params,
        )

    def resume_workflow(
        self, invocation: StepInvocation, resume_message: ResumeMessage
    ) -> None:
        self.client.resume_workflow(invocation.invocation_id, resume_message)
