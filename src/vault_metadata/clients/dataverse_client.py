"""Dataverse API client for the calls made by the vault metadata step."""

import logging
from time import sleep
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from schemas.dataset_version import DatasetVersion
from schemas.field_set import FieldSet
from schemas.resume_message import ResumeMessage

from .client import Client
from .exceptions import LockTimeoutError, ValidationError

logger = logging.getLogger(__name__)

INVOCATION_ID_HEADER = "X-Dataverse-invocationID"


class DataverseClient(Client):
    """Client for the parts of the Dataverse native API used by this step.

    Datasets are addressed by persistent id. Calls made on behalf of a
    workflow invocation carry the invocation id, which Dataverse accepts
    in place of the user's permissions while the dataset is locked by
    the workflow.

    Extra config keys:
        await_lock_max_tries: Polls before giving up on a lock (default: 30)
        await_lock_wait: Seconds between lock polls (default: 0.5)

    Example:
        config = {"base_url": "http://localhost:8080", "api_key": "..."}
        with DataverseClient(config) as client:
            draft = client.get_version("doi:10.5072/FK2/ABC", ":draft")
    """

    DATASET_PATH = "/api/datasets/:persistentId"
    WORKFLOW_PATH = "/api/workflows"

    @property
    def await_lock_max_tries(self) -> int:
        return int(self._config.get("await_lock_max_tries", 30))

    @property
    def await_lock_wait(self) -> float:
        return float(self._config.get("await_lock_wait", 0.5))

    def fetch(
        self,
        path: str,
        global_id: str,
        invocation_id: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """GET a dataset endpoint and return the unwrapped data.

        Args:
            path: Path below the dataset, e.g. "/versions"
            global_id: Persistent identifier of the dataset
            invocation_id: Workflow invocation id, if called from a workflow
            params: Additional query parameters

        Raises:
            NotFoundError: If the dataset or resource does not exist
            APIError: If the API returns another non-2xx response
            ConnectionError: If the network connection fails
        """
        response = self.get(
            f"{self.DATASET_PATH}{path}",
            params=self._dataset_params(global_id, params),
            headers=self._invocation_headers(invocation_id),
        )
        return self._unwrap(response)

    def get_version(
        self, global_id: str, version: str, invocation_id: str | None = None
    ) -> DatasetVersion:
        """Fetch one version of a dataset.

        Args:
            global_id: Persistent identifier of the dataset
            version: Version tag such as ":draft", ":latest" or "1.0"
            invocation_id: Workflow invocation id

        Raises:
            NotFoundError: If the dataset has no such version
        """
        data = self.fetch(f"/versions/{version}", global_id, invocation_id)
        return self._validate_version(data)

    def get_all_versions(
        self, global_id: str, invocation_id: str | None = None
    ) -> list[DatasetVersion]:
        """Fetch all versions of a dataset, in the order Dataverse lists them."""
        data = self.fetch("/versions", global_id, invocation_id)
        if not isinstance(data, list):
            raise ValidationError(f"Expected a list of versions for {global_id}")
        return [self._validate_version(item) for item in data]

    def get_locks(
        self,
        global_id: str,
        lock_type: str | None = None,
        invocation_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """List the locks currently on a dataset, optionally of one type."""
        params = {"type": lock_type} if lock_type else None
        data = self.fetch("/locks", global_id, invocation_id, params=params)
        return list(data or [])

    def await_lock(
        self,
        global_id: str,
        lock_type: str = "Workflow",
        invocation_id: str | None = None,
    ) -> None:
        """Wait until a lock of the given type is on the dataset.

        The pre-publication workflow lock is set by Dataverse itself, but
        may not be visible yet when the step is invoked.

        Raises:
            LockTimeoutError: If the lock is not seen within the configured tries
        """
        for attempt in range(self.await_lock_max_tries):
            locks = self.get_locks(global_id, lock_type, invocation_id)
            if any(lock.get("lockType") == lock_type for lock in locks):
                logger.debug(f"Dataset {global_id} has a {lock_type} lock")
                return

            logger.debug(
                f"No {lock_type} lock on {global_id} yet "
                f"(attempt {attempt + 1}/{self.await_lock_max_tries})"
            )
            if attempt < self.await_lock_max_tries - 1:
                sleep(self.await_lock_wait)

        raise LockTimeoutError(
            f"Dataset {global_id} did not get a {lock_type} lock "
            f"after {self.await_lock_max_tries} tries"
        )

    def edit_metadata(
        self,
        global_id: str,
        field_set: FieldSet,
        invocation_id: str | None = None,
        replace: bool = True,
        extra_params: dict[str, str] | None = None,
    ) -> Any:
        """Write fields to the draft version of a dataset.

        Args:
            global_id: Persistent identifier of the dataset
            field_set: Fields to write
            invocation_id: Workflow invocation id
            replace: Replace existing values instead of adding to them
            extra_params: Additional query parameters, e.g. metadata block keys
        """
        params: dict[str, Any] = {"replace": str(replace).lower()}
        if extra_params:
            params.update(extra_params)

        response = self.put(
            f"{self.DATASET_PATH}/editMetadata",
            params=self._dataset_params(global_id, params),
            headers=self._invocation_headers(invocation_id),
            json=field_set.to_edit_payload(),
        )
        return self._unwrap(response)

    def resume_workflow(self, invocation_id: str, resume_message: ResumeMessage) -> None:
        """Resume a paused workflow.

        Raises:
            NotFoundError: If Dataverse has no paused workflow with this id (yet)
            APIError: If the API returns another non-2xx response
            ConnectionError: If the single attempt fails on the network
        """
        self.post(
            f"{self.WORKFLOW_PATH}/{invocation_id}",
            json=resume_message.model_dump(),
            retry=False,
        )

    def _dataset_params(
        self, global_id: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return {"persistentId": global_id, **(params or {})}

    def _invocation_headers(self, invocation_id: str | None) -> dict[str, str]:
        if invocation_id:
            return {INVOCATION_ID_HEADER: invocation_id}
        return {}

    def _validate_version(self, data: Any) -> DatasetVersion:
        """Validate a version object against the DatasetVersion schema.

        Raises:
            ValidationError: If the data fails validation
        """
        try:
            return DatasetVersion.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                "Dataset version failed validation",
                errors=[str(err) for err in e.errors()],
            ) from e
