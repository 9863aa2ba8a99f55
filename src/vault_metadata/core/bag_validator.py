"""Validation of vault metadata before it is written."""

import logging

from schemas.dataset_version import DatasetVersion
from schemas.field_set import (
    DANS_BAG_ID,
    DANS_DATAVERSE_PID,
    DANS_DATAVERSE_PID_VERSION,
    DANS_NBN,
    FieldSet,
)
from schemas.invocation import FIRST_VERSION, StepInvocation
from vault_metadata.identifiers import IdValidator
from vault_metadata.logging_utils import invocation_logger

from .exceptions import InconsistentStateError, MetadataValidationError

logger = logging.getLogger(__name__)


def _required(field_set: FieldSet, name: str) -> str:
    value = field_set.get(name)
    if value is None or not value.strip():
        raise MetadataValidationError(f"'{name}' missing from metadata")
    return value


class BagMetadataValidator:
    """Checks a vault metadata field set against the dataset's history.

    For every version:
        - dansBagId must be a urn:uuid and dansNbn a urn:nbn.

    For versions after 1.0 additionally:
        - dansDataversePid and dansDataversePidVersion must be filled in.
        - There must be a released or deaccessioned version.
        - dansDataversePid and dansNbn must be the same on all versions.
    """

    def __init__(self, id_validator: IdValidator):
        self.id_validator = id_validator

    def validate(
        self,
        invocation: StepInvocation,
        field_set: FieldSet,
        history: list[DatasetVersion],
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Validate the field set for the invoked version.

        Args:
            invocation: The step invocation being processed
            field_set: The newly computed vault metadata
            history: Released and deaccessioned versions of the dataset
            log: Logger bound to the invocation

        Raises:
            MetadataValidationError: If a field is missing or malformed, or
                a later version has no predecessor
            InconsistentStateError: If a historical version lacks a field
                or disagrees with the new pid or NBN
        """
        log = invocation_logger(log or logger, invocation)

        bag_id = _required(field_set, DANS_BAG_ID)
        nbn = _required(field_set, DANS_NBN)

        log.debug(f"Validating bag id '{bag_id}' to be a valid urn:uuid")
        if not self.id_validator.is_valid_bag_id(bag_id):
            raise MetadataValidationError(f"'{bag_id}' is not a valid urn:uuid")

        log.debug(f"Validating nbn '{nbn}' to be a valid urn:nbn")
        if not self.id_validator.is_valid_nbn(nbn):
            raise MetadataValidationError(f"'{nbn}' is not a valid urn:nbn")

        version = invocation.version
        if version <= FIRST_VERSION:
            log.debug(f"Version {version} has no predecessors to check")
            return

        pid = _required(field_set, DANS_DATAVERSE_PID)
        _required(field_set, DANS_DATAVERSE_PID_VERSION)

        if not history:
            raise MetadataValidationError(
                f"Version {version} is greater than 1.0, but no previous version found"
            )

        for previous in history:
            previous_pid = self._previous_value(previous, DANS_DATAVERSE_PID)
            previous_nbn = self._previous_value(previous, DANS_NBN)
            self._check_equal(previous, DANS_DATAVERSE_PID, pid, previous_pid)
            self._check_equal(previous, DANS_NBN, nbn, previous_nbn)

    def _previous_value(self, previous: DatasetVersion, name: str) -> str:
        found = previous.vault_field(name)
        if found is None:
            raise InconsistentStateError(
                f"Released or deaccessioned version found without '{name}' property "
                f"(version {previous.version})",
                version=str(previous.version),
            )
        return found

    def _check_equal(
        self, previous: DatasetVersion, name: str, expected: str, found: str
    ) -> None:
        if found != expected:
            raise InconsistentStateError(
                f"Mismatch in '{name}' property, expected '{expected}' in version "
                f"{previous.version}, but instead found '{found}'",
                version=str(previous.version),
            )
