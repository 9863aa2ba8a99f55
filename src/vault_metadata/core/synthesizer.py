"""Computation of the vault metadata for a version about to be published."""

import logging

from schemas.dataset_version import DatasetVersion
from schemas.field_set import DANS_BAG_ID, DANS_NBN, FieldSet
from schemas.invocation import StepInvocation
from vault_metadata.identifiers import IdMintingService
from vault_metadata.logging_utils import invocation_logger

from .exceptions import InconsistentStateError, VersionNotFoundError
from .repository import DRAFT_VERSION, RepositoryClient
from .versions import ensure_unique_versions, sort_descending

logger = logging.getLogger(__name__)


class MetadataSynthesizer:
    """Derives the four vault metadata fields from the draft and its history.

    Rules:
        - dansDataversePid is the dataset's global id.
        - dansDataversePidVersion is the version being published.
        - dansBagId is the draft's bag id, unless it has none or it is
          the bag id of a released or deaccessioned version, in which
          case a new one is minted. Every version gets its own bag.
        - dansNbn is the NBN of the latest released or deaccessioned
          version; for a first version it is the draft's NBN or, failing
          that, a newly minted one. All versions share one NBN.

    Attributes:
        repository: Source of the draft and historical versions
        minting_service: Mints new bag ids and NBNs
    """

    def __init__(self, repository: RepositoryClient, minting_service: IdMintingService):
        self.repository = repository
        self.minting_service = minting_service

    def fetch_draft(self, invocation: StepInvocation) -> DatasetVersion:
        """Return the draft of the invoked dataset.

        Raises:
            VersionNotFoundError: If the dataset has no draft
        """
        draft = self.repository.get_version(invocation, DRAFT_VERSION)
        if draft is None:
            raise VersionNotFoundError(
                f"No draft version found for dataset {invocation.global_id}"
            )
        return draft

    def synthesize(
        self,
        invocation: StepInvocation,
        history: list[DatasetVersion] | None = None,
        log: logging.Logger | logging.LoggerAdapter | None = None,
        draft: DatasetVersion | None = None,
    ) -> FieldSet:
        """Compute the vault metadata for the invoked version.

        Args:
            invocation: The step invocation being processed
            history: Released and deaccessioned versions, newest first.
                Fetched from the repository when not given.
            log: Logger bound to the invocation
            draft: The draft, when the caller already fetched it.
                The draft is always read before the history.

        Returns:
            The field set to write to the draft

        Raises:
            VersionNotFoundError: If the dataset has no draft
            InconsistentStateError: If the history has duplicate version
                numbers or its latest version has no NBN
        """
        log = invocation_logger(log or logger, invocation)

        if draft is None:
            draft = self.fetch_draft(invocation)

        if history is None:
            history = self.repository.get_released_or_deaccessioned_versions(invocation)
        history = sort_descending(history)
        ensure_unique_versions(history)

        bag_id = self._bag_id(draft, history, log)
        nbn = self._nbn(draft, history, log)
        version = str(invocation.version)

        log.debug(
            f"Generated metadata dansDataversePid={invocation.global_id}, "
            f"dansDataversePidVersion={version}, {DANS_BAG_ID}={bag_id}, {DANS_NBN}={nbn}"
        )

        return FieldSet(
            dataverse_pid=invocation.global_id,
            dataverse_pid_version=version,
            bag_id=bag_id,
            nbn=nbn,
        )

    def _bag_id(
        self,
        draft: DatasetVersion,
        history: list[DatasetVersion],
        log: logging.LoggerAdapter,
    ) -> str:
        draft_bag_id = draft.vault_field(DANS_BAG_ID)
        if draft_bag_id is None:
            bag_id = self.minting_service.mint_bag_id()
            log.debug(f"Draft has no bag id, minted {bag_id}")
            return bag_id

        # A draft created in the UI inherits the bag id of the version it
        # was created from.
        published_bag_ids = {v.vault_field(DANS_BAG_ID) for v in history}
        if draft_bag_id in published_bag_ids:
            bag_id = self.minting_service.mint_bag_id()
            log.debug(
                f"Bag id {draft_bag_id} already belongs to a published version, minted {bag_id}"
            )
            return bag_id

        # Bag id supplied by a machine deposit for this version.
        return draft_bag_id

    def _nbn(
        self,
        draft: DatasetVersion,
        history: list[DatasetVersion],
        log: logging.LoggerAdapter,
    ) -> str:
        if history:
            latest = history[0]
            nbn = latest.vault_field(DANS_NBN)
            if nbn is None:
                raise InconsistentStateError(
                    f"Latest released or deaccessioned version {latest.version} has no "
                    f"'{DANS_NBN}' value",
                    version=str(latest.version),
                )
            return nbn

        nbn = draft.vault_field(DANS_NBN)
        if nbn is None:
            nbn = self.minting_service.mint_nbn()
            log.debug(f"No previous version and no NBN on draft, minted {nbn}")
        return nbn
