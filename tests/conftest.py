"""Pytest fixtures for vault metadata tests."""

import pytest

from schemas.dataset_version import DatasetVersion
from schemas.invocation import StepInvocation
from vault_metadata.core.versions import sort_descending

BAG_ID_A = "urn:uuid:aaaaaaaa-4430-4186-bf58-08d98d717889"
BAG_ID_B = "urn:uuid:bbbbbbbb-4430-4186-bf58-08d98d717889"
BAG_ID_C = "urn:uuid:cccccccc-4430-4186-bf58-08d98d717889"
NBN = "urn:nbn:nl:ui:13-73750978-5587-4e2b-937f-6b190e44fcae"
OTHER_NBN = "urn:nbn:nl:ui:13-11111111-5587-4e2b-937f-6b190e44fcae"
GLOBAL_ID = "doi:10.5072/FK2/ABCDEF"

MINTED_BAG_ID = "urn:uuid:cbdf4d18-65af-42d2-baf3-6ca07ddfd3b2"
MINTED_NBN = "urn:nbn:nl:ui:13-cbdf4d18-65af-42d2-baf3-6ca07ddfd3b2"


def make_version(
    major: int | None = 1,
    minor: int | None = 0,
    state: str = "RELEASED",
    bag_id: str | None = None,
    nbn: str | None = None,
    pid: str | None = GLOBAL_ID,
    with_block: bool = True,
) -> DatasetVersion:
    """Build a DatasetVersion the way Dataverse returns it."""
    fields = []
    for name, value in (("dansBagId", bag_id), ("dansNbn", nbn), ("dansDataversePid", pid)):
        if value is not None:
            fields.append(
                {"typeName": name, "multiple": False, "typeClass": "primitive", "value": value}
            )

    data: dict = {"versionState": state, "metadataBlocks": {}}
    if major is not None:
        data["versionNumber"] = major
    if minor is not None:
        data["versionMinorNumber"] = minor
    if with_block:
        data["metadataBlocks"]["dansDataVaultMetadata"] = {
            "displayName": "Data Vault Metadata",
            "fields": fields,
        }
    return DatasetVersion.model_validate(data)


def make_invocation(major: int = 1, minor: int = 0) -> StepInvocation:
    return StepInvocation(
        invocation_id="invocation-1",
        global_id=GLOBAL_ID,
        dataset_id="42",
        major_version=major,
        minor_version=minor,
    )


class FakeRepository:
    """In-memory RepositoryClient that records the calls made to it.

    Attributes:
        draft: Version returned for ":draft", or None
        history: Released and deaccessioned versions
        resume_errors: Errors raised by successive resume calls; a None
            entry lets that call succeed
        reads: Names of the versions read, in order
    """

    def __init__(self, draft=None, history=None):
        self.draft = draft
        self.history = list(history or [])
        self.resume_errors: list[Exception | None] = []
        self.lock_error: Exception | None = None
        self.edit_error: Exception | None = None
        self.history_error: Exception | None = None
        self.reads: list[str] = []
        self.locked: list[StepInvocation] = []
        self.edits: list = []
        self.resumes: list = []

    def get_version(self, invocation, version_tag):
        assert version_tag == ":draft"
        self.reads.append("draft")
        return self.draft

    def get_released_or_deaccessioned_versions(self, invocation):
        self.reads.append("history")
        if self.history_error is not None:
            raise self.history_error
        return sort_descending(v for v in self.history if v.is_historical)

    def lock_dataset(self, invocation):
        if self.lock_error is not None:
            raise self.lock_error
        self.locked.append(invocation)

    def edit_metadata(self, invocation, field_set):
        if self.edit_error is not None:
            raise self.edit_error
        self.edits.append(field_set)

    def resume_workflow(self, invocation, resume_message):
        self.resumes.append(resume_message)
        if self.resume_errors:
            error = self.resume_errors.pop(0)
            if error is not None:
                raise error


@pytest.fixture
def repository():
    """Empty fake repository."""
    return FakeRepository()


@pytest.fixture
def minting_service():
    """Minting service returning fixed identifiers."""

    class FixedMintingService:
        def __init__(self):
            self.bag_ids_minted = 0
            self.nbns_minted = 0

        def mint_bag_id(self):
            self.bag_ids_minted += 1
            return MINTED_BAG_ID

        def mint_nbn(self):
            self.nbns_minted += 1
            return MINTED_NBN

    return FixedMintingService()


@pytest.fixture
def sample_version_json():
    """A released version as returned by the Dataverse versions API."""
    return {
        "id": 7,
        "datasetPersistentId": GLOBAL_ID,
        "versionNumber": 1,
        "versionMinorNumber": 0,
        "versionState": "RELEASED",
        "lastUpdateTime": "2026-01-15T10:00:00Z",
        "metadataBlocks": {
            "citation": {
                "displayName": "Citation Metadata",
                "fields": [
                    {
                        "typeName": "title",
                        "multiple": False,
                        "typeClass": "primitive",
                        "value": "A dataset",
                    }
                ],
            },
            "dansDataVaultMetadata": {
                "displayName": "Data Vault Metadata",
                "fields": [
                    {
                        "typeName": "dansDataversePid",
                        "multiple": False,
                        "typeClass": "primitive",
                        "value": GLOBAL_ID,
                    },
                    {
                        "typeName": "dansBagId",
                        "multiple": False,
                        "typeClass": "primitive",
                        "value": BAG_ID_B,
                    },
                    {
                        "typeName": "dansNbn",
                        "multiple": False,
                        "typeClass": "primitive",
                        "value": NBN,
                    },
                ],
            },
        },
    }
