"""Workflow step invocation schemas."""

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class VersionNumber(NamedTuple):
    """A dataset version number as a (major, minor) pair.

    Ordering is plain tuple ordering, so (1, 1) > (1, 0) and (2, 0) > (1, 9).
    """

    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"

    @classmethod
    def parse(cls, text: str) -> "VersionNumber":
        """Parse a "<major>.<minor>" string.

        Raises:
            ValueError: If the text is not two dot-separated integers
        """
        parts = text.strip().split(".")
        if len(parts) != 2:
            raise ValueError(f"not a <major>.<minor> version: '{text}'")
        return cls(int(parts[0]), int(parts[1]))


FIRST_VERSION = VersionNumber(1, 0)


class StepInvocation(BaseModel):
    """A single invocation of this workflow step by Dataverse.

    Dataverse posts these values when a pre-publication workflow reaches
    the step. The invocation id is needed to resume the paused workflow.

    Attributes:
        invocation_id: Workflow invocation identifier
        global_id: Persistent identifier of the dataset (e.g. a DOI)
        dataset_id: Internal database id of the dataset
        major_version: Major number of the version being published
        minor_version: Minor number of the version being published
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    invocation_id: str = Field(alias="invocationId")
    global_id: str = Field(alias="globalId")
    dataset_id: str = Field(alias="datasetId")
    major_version: int = Field(alias="majorVersion", ge=0)
    minor_version: int = Field(alias="minorVersion", ge=0)

    @property
    def version(self) -> VersionNumber:
        return VersionNumber(self.major_version, self.minor_version)
