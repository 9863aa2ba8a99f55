"""Dataverse dataset version schemas.

Only the parts of the Dataverse version JSON needed for vault metadata
are modelled; everything else is tolerated and kept as extra data.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .invocation import VersionNumber

VAULT_METADATA_BLOCK = "dansDataVaultMetadata"

DRAFT = "DRAFT"
RELEASED = "RELEASED"
DEACCESSIONED = "DEACCESSIONED"
HISTORICAL_STATES = frozenset({RELEASED, DEACCESSIONED})


class MetadataField(BaseModel):
    """A field in a Dataverse metadata block.

    Attributes:
        type_name: Field name, e.g. "dansBagId"
        multiple: Whether the field holds a list of values
        type_class: "primitive", "controlledVocabulary" or "compound"
        value: The field value (a string for single primitive fields)
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type_name: str = Field(alias="typeName")
    multiple: bool = False
    type_class: str = Field(default="primitive", alias="typeClass")
    value: Any = None


class MetadataBlock(BaseModel):
    """A named group of metadata fields."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    display_name: str | None = Field(default=None, alias="displayName")
    fields: list[MetadataField] = []


class DatasetVersion(BaseModel):
    """A version of a Dataverse dataset.

    Drafts of datasets that were never published have no version
    numbers yet.

    Attributes:
        version_number: Major version number
        version_minor_number: Minor version number
        version_state: DRAFT, RELEASED, DEACCESSIONED, ...
        metadata_blocks: Metadata blocks keyed by block name
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    version_number: int | None = Field(default=None, alias="versionNumber")
    version_minor_number: int | None = Field(default=None, alias="versionMinorNumber")
    version_state: str | None = Field(default=None, alias="versionState")
    metadata_blocks: dict[str, MetadataBlock] = Field(
        default_factory=dict, alias="metadataBlocks"
    )

    @property
    def version(self) -> VersionNumber:
        return VersionNumber(self.version_number or 0, self.version_minor_number or 0)

    @property
    def is_historical(self) -> bool:
        """True for released or deaccessioned versions."""
        return self.version_state in HISTORICAL_STATES

    def vault_field(self, name: str) -> str | None:
        """Get the single string value of a vault metadata field.

        A missing vault block, a missing field and a blank value are all
        reported as None.
        """
        block = self.metadata_blocks.get(VAULT_METADATA_BLOCK)
        if block is None:
            return None

        for field in block.fields:
            if field.type_name == name:
                if isinstance(field.value, str) and field.value.strip():
                    return field.value
                return None

        return None
