"""Vault metadata field set written back to a dataset version."""

from pydantic import BaseModel, ConfigDict, Field

DANS_DATAVERSE_PID = "dansDataversePid"
DANS_DATAVERSE_PID_VERSION = "dansDataversePidVersion"
DANS_BAG_ID = "dansBagId"
DANS_NBN = "dansNbn"

FIELD_NAMES = (DANS_DATAVERSE_PID, DANS_DATAVERSE_PID_VERSION, DANS_BAG_ID, DANS_NBN)


class FieldSet(BaseModel):
    """The four vault metadata fields of a dataset version.

    Values are optional at the model level so that an incomplete set can
    be represented and rejected by validation instead of at construction.

    Attributes:
        dataverse_pid: Persistent identifier of the dataset
        dataverse_pid_version: "<major>.<minor>" of the published version
        bag_id: urn:uuid identifying the archival bag for this version
        nbn: urn:nbn shared by all versions of the dataset
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dataverse_pid: str | None = Field(default=None, alias=DANS_DATAVERSE_PID)
    dataverse_pid_version: str | None = Field(default=None, alias=DANS_DATAVERSE_PID_VERSION)
    bag_id: str | None = Field(default=None, alias=DANS_BAG_ID)
    nbn: str | None = Field(default=None, alias=DANS_NBN)

    def get(self, name: str) -> str | None:
        """Get a field value by its Dataverse field name."""
        values = self.model_dump(by_alias=True)
        if name not in values:
            raise KeyError(name)
        return values[name]

    def to_edit_payload(self) -> dict:
        """Build the body of a Dataverse editMetadata request."""
        return {
            "fields": [
                {
                    "typeName": name,
                    "multiple": False,
                    "typeClass": "primitive",
                    "value": self.get(name),
                }
                for name in FIELD_NAMES
            ]
        }
