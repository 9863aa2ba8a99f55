"""Schema definitions for the vault metadata workflow step."""

from .dataset_version import DatasetVersion, MetadataBlock, MetadataField
from .field_set import FieldSet
from .invocation import StepInvocation, VersionNumber
from .resume_message import ResumeMessage

__all__ = [
    "DatasetVersion",
    "FieldSet",
    "MetadataBlock",
    "MetadataField",
    "ResumeMessage",
    "StepInvocation",
    "VersionNumber",
]
