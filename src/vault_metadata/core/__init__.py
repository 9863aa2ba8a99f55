"""Vault metadata computation, validation and the workflow step task."""

from .bag_validator import BagMetadataValidator
from .exceptions import (
    InconsistentStateError,
    MetadataValidationError,
    VaultMetadataError,
    VersionNotFoundError,
)
from .repository import DataverseRepository, RepositoryClient
from .resumer import WorkflowResumer
from .retry import RetryPolicy
from .synthesizer import MetadataSynthesizer
from .task import TaskState, VaultMetadataTask, VaultMetadataTaskFactory

__all__ = [
    "BagMetadataValidator",
    "DataverseRepository",
    "InconsistentStateError",
    "MetadataSynthesizer",
    "MetadataValidationError",
    "RepositoryClient",
    "RetryPolicy",
    "TaskState",
    "VaultMetadataError",
    "VaultMetadataTask",
    "VaultMetadataTaskFactory",
    "VersionNotFoundError",
    "WorkflowResumer",
]
