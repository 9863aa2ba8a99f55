"""Configuration file loading.

The configuration is a YAML file with three sections:

    taskQueue:        worker pool for concurrent invocations
    dataverse:        server URL, API token and client timing
    vaultMetadataKey: optional secret that unlocks the vault metadata block

Values of the form ``${NAME}`` are replaced by the environment variable
NAME (empty when unset), so secrets need not be stored in the file.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from schemas.dataset_version import VAULT_METADATA_BLOCK

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

MDKEY_PARAM_PREFIX = "mdkey."


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""

    def __init__(self, message: str, errors: list | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class _Section(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class TaskQueueConfig(_Section):
    """Worker pool settings.

    Attributes:
        name_format: Thread name pattern; "%d" is replaced by the worker number
        max_threads: Number of invocations processed at the same time
        max_queue_size: Invocations allowed to wait for a free worker
    """

    name_format: str = Field(default="vault-metadata-worker-%d", alias="nameFormat")
    max_threads: int = Field(default=5, alias="maxThreads", ge=1)
    max_queue_size: int = Field(default=5000, alias="maxQueueSize", ge=0)

    @property
    def thread_name_prefix(self) -> str:
        return self.name_format.replace("%d", "").rstrip("-_") or "vault-metadata-worker"


class DataverseConfig(_Section):
    """Connection settings for the Dataverse server."""

    base_url: str = Field(alias="baseUrl")
    api_key: str | None = Field(default=None, alias="apiKey")
    timeout: float = 30
    retry_attempts: int = Field(default=3, alias="retryAttempts", ge=1)
    retry_delay: float = Field(default=1, alias="retryDelay", ge=0)
    await_lock_max_tries: int = Field(
        default=30, alias="awaitLockStateMaxNumberOfRetries", ge=1
    )
    await_lock_wait_ms: int = Field(
        default=500, alias="awaitLockStateMillisecondsBetweenRetries", ge=0
    )

    def client_config(self) -> dict:
        """Build the dict config consumed by the Dataverse client."""
        return {
            "base_url": self.base_url,
            "api_key": self.api_key,
            "timeout": self.timeout,
            "retry_attempts": self.retry_attempts,
            "retry_delay": self.retry_delay,
            "await_lock_max_tries": self.await_lock_max_tries,
            "await_lock_wait": self.await_lock_wait_ms / 1000,
            "headers": {"User-Agent": "dd-vault-metadata/0.1"},
        }


class VaultMetadataKey(_Section):
    """Shared secret that guards edits to the vault metadata block.

    Dataverse can protect a metadata block with a key; edits of such a
    block must pass it as the ``mdkey.<blockName>`` query parameter.
    An enabled key must have a value.
    """

    name: str = VAULT_METADATA_BLOCK
    value: str | None = None
    enabled: bool = False

    @model_validator(mode="after")
    def _value_when_enabled(self) -> "VaultMetadataKey":
        if self.enabled and not (self.value or "").strip():
            raise ValueError("vaultMetadataKey is enabled but has no value")
        return self

    def query_params(self) -> dict[str, str]:
        """Query parameters to add to metadata edits; empty when disabled."""
        if not self.enabled:
            return {}
        return {f"{MDKEY_PARAM_PREFIX}{self.name}": str(self.value)}


class AppConfig(_Section):
    """Top-level configuration."""

    task_queue: TaskQueueConfig = Field(default_factory=TaskQueueConfig, alias="taskQueue")
    dataverse: DataverseConfig
    vault_metadata_key: VaultMetadataKey | None = Field(default=None, alias="vaultMetadataKey")


def _resolve_env(value: Any) -> Any:
    """Replace ${NAME} references, recursing into lists and mappings."""
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(v) for v in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.getenv(m.group(1), ""), value)
    return value


def load_config(path: Path) -> AppConfig:
    """Load and validate a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        The validated configuration

    Raises:
        ConfigError: If the file is missing, not YAML, or fails validation
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Configuration file is not valid YAML: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")

    try:
        config = AppConfig.model_validate(_resolve_env(data))
    except PydanticValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {path}",
            errors=[str(err) for err in e.errors()],
        ) from e

    key = config.vault_metadata_key
    if key is not None:
        logger.info(f"Vault metadata key for block '{key.name}' enabled: {key.enabled}")

    return config
