"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from vault_metadata.config import (
    AppConfig,
    ConfigError,
    DataverseConfig,
    TaskQueueConfig,
    VaultMetadataKey,
    load_config,
)

DEFAULT_CONFIG = Path(__file__).parents[1] / "etc" / "config.yml"


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_shipped_config(self, monkeypatch):
        """The example configuration in etc/ loads."""
        monkeypatch.setenv("DATAVERSE_API_KEY", "api-token")
        monkeypatch.delenv("VAULT_METADATA_KEY", raising=False)

        config = load_config(DEFAULT_CONFIG)

        assert config.dataverse.base_url == "http://localhost:8080/"
        assert config.dataverse.api_key == "api-token"
        assert config.task_queue.max_threads == 5
        assert config.vault_metadata_key is not None
        assert not config.vault_metadata_key.enabled

    def test_env_references(self, tmp_path, monkeypatch):
        """${NAME} is replaced by the environment variable."""
        monkeypatch.setenv("DV_HOST", "dataverse.example.org")
        monkeypatch.setenv("MDKEY", "s3cr3t")
        path = write_config(tmp_path, """
dataverse:
  baseUrl: https://${DV_HOST}/
vaultMetadataKey:
  value: ${MDKEY}
  enabled: true
""")

        config = load_config(path)

        assert config.dataverse.base_url == "https://dataverse.example.org/"
        assert config.vault_metadata_key.query_params() == {
            "mdkey.dansDataVaultMetadata": "s3cr3t"
        }

    def test_unset_env_is_empty(self, tmp_path, monkeypatch):
        """An unset variable resolves to an empty string."""
        monkeypatch.delenv("NO_SUCH_KEY", raising=False)
        path = write_config(tmp_path, """
dataverse:
  baseUrl: http://localhost:8080/
  apiKey: ${NO_SUCH_KEY}
""")

        config = load_config(path)

        assert config.dataverse.api_key == ""
        assert config.dataverse.client_config()["api_key"] == ""

    def test_enabled_key_with_unset_env(self, tmp_path, monkeypatch):
        """An enabled key whose variable is unset is a configuration error."""
        monkeypatch.delenv("VAULT_METADATA_KEY", raising=False)
        path = write_config(tmp_path, """
dataverse:
  baseUrl: http://localhost:8080/
vaultMetadataKey:
  value: ${VAULT_METADATA_KEY}
  enabled: true
""")

        with pytest.raises(ConfigError, match="Invalid configuration") as exc_info:
            load_config(path)

        assert any("enabled but has no value" in err for err in exc_info.value.errors)

    def test_defaults(self, tmp_path):
        """Only the Dataverse base URL is required."""
        path = write_config(tmp_path, "dataverse:\n  baseUrl: http://localhost:8080/\n")

        config = load_config(path)

        assert config.task_queue == TaskQueueConfig()
        assert config.vault_metadata_key is None
        assert config.dataverse.await_lock_max_tries == 30

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path):
        path = write_config(tmp_path, "dataverse: [unclosed\n")

        with pytest.raises(ConfigError, match="not valid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = write_config(tmp_path, "- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_key(self, tmp_path):
        """Misspelled keys are reported instead of ignored."""
        path = write_config(tmp_path, """
dataverse:
  baseUrl: http://localhost:8080/
  apikey: oops
""")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert exc_info.value.errors

    def test_invalid_value(self, tmp_path):
        path = write_config(tmp_path, """
taskQueue:
  maxThreads: 0
dataverse:
  baseUrl: http://localhost:8080/
""")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)


class TestConfigSections:
    """Tests for the section models."""

    def test_client_config(self):
        """Lock wait is converted from milliseconds to seconds."""
        dataverse = DataverseConfig.model_validate({
            "baseUrl": "http://localhost:8080/",
            "apiKey": "token",
            "awaitLockStateMillisecondsBetweenRetries": 250,
        })

        client_config = dataverse.client_config()

        assert client_config["base_url"] == "http://localhost:8080/"
        assert client_config["api_key"] == "token"
        assert client_config["await_lock_wait"] == 0.25
        assert "User-Agent" in client_config["headers"]

    def test_thread_name_prefix(self):
        assert TaskQueueConfig(name_format="dv-worker-%d").thread_name_prefix == "dv-worker"

    @pytest.mark.parametrize("value,enabled,params", [
        ("s3cr3t", True, {"mdkey.dansDataVaultMetadata": "s3cr3t"}),
        ("s3cr3t", False, {}),
        (None, False, {}),
    ])
    def test_key_query_params(self, value, enabled, params):
        """The key is sent whenever it is enabled."""
        assert VaultMetadataKey(value=value, enabled=enabled).query_params() == params

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_enabled_key_requires_value(self, value):
        with pytest.raises(PydanticValidationError, match="enabled but has no value"):
            VaultMetadataKey(value=value, enabled=True)

    def test_python_names_accepted(self):
        """Sections accept field names as well as their file aliases."""
        config = AppConfig(dataverse=DataverseConfig(base_url="http://localhost:8080/"))

        assert config.dataverse.retry_attempts == 3
