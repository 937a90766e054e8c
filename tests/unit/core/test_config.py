"""Unit tests for configuration system.

Tests for Pydantic settings models, environment variable resolution and
settings file loading with actionable error messages.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from decom_status.core.config import (
    ENV_VAR_PATTERN,
    ApplicationConfig,
    ConfigurationError,
    ConnectionConfig,
    EnvironmentVariableError,
    MainConfig,
    load_main_config,
    resolve_env_var,
    resolve_env_vars_in_dict,
)


@pytest.mark.unit
class TestApplicationConfig:
    """Test ApplicationConfig validation and defaults."""

    def test_defaults(self) -> None:
        config = ApplicationConfig()

        assert config.log_level == "WARNING"
        assert config.syslog_enabled is False

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    def test_valid_log_levels(self, level: str) -> None:
        assert ApplicationConfig(log_level=level).log_level == level

    @pytest.mark.parametrize("level", ["debug", "TRACE", ""])
    def test_invalid_log_level(self, level: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _ = ApplicationConfig(log_level=level)

        assert "log_level" in str(exc_info.value)


@pytest.mark.unit
class TestConnectionConfig:
    """Test ConnectionConfig validation and defaults."""

    def test_defaults(self) -> None:
        config = ConnectionConfig()

        assert config.timeout_seconds == 10.0
        assert config.verify_tls is False
        assert config.region == "us-east-1"

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_timeout_must_be_positive(self, timeout: float) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _ = ConnectionConfig(timeout_seconds=timeout)

        assert "timeout_seconds" in str(exc_info.value)

    def test_empty_region_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _ = ConnectionConfig(region="")


@pytest.mark.unit
class TestEnvironmentVariables:
    """Test ${VAR} resolution in settings values."""

    def test_pattern_matches_uppercase_names(self) -> None:
        assert ENV_VAR_PATTERN.findall("${DECOM_REGION}-${ZONE_2}") == ["DECOM_REGION", "ZONE_2"]
        assert ENV_VAR_PATTERN.findall("${lowercase}") == []

    def test_resolve_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECOM_REGION", "eu-west-1")
        assert resolve_env_var("region-${DECOM_REGION}") == "region-eu-west-1"

    def test_missing_env_var_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DECOM_MISSING", raising=False)

        with pytest.raises(EnvironmentVariableError, match="DECOM_MISSING"):
            _ = resolve_env_var("${DECOM_MISSING}")

    def test_resolve_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECOM_LEVEL", "DEBUG")
        data: dict[str, object] = {
            "application": {"log_level": "${DECOM_LEVEL}", "syslog_enabled": True},
            "items": ["${DECOM_LEVEL}", 3, {"nested": "${DECOM_LEVEL}"}],
        }

        assert resolve_env_vars_in_dict(data) == {
            "application": {"log_level": "DEBUG", "syslog_enabled": True},
            "items": ["DEBUG", 3, {"nested": "DEBUG"}],
        }


@pytest.mark.unit
class TestLoadMainConfig:
    """Test settings file loading."""

    def test_no_path_gives_defaults(self) -> None:
        assert load_main_config(None) == MainConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "decom-status.yaml"
        _ = config_file.write_text("")

        assert load_main_config(config_file) == MainConfig()

    def test_valid_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECOM_REGION", "eu-central-1")
        config_file = tmp_path / "decom-status.yaml"
        _ = config_file.write_text(
            """
application:
  log_level: INFO
  syslog_enabled: true
connection:
  timeout_seconds: 2.5
  verify_tls: true
  region: ${DECOM_REGION}
"""
        )

        config = load_main_config(config_file)

        assert config.application.log_level == "INFO"
        assert config.application.syslog_enabled is True
        assert config.connection.timeout_seconds == 2.5
        assert config.connection.verify_tls is True
        assert config.connection.region == "eu-central-1"

    def test_partial_file_keeps_other_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "decom-status.yaml"
        _ = config_file.write_text("connection:\n  verify_tls: true\n")

        config = load_main_config(config_file)

        assert config.connection.verify_tls is True
        assert config.connection.timeout_seconds == 10.0
        assert config.application == ApplicationConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            _ = load_main_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.yaml"
        _ = config_file.write_text("application: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            _ = load_main_config(config_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        _ = config_file.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError, match="Expected YAML dictionary at root level, got: list"):
            _ = load_main_config(config_file)

    def test_missing_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DECOM_UNSET", raising=False)
        config_file = tmp_path / "env.yaml"
        _ = config_file.write_text("connection:\n  region: ${DECOM_UNSET}\n")

        with pytest.raises(ConfigurationError, match="DECOM_UNSET"):
            _ = load_main_config(config_file)

    def test_validation_error_lists_fields(self, tmp_path: Path) -> None:
        config_file = tmp_path / "invalid.yaml"
        _ = config_file.write_text("connection:\n  timeout_seconds: 0\n")

        with pytest.raises(ConfigurationError) as exc_info:
            _ = load_main_config(config_file)

        message = str(exc_info.value)
        assert message.startswith("Configuration validation failed:")
        assert "Field: connection → timeout_seconds" in message
        assert f"Configuration file: {config_file}" in message
