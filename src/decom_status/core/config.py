"""Configuration system for decom-status application.

This module implements the optional settings file schema using Pydantic for
validation, with support for environment variable resolution and fail-fast
validation with actionable error messages. Cluster credentials are not part
of this file; they are read from the mc alias store (see ``alias_store``).
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Final

import yaml
from pydantic import BaseModel, Field, ValidationError

# Regular expression pattern for environment variable references
# Matches ${VARIABLE_NAME} syntax where VARIABLE_NAME can contain letters, digits, and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")


class ApplicationConfig(BaseModel):
    """Configuration for application-level settings.

    Defines operational behavior including logging level and syslog
    integration.
    """

    log_level: Annotated[
        str,
        Field(
            description="Logging level",
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        ),
    ] = "WARNING"
    syslog_enabled: Annotated[
        bool,
        Field(
            description="Enable syslog integration",
        ),
    ] = False


class ConnectionConfig(BaseModel):
    """Configuration for the admin API connection.

    Defines request timeout, TLS verification and the signing region used
    when querying pool status.
    """

    timeout_seconds: Annotated[
        float,
        Field(
            gt=0,
            description="Timeout for one admin API request in seconds",
        ),
    ] = 10.0
    verify_tls: Annotated[
        bool,
        Field(
            description="Verify TLS certificates of https endpoints",
        ),
    ] = False
    region: Annotated[
        str,
        Field(
            min_length=1,
            description="Region used in request signatures",
        ),
    ] = "us-east-1"


class MainConfig(BaseModel):
    """Main application settings schema.

    Top-level container aggregating all settings sections:
    - application: Application-level settings
    - connection: Admin API connection settings

    Every section is optional; an absent settings file yields the defaults.
    """

    application: Annotated[
        ApplicationConfig,
        Field(
            description="Application-level configuration",
        ),
    ] = ApplicationConfig()
    connection: Annotated[
        ConnectionConfig,
        Field(
            description="Admin API connection configuration",
        ),
    ] = ConnectionConfig()


class ConfigurationError(Exception):
    """Exception raised when configuration loading or validation fails.

    This exception provides detailed, actionable error messages for configuration
    issues including file not found, parsing errors, and validation failures.
    """


class EnvironmentVariableError(Exception):
    """Exception raised when environment variable resolution fails.

    Raised when a referenced environment variable is missing. Messages name
    the variable but never include its value.
    """


def resolve_env_var(value: str) -> str:
    """Resolve environment variable references in a string value.

    Parses ${VARIABLE_NAME} syntax and replaces with environment variable values.
    Supports multiple environment variable references in a single string.

    Args:
        value: String potentially containing environment variable references

    Returns:
        String with environment variables resolved

    Raises:
        EnvironmentVariableError: If a required environment variable is missing

    Examples:
        >>> os.environ["DECOM_REGION"] = "eu-west-1"
        >>> resolve_env_var("${DECOM_REGION}")
        'eu-west-1'
        >>> resolve_env_var("no variables here")
        'no variables here'
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)

        if env_value is None:
            msg = (
                f"Required environment variable '{var_name}' is not set. "
                f"Please set this variable before starting the application."
            )
            raise EnvironmentVariableError(msg)

        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars_in_dict(data: Mapping[str, object]) -> dict[str, object]:
    """Recursively resolve environment variables in a dictionary.

    Traverses nested dictionaries and lists, resolving environment variable
    references in string values. Non-string values are preserved as-is.

    Args:
        data: Dictionary potentially containing environment variable references

    Returns:
        New dictionary with environment variables resolved

    Raises:
        EnvironmentVariableError: If a required environment variable is missing

    Examples:
        >>> os.environ["DECOM_LEVEL"] = "DEBUG"
        >>> resolve_env_vars_in_dict({"application": {"log_level": "${DECOM_LEVEL}"}})
        {'application': {'log_level': 'DEBUG'}}
    """
    return {key: _resolve_node(value) for key, value in data.items()}


def _resolve_node(value: object) -> object:
    # YAML data is untyped at load time; validated by Pydantic after resolution
    if isinstance(value, str):
        return resolve_env_var(value)
    if isinstance(value, dict):
        return resolve_env_vars_in_dict(value)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    if isinstance(value, list):
        return [_resolve_node(item) for item in value]  # pyright: ignore[reportUnknownVariableType]  # YAML list items
    return value


def format_validation_error(error: ValidationError, *, title: str, source: Path) -> str:
    """Format Pydantic validation errors with field-level diagnostics.

    Args:
        error: Validation error raised by Pydantic
        title: First line of the message
        source: File the invalid data came from

    Returns:
        Multi-line, actionable error message
    """
    error_lines = [title, ""]
    for detail in error.errors():
        field_path = " → ".join(str(loc) for loc in detail["loc"])
        error_lines.append(f"  Field: {field_path}")
        error_lines.append(f"  Error: {detail['msg']}")
        error_lines.append(f"  Type: {detail['type']}")
        error_lines.append("")

    error_lines.append(f"Configuration file: {source}")
    error_lines.append("Please fix the above errors and try again.")
    return "\n".join(error_lines)


def load_main_config(config_path: Path | None) -> MainConfig:
    """Load and validate application settings from a YAML file.

    Args:
        config_path: Path to the settings file, or None for defaults

    Returns:
        Validated MainConfig instance

    Raises:
        ConfigurationError: If the settings file cannot be loaded or is invalid

    Examples:
        >>> load_main_config(None).connection.timeout_seconds
        10.0
    """
    if config_path is None:
        return MainConfig()

    if not config_path.exists():
        msg = (
            f"Configuration file not found: {config_path}\n"
            f"Please create a configuration file at this location or omit --config."
        )
        raise ConfigurationError(msg)

    try:
        with config_path.open("r") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = (
            f"Failed to parse YAML configuration file: {config_path}\n"
            f"YAML parsing error: {e}\n"
            f"Please check the file for syntax errors."
        )
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Failed to read configuration file: {config_path}\nError: {e}\nPlease check file permissions."
        raise ConfigurationError(msg) from e

    # An empty file means "all defaults"
    if raw_data is None:
        return MainConfig()

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid configuration file format: {config_path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}\n"
            f"Configuration file must contain key-value pairs."
        )
        raise ConfigurationError(msg)

    try:
        resolved_data = resolve_env_vars_in_dict(raw_data)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    except EnvironmentVariableError as e:
        msg = (
            f"Environment variable resolution failed in: {config_path}\n"
            f"{e}\n"
            f"Set the required environment variable before starting the application."
        )
        raise ConfigurationError(msg) from e

    try:
        return MainConfig.model_validate(resolved_data)
    except ValidationError as e:
        msg = format_validation_error(e, title="Configuration validation failed:", source=config_path)
        raise ConfigurationError(msg) from e
