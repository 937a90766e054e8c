"""Cluster alias store reader.

Reads connection details for a named cluster alias from the mc client
configuration (``<config dir>/config.json``, ``~/.mc`` by default). The
file is validated with Pydantic; secrets are held as ``SecretStr`` so they
never show up in reprs, logs or error messages.
"""

import logging
from pathlib import Path
from typing import Annotated, Final

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from decom_status.core.config import ConfigurationError, format_validation_error

__all__ = [
    "ALIAS_CONFIG_FILENAME",
    "AliasConfig",
    "AliasError",
    "McConfig",
    "default_config_dir",
    "load_alias",
]

logger = logging.getLogger(__name__)

ALIAS_CONFIG_FILENAME: Final[str] = "config.json"
DEFAULT_CONFIG_DIRNAME: Final[str] = ".mc"


class AliasError(ConfigurationError):
    """Exception raised when a cluster alias cannot be resolved."""


class AliasConfig(BaseModel):
    """Connection details of one cluster alias."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: Annotated[str, Field(min_length=1, description="Cluster endpoint URL")]
    access_key: Annotated[str, Field(alias="accessKey", repr=False, description="Access key")]
    secret_key: Annotated[SecretStr, Field(alias="secretKey", description="Secret key")]
    api: Annotated[str, Field(description="Signature version, e.g. S3v4")] = "S3v4"
    path: Annotated[str, Field(description="Bucket lookup style")] = "auto"


class McConfig(BaseModel):
    """Top-level layout of the mc client configuration file."""

    version: str = ""
    aliases: dict[str, AliasConfig] = {}


def default_config_dir() -> Path:
    """Return the default mc configuration directory (``~/.mc``).

    Raises:
        AliasError: If the home directory cannot be determined
    """
    try:
        return Path.home() / DEFAULT_CONFIG_DIRNAME
    except RuntimeError as e:
        msg = f"Could not determine home directory: {e}\nPass --config-dir explicitly."
        raise AliasError(msg) from e


def load_alias(alias: str, config_dir: Path | None = None) -> AliasConfig:
    """Load connection details for a cluster alias.

    Args:
        alias: Alias name as registered with ``mc alias set``
        config_dir: mc configuration directory (default: ``~/.mc``)

    Returns:
        Validated AliasConfig

    Raises:
        AliasError: If the file is missing, unreadable or invalid, or the
            alias is not defined

    Examples:
        >>> cfg = load_alias("prod", Path("/home/admin/.mc"))
        >>> cfg.url
        'https://minio.example.com:9000'
    """
    directory = config_dir if config_dir is not None else default_config_dir()
    config_path = directory / ALIAS_CONFIG_FILENAME

    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"Alias configuration not found: {config_path}\nRun 'mc alias set' or pass --config-dir."
        raise AliasError(msg) from e
    except OSError as e:
        msg = f"Failed to read {config_path}: {e}"
        raise AliasError(msg) from e

    try:
        mc_config = McConfig.model_validate_json(raw)
    except ValidationError as e:
        msg = format_validation_error(e, title="Alias configuration is invalid:", source=config_path)
        raise AliasError(msg) from e

    alias_config = mc_config.aliases.get(alias)
    if alias_config is None:
        available = ", ".join(sorted(mc_config.aliases)) or "none"
        msg = f"Alias {alias!r} not found in {directory} (available: {available})"
        raise AliasError(msg)

    logger.info("Loaded cluster alias", extra={"alias": alias, "url": alias_config.url})
    return alias_config
