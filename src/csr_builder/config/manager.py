"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from csr_builder.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from csr_builder.config.schema import (
    Config,
    LoggingConfig,
    OperationLoggingConfig,
    ProviderConfig,
    RequestDefaultsConfig,
)
from csr_builder.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "CSR_BUILDER_"

# (environment suffix, section, field, converter)
_ENV_OVERRIDES = [
    ("CERT_TYPE", "defaults", "certificate_type", str),
    ("KEY_ALGORITHM", "defaults", "key_algorithm", str),
    ("KEY_LENGTH", "defaults", "key_length", int),
    ("ORGANIZATION", "defaults", "organization", str),
    ("ORGANIZATIONAL_UNIT", "defaults", "organizational_unit", str),
    ("LOCALITY", "defaults", "locality", str),
    ("STATE", "defaults", "state", str),
    ("COUNTRY", "defaults", "country", str),
    ("SIGNATURE_HASH", "provider", "signature_hash", str),
    ("KEY_STORE_DIR", "provider", "key_store_dir", str),
    ("PUBLIC_EXPONENT", "provider", "public_exponent", int),
    ("LOG_LEVEL", "logging", "level", str),
    ("LOG_FILE", "logging", "log_file", str),
    ("REDACT_PII", "logging", "redact_pii", lambda value: _parse_bool(value)),
    ("OP_LOG_RESOLVER_LEVEL", "operation_logging", "resolver_log_level", str),
    ("OP_LOG_ASSEMBLER_LEVEL", "operation_logging", "assembler_log_level", str),
    ("OP_LOG_ORCHESTRATOR_LEVEL", "operation_logging", "orchestrator_log_level", str),
    ("OP_LOG_PROVIDER_LEVEL", "operation_logging", "provider_log_level", str),
]


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (CSR_BUILDER_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.provider.signature_hash
        'sha256'
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format. See documentation for details."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file must contain a JSON object: {config_path}"
            )
        return config_dict

    logger.info(f"Config file not found: {config_path}. Using default configuration.")
    # Deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with CSR_BUILDER_ prefix.

    Environment variables follow the pattern: CSR_BUILDER_<FIELD>
    For example: CSR_BUILDER_KEY_ALGORITHM, CSR_BUILDER_LOG_LEVEL

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied

    Raises:
        ConfigurationError: If a numeric override is not a number
    """
    for suffix, section, field, convert in _ENV_OVERRIDES:
        name = f"{ENV_PREFIX}{suffix}"
        raw = os.getenv(name)
        if not raw:
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: {raw!r}\n"
                f"Fix: Provide a whole number"
            ) from e
        config_dict.setdefault(section, {})[field] = value
        logger.debug(f"Override: {field} from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string (case-insensitive)."""
    return value.lower() in ("true", "1", "yes", "on")


def get_request_defaults(config: Config) -> RequestDefaultsConfig:
    """Get request defaults configuration."""
    return config.defaults


def get_provider_config(config: Config) -> ProviderConfig:
    """Get key provider configuration.

    Example:
        >>> config = load_config()
        >>> get_provider_config(config).signature_hash
        'sha256'
    """
    return config.provider


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration."""
    return config.logging


def get_operation_logging_config(config: Config) -> OperationLoggingConfig:
    """Get per-stage logging configuration."""
    return config.operation_logging
