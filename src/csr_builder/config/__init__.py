"""Config module.

This module provides configuration management functionality.
"""

from csr_builder.config.manager import (
    get_logging_config,
    get_operation_logging_config,
    get_provider_config,
    get_request_defaults,
    load_config,
)
from csr_builder.config.schema import (
    Config,
    LoggingConfig,
    OperationLoggingConfig,
    ProviderConfig,
    RequestDefaultsConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_request_defaults",
    "get_provider_config",
    "get_logging_config",
    "get_operation_logging_config",
    # Configuration models
    "Config",
    "RequestDefaultsConfig",
    "ProviderConfig",
    "LoggingConfig",
    "OperationLoggingConfig",
]
