"""Logging configuration and logger factory for the CSR builder.

This module provides centralized logging configuration with support for:
- Console and file handlers with different log levels
- Log rotation to prevent unbounded file growth
- Subject redaction via custom formatters
- Environment variable configuration
- Per-operation log levels for the request pipeline stages
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .formatters import PIIRedactingFormatter

if TYPE_CHECKING:
    from ..config.schema import OperationLoggingConfig

# Constants
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "csr-builder.log"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

# Track if logging has been configured
_logging_configured = False

# Operation loggers are the module loggers of each pipeline stage
OPERATION_LOGGERS = {
    "resolver": "csr_builder.enrollment.resolver",
    "assembler": "csr_builder.enrollment.assembler",
    "orchestrator": "csr_builder.enrollment.orchestrator",
    "provider": "csr_builder.provider",
}

logger = logging.getLogger(__name__)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_pii: bool = False,
) -> None:
    """Configure logging for the CSR builder.

    Sets up both console and file handlers with appropriate log levels and formatting.
    This function is idempotent - it can be called multiple times safely.

    Args:
        level: Log level for console output (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               File handler always uses DEBUG level.
        log_file: Path to log file. If None, uses DEFAULT_LOG_FILE or
                 CSR_BUILDER_LOG_FILE environment variable if set.
        redact_pii: Whether to redact subject names and email addresses from logs

    Raises:
        ValueError: If invalid log level is provided
        RuntimeError: If log directory cannot be created

    Example:
        >>> configure_logging(level="DEBUG", redact_pii=True)
        >>> configure_logging(level="INFO", log_file=Path("custom/csr.log"))
    """
    global _logging_configured

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )

    if log_file is None:
        env_log_file = os.environ.get("CSR_BUILDER_LOG_FILE")
        if env_log_file:
            log_file = Path(env_log_file)
        else:
            log_file = DEFAULT_LOG_FILE

    log_dir = log_file.parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as e:
        raise RuntimeError(
            f"Failed to create log directory: {log_dir}. "
            f"Ensure write permissions are available. Error: {e}"
        ) from e

    root_logger = logging.getLogger()

    # Remove handlers from a previous call to avoid duplicates
    if _logging_configured:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.setLevel(logging.DEBUG)

    formatter = PIIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)

    # Console goes to stderr so CSR text on stdout stays clean
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    try:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        root_logger.warning(
            f"Failed to create file handler for {log_file}: {e}. "
            f"Logging to console only."
        )

    _logging_configured = True


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger for the specified module.

    Args:
        module_name: Name of the module, typically __name__

    Returns:
        Logger instance for the module
    """
    return logging.getLogger(module_name)


def get_operation_logger(operation: str) -> logging.Logger:
    """Get the logger of a request pipeline stage.

    Args:
        operation: Stage name (resolver, assembler, orchestrator, provider)

    Returns:
        Logger instance for the stage

    Raises:
        ValueError: If operation is not a recognized stage
    """
    if operation not in OPERATION_LOGGERS:
        raise ValueError(
            f"Unknown operation: {operation}. "
            f"Must be one of: {', '.join(OPERATION_LOGGERS.keys())}"
        )
    return logging.getLogger(OPERATION_LOGGERS[operation])


def configure_operation_logging(
    resolver_log_level: str = "INFO",
    assembler_log_level: str = "INFO",
    orchestrator_log_level: str = "INFO",
    provider_log_level: str = "WARNING",
) -> None:
    """Configure logging levels for each pipeline stage.

    Args:
        resolver_log_level: Log level for profile resolution
        assembler_log_level: Log level for subject and extension assembly
        orchestrator_log_level: Log level for request orchestration
        provider_log_level: Log level for key provider operations

    Raises:
        ValueError: If any log level is invalid

    Example:
        >>> configure_operation_logging(provider_log_level="DEBUG")
    """
    levels = {
        "resolver": resolver_log_level,
        "assembler": assembler_log_level,
        "orchestrator": orchestrator_log_level,
        "provider": provider_log_level,
    }

    for operation, level in levels.items():
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(
                f"Invalid log level for {operation}: {level}. "
                f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
            )

        logger_name = OPERATION_LOGGERS[operation]
        logging.getLogger(logger_name).setLevel(numeric_level)
        logger.debug("Set %s logger level to %s", logger_name, level.upper())


def configure_operation_logging_from_config(config: "OperationLoggingConfig") -> None:
    """Configure stage logging from an OperationLoggingConfig object."""
    configure_operation_logging(
        resolver_log_level=config.resolver_log_level,
        assembler_log_level=config.assembler_log_level,
        orchestrator_log_level=config.orchestrator_log_level,
        provider_log_level=config.provider_log_level,
    )
