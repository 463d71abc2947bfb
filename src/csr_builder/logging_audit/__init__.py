"""Logging Audit module.

This module provides logging configuration and audit trail functionality.
"""

from .audit import log_audit_event
from .formatters import PIIRedactingFormatter
from .logger import (
    configure_logging,
    configure_operation_logging,
    configure_operation_logging_from_config,
    get_logger,
    get_operation_logger,
)

__all__ = [
    "configure_logging",
    "configure_operation_logging",
    "configure_operation_logging_from_config",
    "get_logger",
    "get_operation_logger",
    "log_audit_event",
    "PIIRedactingFormatter",
]
