"""Audit trail functionality for the CSR builder.

This module provides structured audit logging for tracking generated and
failed certificate requests.
"""

import time
import uuid
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry with standard fields. Audit events
    are logged at INFO level for successful operations and ERROR level for
    failures.

    Args:
        event_type: Type of operation (e.g., "CSR_GENERATED", "CSR_FAILED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - certificate_type: Requested profile
                - key_algorithm / key_length: Key choice
                - subject: Distinguished name
                - duration: Operation duration in seconds
                - error_kind / error_message: Failure details
                - correlation_id: Optional correlation ID for related events

    Example:
        >>> log_audit_event("CSR_GENERATED", {
        ...     "status": "success",
        ...     "certificate_type": "server",
        ...     "key_algorithm": "RSA",
        ...     "key_length": 2048,
        ...     "duration": 0.42,
        ... })
    """
    details = dict(details)

    if "timestamp" not in details:
        details["timestamp"] = time.time()

    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "certificate_type",
        "key_algorithm",
        "key_length",
        "subject",
        "duration",
        "error_kind",
        "error_message",
        "correlation_id",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)
