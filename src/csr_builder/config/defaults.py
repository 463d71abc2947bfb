"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "defaults": {
        # Server TLS certificate with a 2048-bit RSA key
        "certificate_type": "server",
        "key_algorithm": "rsa",
        "key_length": None,
    },
    "provider": {
        "signature_hash": "sha256",
        # Keep generated keys in memory only unless a store is configured
        "key_store_dir": None,
        "public_exponent": 65537,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/csr-builder.log",
        # Subjects may contain personal names and mailboxes; opt-in redaction
        "redact_pii": False,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
