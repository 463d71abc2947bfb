"""Key & Signing Provider module.

This module provides the provider interface used by the request pipeline and
a concrete implementation built on the cryptography library.
"""

from csr_builder.provider.base import KeySigningProvider
from csr_builder.provider.cryptography_provider import (
    CryptographyKeyProvider,
    key_usage_extension,
    key_usage_flags,
)
from csr_builder.provider.names import format_name, parse_distinguished_name

__all__ = [
    "KeySigningProvider",
    "CryptographyKeyProvider",
    "key_usage_extension",
    "key_usage_flags",
    "format_name",
    "parse_distinguished_name",
]
