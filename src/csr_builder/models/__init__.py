"""Models module.

This module provides data models and dataclasses for the application.
"""

from csr_builder.models.request import (
    AssembledRequest,
    CertificateType,
    KeyAlgorithm,
    KeyHandle,
    KeyUsage,
    KeyUsageFlag,
    RequestInfo,
    RequestProfile,
    StorageContext,
    SubjectAttributes,
)

__all__ = [
    "AssembledRequest",
    "CertificateType",
    "KeyAlgorithm",
    "KeyHandle",
    "KeyUsage",
    "KeyUsageFlag",
    "RequestInfo",
    "RequestProfile",
    "StorageContext",
    "SubjectAttributes",
]
