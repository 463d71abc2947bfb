"""Certificate request enrollment module.

This module provides functionality for:
- Resolving a certificate profile into key and extension policy
- Assembling the subject distinguished name and requested extensions
- Orchestrating key generation and PKCS#10 encoding through a provider
- Framing and inspecting NEW CERTIFICATE REQUEST PEM text
"""

from csr_builder.enrollment.assembler import assemble_request, build_distinguished_name
from csr_builder.enrollment.encoding import der_to_request_pem, request_pem_to_der
from csr_builder.enrollment.inspector import get_request_info, load_request
from csr_builder.enrollment.orchestrator import (
    CsrOrchestrator,
    RequestState,
    build_request,
)
from csr_builder.enrollment.resolver import (
    algorithm_name_for,
    parse_storage_context,
    provider_name_for,
    resolve_profile,
)

__all__ = [
    # Profile resolution
    "resolve_profile",
    "parse_storage_context",
    "provider_name_for",
    "algorithm_name_for",
    # Subject and extension assembly
    "assemble_request",
    "build_distinguished_name",
    # Orchestration
    "CsrOrchestrator",
    "RequestState",
    "build_request",
    # PEM framing and inspection
    "der_to_request_pem",
    "request_pem_to_der",
    "load_request",
    "get_request_info",
]
