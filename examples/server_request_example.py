"""Server certificate request example.

This module demonstrates building a TLS server certificate request with
Subject Alternative Names, inspecting the result, and handling validation
errors reported before any key is generated.
"""

import logging
from pathlib import Path

from csr_builder.enrollment import CsrOrchestrator, get_request_info, load_request
from csr_builder.models import CertificateType, KeyAlgorithm, SubjectAttributes
from csr_builder.provider import CryptographyKeyProvider
from csr_builder.utils.exceptions import RequestError, create_error_info

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def example_1_server_request():
    """Example 1: RSA-2048 server request with two DNS names."""
    print("=" * 80)
    print("EXAMPLE 1: Server Request")
    print("=" * 80)
    print()

    provider = CryptographyKeyProvider(key_store_dir=Path("keys"))
    orchestrator = CsrOrchestrator(provider)

    pem = orchestrator.build_request(
        CertificateType.SERVER,
        KeyAlgorithm.RSA,
        None,
        SubjectAttributes(
            common_name="www.example.com",
            organization="Example Corp",
            locality="Springfield",
            state="IL",
            country="US",
        ),
        ["www.example.com", "example.com"],
        friendly_name="Example web server",
    )

    output = Path("server.req")
    output.write_text(pem, encoding="ascii")
    print(pem)

    info = get_request_info(load_request(output))
    print(f"Subject:   {info.subject}")
    print(f"Key:       {info.key_algorithm.name} {info.key_size}")
    print(f"Key usage: 0x{int(info.key_usage.flags):02X} (critical={info.key_usage.critical})")
    print(f"DNS names: {', '.join(info.alternate_names)}")
    print()


def example_2_validation_errors():
    """Example 2: Validation errors carry a kind and remediation.

    None of these requests reach the provider, so no key is created.
    """
    print("=" * 80)
    print("EXAMPLE 2: Validation Errors")
    print("=" * 80)
    print()

    orchestrator = CsrOrchestrator(CryptographyKeyProvider())
    attempts = [
        ("ECC key of 300 bits", CertificateType.SERVER, KeyAlgorithm.ECC, 300,
         SubjectAttributes(common_name="www.example.com"), []),
        ("SAN on a client request", CertificateType.CLIENT, KeyAlgorithm.RSA, 4096,
         SubjectAttributes(common_name="client01"), ["x.example.com"]),
        ("three-letter country", CertificateType.CLIENT, KeyAlgorithm.RSA, None,
         SubjectAttributes(common_name="Joe User", country="USA"), []),
    ]

    for label, cert_type, algorithm, length, subject, names in attempts:
        try:
            orchestrator.build_request(cert_type, algorithm, length, subject, names)
        except RequestError as e:
            info = create_error_info(e)
            print(f"{label}:")
            print(f"  Kind:  {e.kind.value}")
            print(f"  Error: {e.detail}")
            print(f"  Fix:   {info.remediation}")
            print(f"  State: {orchestrator.state.value}")
            print()


if __name__ == "__main__":
    example_1_server_request()
    example_2_validation_errors()
