"""S/MIME certificate request example.

Builds an S/MIME request with an ECC P-384 key. The email address is
mandatory for this profile and is placed first in the subject.
"""

from csr_builder.enrollment import build_request, get_request_info, load_request
from csr_builder.enrollment.resolver import resolve_profile
from csr_builder.models import CertificateType, KeyAlgorithm, SubjectAttributes


def main():
    profile = resolve_profile(CertificateType.SMIME, KeyAlgorithm.ECC, 384)
    print(f"Key usage:      0x{profile.key_usage_flags:02X}")
    print(f"Extended usage: {', '.join(profile.extended_key_usage_oids)}")
    print(f"Storage:        {profile.storage_context.value}")
    print()

    pem = build_request(
        CertificateType.SMIME,
        KeyAlgorithm.ECC,
        384,
        SubjectAttributes(
            common_name="Joe User",
            email_address="joe@example.com",
            organization="Example Corp",
            country="US",
        ),
        description="Signing and encryption of mail",
    )
    print(pem)

    info = get_request_info(load_request(pem))
    print(f"Subject: {info.subject}")
    print(f"Signature valid: {info.signature_valid}")


if __name__ == "__main__":
    main()
