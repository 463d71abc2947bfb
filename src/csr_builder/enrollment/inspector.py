"""Certificate request loading and inspection.

This module provides functionality for loading PKCS#10 requests from PEM
(either request label) or DER files and extracting their subject, key and
requested extensions for display and verification.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import ExtensionOID

from ..models.request import KeyAlgorithm, KeyUsage, RequestInfo
from ..provider.cryptography_provider import (
    DESCRIPTION_OID,
    FRIENDLY_NAME_OID,
    key_usage_flags,
)
from ..provider.names import format_name
from ..utils.exceptions import ValidationError
from .encoding import request_pem_to_der

logger = logging.getLogger(__name__)


def load_request(source: Union[Path, str, bytes]) -> x509.CertificateSigningRequest:
    """Load a certificate request from a file, PEM text or DER bytes.

    Args:
        source: Path to a PEM/DER file, PEM text, or DER bytes

    Returns:
        Parsed CertificateSigningRequest

    Raises:
        ValidationError: If the file is missing or the content is not a request

    Example:
        >>> csr = load_request(Path("server.req"))
        >>> info = get_request_info(csr)
    """
    if isinstance(source, Path):
        if not source.exists():
            raise ValidationError(f"Certificate request file not found: {source}")
        try:
            data = source.read_bytes()
        except OSError as e:
            raise ValidationError(f"Failed to read {source}: {e}") from e
        logger.debug(f"Loaded {len(data)} bytes from {source.name}")
    elif isinstance(source, str):
        data = source.encode("utf-8")
    else:
        data = source

    if b"-----BEGIN" in data:
        der = request_pem_to_der(data.decode("ascii", errors="replace"))
    else:
        der = data

    try:
        return x509.load_der_x509_csr(der)
    except ValueError as e:
        raise ValidationError(f"Failed to load certificate request: {e}") from e


def get_request_info(csr: x509.CertificateSigningRequest) -> RequestInfo:
    """Extract request information for display and checks.

    Args:
        csr: Parsed certificate request

    Returns:
        RequestInfo with subject, key details, extensions and attributes
    """
    public_key = csr.public_key()
    if isinstance(public_key, rsa.RSAPublicKey):
        key_algorithm = KeyAlgorithm.RSA
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        key_algorithm = KeyAlgorithm.ECC
    else:
        raise ValidationError(
            f"Unsupported public key type: {type(public_key).__name__}"
        )

    key_usage: Optional[KeyUsage] = None
    extended_key_usage = []
    alternate_names = []

    for extension in csr.extensions:
        if extension.oid == ExtensionOID.KEY_USAGE:
            key_usage = KeyUsage(
                flags=key_usage_flags(extension.value), critical=extension.critical
            )
        elif extension.oid == ExtensionOID.EXTENDED_KEY_USAGE:
            extended_key_usage = [oid.dotted_string for oid in extension.value]
        elif extension.oid == ExtensionOID.SUBJECT_ALTERNATIVE_NAME:
            alternate_names = extension.value.get_values_for_type(x509.DNSName)

    return RequestInfo(
        subject=format_name(csr.subject),
        key_algorithm=key_algorithm,
        key_size=public_key.key_size,
        key_usage=key_usage,
        extended_key_usage=extended_key_usage,
        alternate_names=alternate_names,
        friendly_name=_attribute_text(csr, FRIENDLY_NAME_OID),
        description=_attribute_text(csr, DESCRIPTION_OID),
        signature_valid=csr.is_signature_valid,
    )


def _attribute_text(
    csr: x509.CertificateSigningRequest, oid: x509.ObjectIdentifier
) -> Optional[str]:
    try:
        attribute = csr.attributes.get_attribute_for_oid(oid)
    except x509.AttributeNotFound:
        return None
    return attribute.value.decode("utf-8", errors="replace")
