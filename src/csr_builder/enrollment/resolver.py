"""Profile resolution for certificate requests.

Maps a certificate type, key algorithm and optional key length to a fully
resolved RequestProfile: effective key length, Key Usage flags, ordered
Extended Key Usage OIDs, SAN permission and key storage context. All policy
constants live in the lookup tables below.
"""

import logging
from typing import Dict, Optional, Tuple, Union

from ..models.request import (
    CertificateType,
    KeyAlgorithm,
    KeyUsage,
    KeyUsageFlag,
    RequestProfile,
    StorageContext,
)
from ..utils.exceptions import InvalidKeyLengthError, InvalidStorageContextError

logger = logging.getLogger(__name__)

# PKIX extended key usage purposes (RFC 5280 section 4.2.1.12)
SERVER_AUTH_OID = "1.3.6.1.5.5.7.3.1"
CLIENT_AUTH_OID = "1.3.6.1.5.5.7.3.2"
CODE_SIGNING_OID = "1.3.6.1.5.5.7.3.3"
EMAIL_PROTECTION_OID = "1.3.6.1.5.5.7.3.4"

KEY_LENGTHS: Dict[KeyAlgorithm, Tuple[int, ...]] = {
    KeyAlgorithm.RSA: (2048, 4096, 8192, 16384),
    KeyAlgorithm.ECC: (256, 384, 521),
}

DEFAULT_KEY_LENGTHS: Dict[KeyAlgorithm, int] = {
    KeyAlgorithm.RSA: 2048,
    KeyAlgorithm.ECC: 256,
}

# 0xF0 server, 0xB0 client/smime, 0x80 code signing
KEY_USAGE_BY_TYPE: Dict[CertificateType, KeyUsage] = {
    CertificateType.SERVER: KeyUsage(
        flags=KeyUsageFlag.DIGITAL_SIGNATURE
        | KeyUsageFlag.NON_REPUDIATION
        | KeyUsageFlag.KEY_ENCIPHERMENT
        | KeyUsageFlag.DATA_ENCIPHERMENT,
        critical=True,
    ),
    CertificateType.CLIENT: KeyUsage(
        flags=KeyUsageFlag.DIGITAL_SIGNATURE
        | KeyUsageFlag.NON_REPUDIATION
        | KeyUsageFlag.KEY_ENCIPHERMENT,
        critical=False,
    ),
    CertificateType.SMIME: KeyUsage(
        flags=KeyUsageFlag.DIGITAL_SIGNATURE
        | KeyUsageFlag.NON_REPUDIATION
        | KeyUsageFlag.KEY_ENCIPHERMENT,
        critical=False,
    ),
    CertificateType.CODE_SIGNING: KeyUsage(
        flags=KeyUsageFlag.DIGITAL_SIGNATURE,
        critical=False,
    ),
}

# clientAuth must precede emailProtection for S/MIME
EXTENDED_KEY_USAGE_BY_TYPE: Dict[CertificateType, Tuple[str, ...]] = {
    CertificateType.SERVER: (SERVER_AUTH_OID,),
    CertificateType.CODE_SIGNING: (CODE_SIGNING_OID,),
    CertificateType.CLIENT: (CLIENT_AUTH_OID,),
    CertificateType.SMIME: (CLIENT_AUTH_OID, EMAIL_PROTECTION_OID),
}

# Key storage provider names used by enrollment APIs for each algorithm
PROVIDER_NAMES: Dict[KeyAlgorithm, str] = {
    KeyAlgorithm.RSA: "Microsoft RSA SChannel Cryptographic Provider",
    KeyAlgorithm.ECC: "Microsoft Software Key Storage Provider",
}

# CNG algorithm names for each ECC key length
ECC_CURVE_NAMES: Dict[int, str] = {
    256: "ECDSA_P256",
    384: "ECDSA_P384",
    521: "ECDSA_P521",
}


def resolve_profile(
    certificate_type: CertificateType,
    key_algorithm: KeyAlgorithm,
    key_length: Optional[int] = None,
    storage_context: Union[StorageContext, str, None] = None,
) -> RequestProfile:
    """Resolve a certificate type and key choice into a RequestProfile.

    Pure and deterministic: equal inputs always yield equal profiles.

    Args:
        certificate_type: Certificate profile
        key_algorithm: Key pair algorithm
        key_length: Requested key length in bits, or None for the default
        storage_context: Explicit key storage context; None derives it from
            the certificate type (server keys are machine-wide)

    Returns:
        Resolved, immutable RequestProfile

    Raises:
        InvalidKeyLengthError: If key_length is not allowed for the algorithm
        InvalidStorageContextError: If storage_context is not recognized

    Example:
        >>> profile = resolve_profile(CertificateType.SERVER, KeyAlgorithm.RSA)
        >>> profile.key_length, hex(profile.key_usage_flags)
        (2048, '0xf0')
    """
    effective_length = (
        DEFAULT_KEY_LENGTHS[key_algorithm] if key_length is None else key_length
    )

    allowed = KEY_LENGTHS[key_algorithm]
    if effective_length not in allowed:
        raise InvalidKeyLengthError(
            f"Key length {effective_length} is not valid for {key_algorithm.name}. "
            f"Allowed values: {', '.join(str(length) for length in allowed)}"
        )

    if storage_context is None:
        context = default_storage_context(certificate_type)
    else:
        context = parse_storage_context(storage_context)

    profile = RequestProfile(
        certificate_type=certificate_type,
        key_algorithm=key_algorithm,
        key_length=effective_length,
        key_usage=KEY_USAGE_BY_TYPE[certificate_type],
        extended_key_usage_oids=EXTENDED_KEY_USAGE_BY_TYPE[certificate_type],
        allows_subject_alternate_names=certificate_type is CertificateType.SERVER,
        storage_context=context,
    )

    logger.debug(
        f"Resolved profile: type={certificate_type.value}, "
        f"algorithm={key_algorithm.name}, length={effective_length}, "
        f"key_usage=0x{profile.key_usage_flags:02X}, "
        f"eku={','.join(profile.extended_key_usage_oids)}"
    )
    return profile


def default_storage_context(certificate_type: CertificateType) -> StorageContext:
    """Return the storage context implied by the certificate type."""
    if certificate_type is CertificateType.SERVER:
        return StorageContext.MACHINE
    return StorageContext.USER


def parse_storage_context(value: Union[StorageContext, str]) -> StorageContext:
    """Parse a storage context selector.

    Args:
        value: StorageContext member or 'machine' / 'user' (case-insensitive)

    Returns:
        Matching StorageContext

    Raises:
        InvalidStorageContextError: If the value is not recognized
    """
    if isinstance(value, StorageContext):
        return value

    normalized = str(value).strip().lower()
    for context in StorageContext:
        if context.value == normalized:
            return context

    raise InvalidStorageContextError(
        f"Invalid storage context: {value!r}. Must be one of: "
        f"{', '.join(context.value for context in StorageContext)}"
    )


def provider_name_for(key_algorithm: KeyAlgorithm) -> str:
    """Return the key storage provider name for an algorithm."""
    return PROVIDER_NAMES[key_algorithm]


def algorithm_name_for(profile: RequestProfile) -> str:
    """Return the CNG algorithm name for a resolved profile (RSA, ECDSA_P256, ...)."""
    if profile.key_algorithm is KeyAlgorithm.ECC:
        return ECC_CURVE_NAMES[profile.key_length]
    return "RSA"
