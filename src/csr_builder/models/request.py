"""Data models for certificate request building.

This module defines the enumerations and immutable dataclasses that flow
through the request pipeline: the resolved profile, the assembled request,
the provider key handle, and the decoded summary of an existing request.
"""

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import List, Optional, Tuple


class CertificateType(Enum):
    """Certificate profile a request is built for.

    Attributes:
        SERVER: TLS server authentication
        CLIENT: TLS client authentication
        SMIME: Secure e-mail (client authentication plus e-mail protection)
        CODE_SIGNING: Code signing
    """

    SERVER = "server"
    CLIENT = "client"
    SMIME = "smime"
    CODE_SIGNING = "code-signing"


class KeyAlgorithm(Enum):
    """Public key algorithm of the generated key pair."""

    RSA = "rsa"
    ECC = "ecc"


class StorageContext(Enum):
    """Key storage scope: machine-wide or per-user."""

    MACHINE = "machine"
    USER = "user"


class KeyUsageFlag(IntFlag):
    """X.509 Key Usage bits as encoded by enrollment APIs.

    Values follow the RFC 5280 bit string layout read as a big-endian byte,
    so DIGITAL_SIGNATURE (bit 0) is 0x80 and DECIPHER_ONLY (bit 8) is 0x8000.
    """

    NONE = 0
    ENCIPHER_ONLY = 0x01
    CRL_SIGN = 0x02
    KEY_CERT_SIGN = 0x04
    KEY_AGREEMENT = 0x08
    DATA_ENCIPHERMENT = 0x10
    KEY_ENCIPHERMENT = 0x20
    NON_REPUDIATION = 0x40
    DIGITAL_SIGNATURE = 0x80
    DECIPHER_ONLY = 0x8000


@dataclass(frozen=True)
class KeyUsage:
    """Key Usage extension value.

    Attributes:
        flags: Key Usage bitmask
        critical: Whether the extension is marked critical
    """

    flags: KeyUsageFlag
    critical: bool


@dataclass(frozen=True)
class RequestProfile:
    """Fully resolved request profile.

    Created once per request by the profile resolver and never mutated.

    Attributes:
        certificate_type: Requested certificate profile
        key_algorithm: Key pair algorithm
        key_length: Effective key length in bits
        key_usage: Key Usage flags and criticality
        extended_key_usage_oids: Ordered Extended Key Usage OIDs (dotted strings)
        allows_subject_alternate_names: Whether SAN entries may be requested
        storage_context: Where the provider stores the generated key
    """

    certificate_type: CertificateType
    key_algorithm: KeyAlgorithm
    key_length: int
    key_usage: KeyUsage
    extended_key_usage_oids: Tuple[str, ...]
    allows_subject_alternate_names: bool
    storage_context: StorageContext

    @property
    def key_usage_flags(self) -> int:
        """Key Usage bitmask as a plain integer."""
        return int(self.key_usage.flags)


@dataclass(frozen=True)
class SubjectAttributes:
    """User-supplied subject fields.

    When subject_name_override is set, the component fields are ignored.

    Attributes:
        subject_name_override: Complete distinguished name string
        common_name: CN, required unless an override is given
        email_address: E, required for S/MIME requests
        organizational_unit: OU
        organization: O
        locality: L
        state: S
        country: C, exactly two characters when present
    """

    subject_name_override: Optional[str] = None
    common_name: Optional[str] = None
    email_address: Optional[str] = None
    organizational_unit: Optional[str] = None
    organization: Optional[str] = None
    locality: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class AssembledRequest:
    """Request content ready to hand to a Key & Signing Provider.

    Attributes:
        distinguished_name: Subject DN string (E=...,CN=...,OU=...)
        key_usage: Key Usage flags and criticality
        extended_key_usage: Ordered Extended Key Usage OIDs
        alternate_names: DNS Subject Alternative Names in caller order
        friendly_name: Optional friendly name attribute
        description: Optional description attribute
    """

    distinguished_name: str
    key_usage: KeyUsage
    extended_key_usage: Tuple[str, ...]
    alternate_names: Tuple[str, ...] = ()
    friendly_name: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class KeyHandle:
    """Opaque reference to a key pair held by a provider.

    Attributes:
        handle_id: Provider-assigned identifier
        key_algorithm: Algorithm of the key pair
        key_length: Key length in bits
        storage_context: Storage scope the key was created in
    """

    handle_id: str
    key_algorithm: KeyAlgorithm
    key_length: int
    storage_context: StorageContext


@dataclass
class RequestInfo:
    """Decoded summary of a PKCS#10 request for display and checks.

    Attributes:
        subject: Subject DN in written order
        key_algorithm: Public key algorithm
        key_size: Public key size in bits
        key_usage: Key Usage extension, if requested
        extended_key_usage: Extended Key Usage OIDs in encoded order
        alternate_names: DNS Subject Alternative Names
        friendly_name: Friendly name attribute, if present
        description: Description attribute, if present
        signature_valid: Whether the self-signature verifies
    """

    subject: str
    key_algorithm: KeyAlgorithm
    key_size: int
    key_usage: Optional[KeyUsage]
    extended_key_usage: List[str] = field(default_factory=list)
    alternate_names: List[str] = field(default_factory=list)
    friendly_name: Optional[str] = None
    description: Optional[str] = None
    signature_valid: bool = False
