"""Key & Signing Provider backed by the cryptography library.

Generates RSA and elliptic-curve key pairs in memory, builds PKCS#10 requests
with Key Usage, Extended Key Usage and Subject Alternative Name extensions,
and optionally writes the private key to a key store directory once a request
has been encoded successfully.
"""

import logging
import os
import threading
import uuid
from pathlib import Path
from typing import Dict, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import ObjectIdentifier

from ..models.request import (
    AssembledRequest,
    KeyAlgorithm,
    KeyHandle,
    KeyUsage,
    KeyUsageFlag,
    StorageContext,
)
from ..utils.exceptions import ProviderError
from .base import KeySigningProvider
from .names import parse_distinguished_name

logger = logging.getLogger(__name__)

# PKCS#9 friendlyName and X.520 description attribute types
FRIENDLY_NAME_OID = ObjectIdentifier("1.2.840.113549.1.9.20")
DESCRIPTION_OID = ObjectIdentifier("2.5.4.13")

ECC_CURVES = {
    256: ec.SECP256R1,
    384: ec.SECP384R1,
    521: ec.SECP521R1,
}

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]


class CryptographyKeyProvider(KeySigningProvider):
    """Key & Signing Provider using pyca/cryptography.

    Keys live in memory, keyed by handle id, until released. A single
    instance may be shared between threads.

    Attributes:
        signature_hash: Hash algorithm name used to sign requests
        key_store_dir: Optional directory receiving private keys of encoded requests
        public_exponent: RSA public exponent

    Example:
        >>> provider = CryptographyKeyProvider(key_store_dir=Path("keys"))
        >>> handle = provider.generate_key_pair(
        ...     KeyAlgorithm.ECC, 256, StorageContext.USER
        ... )
        >>> der = provider.encode_request(assembled, handle)
        >>> provider.release_key(handle)
    """

    def __init__(
        self,
        signature_hash: str = "sha256",
        key_store_dir: Optional[Path] = None,
        public_exponent: int = 65537,
    ) -> None:
        """Initialize the provider.

        Args:
            signature_hash: Hash algorithm (sha256, sha384, sha512)
            key_store_dir: Directory for persisted private keys, None to keep
                keys in memory only
            public_exponent: RSA public exponent (3 or 65537)

        Raises:
            ValueError: If the hash algorithm or exponent is unsupported
        """
        algorithm_map = {
            "sha256": hashes.SHA256,
            "sha384": hashes.SHA384,
            "sha512": hashes.SHA512,
        }

        if signature_hash.lower() not in algorithm_map:
            raise ValueError(
                f"Unsupported signature hash: {signature_hash}. "
                f"Supported algorithms: {', '.join(algorithm_map.keys())}"
            )

        if public_exponent not in (3, 65537):
            raise ValueError(
                f"Unsupported RSA public exponent: {public_exponent}. Must be 3 or 65537"
            )

        self.signature_hash = signature_hash.lower()
        self.key_store_dir = Path(key_store_dir) if key_store_dir else None
        self.public_exponent = public_exponent
        self._hash_algorithm = algorithm_map[self.signature_hash]()
        self._keys: Dict[str, PrivateKey] = {}
        self._lock = threading.Lock()

    @property
    def active_key_count(self) -> int:
        """Number of keys generated and not yet released."""
        with self._lock:
            return len(self._keys)

    def generate_key_pair(
        self,
        key_algorithm: KeyAlgorithm,
        key_length: int,
        storage_context: StorageContext,
    ) -> KeyHandle:
        if key_algorithm is KeyAlgorithm.RSA:
            private_key: PrivateKey = rsa.generate_private_key(
                public_exponent=self.public_exponent, key_size=key_length
            )
        elif key_algorithm is KeyAlgorithm.ECC:
            if key_length not in ECC_CURVES:
                raise ProviderError(
                    f"No elliptic curve for key length {key_length}. "
                    f"Supported: {', '.join(str(size) for size in ECC_CURVES)}"
                )
            private_key = ec.generate_private_key(ECC_CURVES[key_length]())
        else:
            raise ProviderError(f"Unsupported key algorithm: {key_algorithm}")

        handle = KeyHandle(
            handle_id=uuid.uuid4().hex,
            key_algorithm=key_algorithm,
            key_length=key_length,
            storage_context=storage_context,
        )
        with self._lock:
            self._keys[handle.handle_id] = private_key

        logger.debug(
            f"Generated {key_algorithm.name} {key_length}-bit key "
            f"({storage_context.value} context): {handle.handle_id}"
        )
        return handle

    def encode_request(self, request: AssembledRequest, key_handle: KeyHandle) -> bytes:
        private_key = self._get_key(key_handle)

        builder = x509.CertificateSigningRequestBuilder().subject_name(
            parse_distinguished_name(request.distinguished_name)
        )

        if request.key_usage.flags:
            builder = builder.add_extension(
                key_usage_extension(request.key_usage),
                critical=request.key_usage.critical,
            )

        if request.extended_key_usage:
            builder = builder.add_extension(
                x509.ExtendedKeyUsage(
                    [ObjectIdentifier(oid) for oid in request.extended_key_usage]
                ),
                critical=False,
            )

        if request.alternate_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName(
                    [x509.DNSName(name) for name in request.alternate_names]
                ),
                critical=False,
            )

        if request.friendly_name:
            builder = builder.add_attribute(
                FRIENDLY_NAME_OID, request.friendly_name.encode("utf-8")
            )

        if request.description:
            builder = builder.add_attribute(
                DESCRIPTION_OID, request.description.encode("utf-8")
            )

        csr = builder.sign(private_key, self._hash_algorithm)
        der = csr.public_bytes(Encoding.DER)

        if self.key_store_dir is not None:
            self._persist_key(self.key_store_dir, key_handle, private_key)

        logger.debug(f"Encoded request for key {key_handle.handle_id}: {len(der)} bytes")
        return der

    def release_key(self, key_handle: KeyHandle) -> None:
        with self._lock:
            released = self._keys.pop(key_handle.handle_id, None)
        if released is not None:
            logger.debug(f"Released key {key_handle.handle_id}")

    def _get_key(self, key_handle: KeyHandle) -> PrivateKey:
        with self._lock:
            private_key = self._keys.get(key_handle.handle_id)
        if private_key is None:
            raise ProviderError(
                f"Unknown or released key handle: {key_handle.handle_id}"
            )
        return private_key

    def _persist_key(
        self, key_store_dir: Path, key_handle: KeyHandle, private_key: PrivateKey
    ) -> Path:
        """Write the private key to <key_store_dir>/<context>/<handle>.key.

        The file is created with mode 0600 and must not already exist.
        """
        key_dir = key_store_dir / key_handle.storage_context.value
        key_path = key_dir / f"{key_handle.handle_id}.key"

        try:
            key_dir.mkdir(parents=True, exist_ok=True)
            fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as key_file:
                key_file.write(
                    private_key.private_bytes(
                        encoding=Encoding.PEM,
                        format=PrivateFormat.PKCS8,
                        encryption_algorithm=NoEncryption(),
                    )
                )
        except OSError as e:
            raise ProviderError(
                f"Failed to write private key to {key_path}: {e}"
            ) from e

        logger.info(f"Private key stored: {key_path}")
        return key_path


def key_usage_extension(key_usage: KeyUsage) -> x509.KeyUsage:
    """Convert a Key Usage bitmask into a cryptography KeyUsage extension."""
    flags = key_usage.flags
    return x509.KeyUsage(
        digital_signature=bool(flags & KeyUsageFlag.DIGITAL_SIGNATURE),
        content_commitment=bool(flags & KeyUsageFlag.NON_REPUDIATION),
        key_encipherment=bool(flags & KeyUsageFlag.KEY_ENCIPHERMENT),
        data_encipherment=bool(flags & KeyUsageFlag.DATA_ENCIPHERMENT),
        key_agreement=bool(flags & KeyUsageFlag.KEY_AGREEMENT),
        key_cert_sign=bool(flags & KeyUsageFlag.KEY_CERT_SIGN),
        crl_sign=bool(flags & KeyUsageFlag.CRL_SIGN),
        encipher_only=bool(flags & KeyUsageFlag.ENCIPHER_ONLY),
        decipher_only=bool(flags & KeyUsageFlag.DECIPHER_ONLY),
    )


def key_usage_flags(extension: x509.KeyUsage) -> KeyUsageFlag:
    """Convert a cryptography KeyUsage extension back into a bitmask."""
    flags = KeyUsageFlag.NONE
    if extension.digital_signature:
        flags |= KeyUsageFlag.DIGITAL_SIGNATURE
    if extension.content_commitment:
        flags |= KeyUsageFlag.NON_REPUDIATION
    if extension.key_encipherment:
        flags |= KeyUsageFlag.KEY_ENCIPHERMENT
    if extension.data_encipherment:
        flags |= KeyUsageFlag.DATA_ENCIPHERMENT
    if extension.key_agreement:
        flags |= KeyUsageFlag.KEY_AGREEMENT
        if extension.encipher_only:
            flags |= KeyUsageFlag.ENCIPHER_ONLY
        if extension.decipher_only:
            flags |= KeyUsageFlag.DECIPHER_ONLY
    if extension.key_cert_sign:
        flags |= KeyUsageFlag.KEY_CERT_SIGN
    if extension.crl_sign:
        flags |= KeyUsageFlag.CRL_SIGN
    return flags
