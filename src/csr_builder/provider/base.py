"""Key & Signing Provider interface.

A provider owns all platform-specific behavior: key material creation, key
storage, request signing and PKCS#10 encoding. The request pipeline talks to
it only through this interface.
"""

from abc import ABC, abstractmethod

from ..models.request import AssembledRequest, KeyAlgorithm, KeyHandle, StorageContext


class KeySigningProvider(ABC):
    """Abstract Key & Signing Provider.

    Implementations raise ProviderError (or any exception) on failure; the
    orchestrator wraps failures into KeyGenerationFailedError or
    EncodingFailedError depending on the step.
    """

    @abstractmethod
    def generate_key_pair(
        self,
        key_algorithm: KeyAlgorithm,
        key_length: int,
        storage_context: StorageContext,
    ) -> KeyHandle:
        """Generate a key pair and return a handle to it.

        Args:
            key_algorithm: RSA or ECC
            key_length: Key length in bits (RSA modulus size or ECC curve size)
            storage_context: Machine-wide or per-user key storage

        Returns:
            Handle referencing the new key pair
        """

    @abstractmethod
    def encode_request(self, request: AssembledRequest, key_handle: KeyHandle) -> bytes:
        """Encode and sign a PKCS#10 request with the referenced key.

        Args:
            request: Assembled subject, extensions and attributes
            key_handle: Handle returned by generate_key_pair

        Returns:
            DER-encoded CertificationRequest
        """

    @abstractmethod
    def release_key(self, key_handle: KeyHandle) -> None:
        """Release the referenced key. Must be safe to call more than once."""
