"""Custom Key & Signing Provider example.

Any object implementing KeySigningProvider can back the orchestrator. This
example wraps CryptographyKeyProvider to record every call, which is useful
when integrating a hardware token or a platform key store.
"""

import logging

from csr_builder.enrollment import CsrOrchestrator
from csr_builder.models import (
    AssembledRequest,
    CertificateType,
    KeyAlgorithm,
    KeyHandle,
    StorageContext,
    SubjectAttributes,
)
from csr_builder.provider import CryptographyKeyProvider, KeySigningProvider

logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

logger = logging.getLogger(__name__)


class RecordingProvider(KeySigningProvider):
    """Provider that delegates to another provider and logs each step."""

    def __init__(self, inner: KeySigningProvider) -> None:
        self.inner = inner
        self.calls = []

    def generate_key_pair(
        self,
        key_algorithm: KeyAlgorithm,
        key_length: int,
        storage_context: StorageContext,
    ) -> KeyHandle:
        self.calls.append("generate_key_pair")
        logger.info(f"Generating {key_algorithm.name}-{key_length} ({storage_context.value})")
        return self.inner.generate_key_pair(key_algorithm, key_length, storage_context)

    def encode_request(self, request: AssembledRequest, key_handle: KeyHandle) -> bytes:
        self.calls.append("encode_request")
        logger.info(f"Encoding request for {request.distinguished_name}")
        return self.inner.encode_request(request, key_handle)

    def release_key(self, key_handle: KeyHandle) -> None:
        self.calls.append("release_key")
        logger.info(f"Releasing {key_handle.handle_id}")
        self.inner.release_key(key_handle)


def main():
    provider = RecordingProvider(CryptographyKeyProvider(signature_hash="sha384"))
    pem = CsrOrchestrator(provider).build_request(
        CertificateType.CODE_SIGNING,
        KeyAlgorithm.ECC,
        256,
        SubjectAttributes(common_name="Example Release Signing", organization="Example Corp"),
    )
    print(pem)
    print(f"Provider calls: {' -> '.join(provider.calls)}")


if __name__ == "__main__":
    main()
