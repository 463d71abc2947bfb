"""Certificate request orchestration.

Ties profile resolution, subject assembly and the Key & Signing Provider
together. The pipeline is linear:

    START -> RESOLVED -> ASSEMBLED -> KEY_GENERATED -> ENCODED -> DONE

with FAILED reachable from any state. No key is generated until the request
shape has been validated, and a generated key is released on every exit path.
"""

import logging
import time
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from ..logging_audit.audit import log_audit_event
from ..models.request import (
    CertificateType,
    KeyAlgorithm,
    KeyHandle,
    StorageContext,
    SubjectAttributes,
)
from ..provider.base import KeySigningProvider
from ..utils.exceptions import (
    CsrBuilderError,
    EncodingFailedError,
    KeyGenerationFailedError,
    RequestError,
)
from .assembler import assemble_request
from .encoding import der_to_request_pem
from .resolver import resolve_profile

logger = logging.getLogger(__name__)


class RequestState(Enum):
    """Progress of a single request through the pipeline."""

    START = "start"
    RESOLVED = "resolved"
    ASSEMBLED = "assembled"
    KEY_GENERATED = "key_generated"
    ENCODED = "encoded"
    DONE = "done"
    FAILED = "failed"


class CsrOrchestrator:
    """Build PKCS#10 certificate requests through a Key & Signing Provider.

    Each call to build_request processes one request end-to-end. The state
    and failure of the most recent call are kept on the instance for
    inspection; use one orchestrator per thread when sharing a provider.

    Attributes:
        provider: Key & Signing Provider used for key generation and encoding
        state: RequestState reached by the most recent build_request call
        failure: Exception that moved the last request to FAILED, if any

    Example:
        >>> orchestrator = CsrOrchestrator(CryptographyKeyProvider())
        >>> pem = orchestrator.build_request(
        ...     CertificateType.SERVER,
        ...     KeyAlgorithm.RSA,
        ...     None,
        ...     SubjectAttributes(common_name="server.example.com"),
        ... )
        >>> pem.splitlines()[0]
        '-----BEGIN NEW CERTIFICATE REQUEST-----'
    """

    def __init__(self, provider: KeySigningProvider) -> None:
        self.provider = provider
        self.state = RequestState.START
        self.failure: Optional[Exception] = None

    def build_request(
        self,
        certificate_type: CertificateType,
        key_algorithm: KeyAlgorithm,
        key_length: Optional[int],
        subject: SubjectAttributes,
        subject_alternate_names: Iterable[str] = (),
        friendly_name: Optional[str] = None,
        description: Optional[str] = None,
        storage_context: Union[StorageContext, str, None] = None,
    ) -> str:
        """Build a certificate request and return it as PEM text.

        Args:
            certificate_type: Certificate profile
            key_algorithm: Key pair algorithm
            key_length: Key length in bits, None for the algorithm default
            subject: Subject fields or a complete subject override
            subject_alternate_names: DNS names (server profile only)
            friendly_name: Optional friendly name attribute
            description: Optional description attribute
            storage_context: Explicit key storage context, None to derive it

        Returns:
            PEM text bounded by NEW CERTIFICATE REQUEST lines

        Raises:
            RequestError: Validation errors from resolution or assembly,
                propagated unchanged
            KeyGenerationFailedError: If the provider cannot create the key
            EncodingFailedError: If the provider cannot encode the request
        """
        self.state = RequestState.START
        self.failure = None
        started = time.monotonic()

        audit: Dict[str, Any] = {
            "certificate_type": certificate_type.value,
            "key_algorithm": key_algorithm.name,
        }

        try:
            profile = resolve_profile(
                certificate_type, key_algorithm, key_length, storage_context
            )
            self.state = RequestState.RESOLVED
            audit["key_length"] = profile.key_length

            assembled = assemble_request(
                profile,
                subject,
                subject_alternate_names,
                friendly_name=friendly_name,
                description=description,
            )
            self.state = RequestState.ASSEMBLED
            audit["subject"] = assembled.distinguished_name

            key_handle = self._generate_key(
                profile.key_algorithm, profile.key_length, profile.storage_context
            )
            self.state = RequestState.KEY_GENERATED

            try:
                try:
                    der = self.provider.encode_request(assembled, key_handle)
                except Exception as e:
                    raise EncodingFailedError(
                        f"Provider failed to encode request: {e}"
                    ) from e
                self.state = RequestState.ENCODED
            finally:
                self._release_key(key_handle)

            pem = der_to_request_pem(der)
            self.state = RequestState.DONE

        except CsrBuilderError as e:
            self._fail(e, audit, started)
            raise

        log_audit_event(
            "CSR_GENERATED",
            {
                **audit,
                "status": "success",
                "san_count": len(assembled.alternate_names),
                "duration": time.monotonic() - started,
            },
        )
        logger.info(
            f"Certificate request generated: type={certificate_type.value}, "
            f"key={key_algorithm.name}-{profile.key_length}"
        )
        return pem

    def _generate_key(
        self,
        key_algorithm: KeyAlgorithm,
        key_length: int,
        storage_context: StorageContext,
    ) -> KeyHandle:
        logger.debug(
            f"Requesting {key_algorithm.name} {key_length}-bit key "
            f"in {storage_context.value} context"
        )
        try:
            return self.provider.generate_key_pair(
                key_algorithm, key_length, storage_context
            )
        except Exception as e:
            raise KeyGenerationFailedError(
                f"Provider failed to generate {key_algorithm.name} "
                f"{key_length}-bit key: {e}"
            ) from e

    def _release_key(self, key_handle: KeyHandle) -> None:
        try:
            self.provider.release_key(key_handle)
        except Exception as e:
            # Releasing must not mask the request outcome
            logger.warning(f"Failed to release key {key_handle.handle_id}: {e}")

    def _fail(self, error: CsrBuilderError, audit: Dict[str, Any], started: float) -> None:
        previous = self.state
        self.state = RequestState.FAILED
        self.failure = error

        kind = error.kind.value if isinstance(error, RequestError) else type(error).__name__
        logger.debug(f"Request failed after state {previous.value}: {kind}")
        log_audit_event(
            "CSR_FAILED",
            {
                **audit,
                "status": "failure",
                "failed_state": previous.value,
                "error_kind": kind,
                "error_message": getattr(error, "detail", str(error)),
                "duration": time.monotonic() - started,
            },
        )


def build_request(
    certificate_type: CertificateType,
    key_algorithm: KeyAlgorithm,
    key_length: Optional[int],
    subject: SubjectAttributes,
    subject_alternate_names: Iterable[str] = (),
    friendly_name: Optional[str] = None,
    description: Optional[str] = None,
    storage_context: Union[StorageContext, str, None] = None,
    provider: Optional[KeySigningProvider] = None,
) -> str:
    """Build a certificate request with a one-off orchestrator.

    Uses CryptographyKeyProvider with default settings when no provider is
    given. See CsrOrchestrator.build_request for arguments and errors.
    """
    if provider is None:
        from ..provider.cryptography_provider import CryptographyKeyProvider

        provider = CryptographyKeyProvider()

    return CsrOrchestrator(provider).build_request(
        certificate_type,
        key_algorithm,
        key_length,
        subject,
        subject_alternate_names,
        friendly_name=friendly_name,
        description=description,
        storage_context=storage_context,
    )
