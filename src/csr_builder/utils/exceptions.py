"""Custom exception classes for the CSR builder.

All exceptions inherit from CsrBuilderError to allow catching all custom exceptions.
Request-level failures additionally carry an ErrorKind and a detail string so
callers can react to the failure without parsing messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CsrBuilderError(Exception):
    """Base exception for all CSR builder custom exceptions."""

    pass


class ValidationError(CsrBuilderError):
    """Raised when input data validation fails.

    Examples:
        - Malformed PEM request text
        - Unparseable distinguished name string
    """

    pass


class ConfigurationError(CsrBuilderError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Missing required configuration
        - Invalid configuration file format
        - Configuration value out of range
    """

    pass


class ProviderError(CsrBuilderError):
    """Raised by a Key & Signing Provider when it cannot complete an operation.

    Examples:
        - Unknown key handle
        - Unsupported key algorithm
        - Key store directory not writable
    """

    pass


class ErrorKind(Enum):
    """Kind of request failure.

    Attributes:
        INVALID_KEY_LENGTH: Key length outside the algorithm's allowed set
        MISSING_COMMON_NAME: No subject override and no common name
        MISSING_EMAIL_ADDRESS: S/MIME profile without an email address
        INVALID_COUNTRY_CODE: Country code not exactly 2 characters
        SAN_NOT_SUPPORTED_FOR_PROFILE: SAN list supplied for a non-server profile
        INVALID_STORAGE_CONTEXT: Unrecognized key storage context
        KEY_GENERATION_FAILED: Provider could not create the key pair
        ENCODING_FAILED: Provider could not encode or sign the request
    """

    INVALID_KEY_LENGTH = "InvalidKeyLength"
    MISSING_COMMON_NAME = "MissingCommonName"
    MISSING_EMAIL_ADDRESS = "MissingEmailAddress"
    INVALID_COUNTRY_CODE = "InvalidCountryCode"
    SAN_NOT_SUPPORTED_FOR_PROFILE = "SanNotSupportedForProfile"
    INVALID_STORAGE_CONTEXT = "InvalidStorageContext"
    KEY_GENERATION_FAILED = "KeyGenerationFailed"
    ENCODING_FAILED = "EncodingFailed"


class RequestError(CsrBuilderError):
    """Base exception for failures while building a certificate request.

    Attributes:
        kind: ErrorKind identifying the failure
        detail: Human-readable detail string
    """

    kind: ErrorKind

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"


class InvalidKeyLengthError(RequestError):
    """Raised when the requested key length is not allowed for the algorithm."""

    kind = ErrorKind.INVALID_KEY_LENGTH


class MissingCommonNameError(RequestError):
    """Raised when no subject override and no common name are given."""

    kind = ErrorKind.MISSING_COMMON_NAME


class MissingEmailAddressError(RequestError):
    """Raised when an S/MIME request has no email address."""

    kind = ErrorKind.MISSING_EMAIL_ADDRESS


class InvalidCountryCodeError(RequestError):
    """Raised when the country code is not exactly two characters."""

    kind = ErrorKind.INVALID_COUNTRY_CODE


class SanNotSupportedForProfileError(RequestError):
    """Raised when Subject Alternative Names are given for a non-server profile."""

    kind = ErrorKind.SAN_NOT_SUPPORTED_FOR_PROFILE


class InvalidStorageContextError(RequestError):
    """Raised when the key storage context is not machine or user."""

    kind = ErrorKind.INVALID_STORAGE_CONTEXT


class KeyGenerationFailedError(RequestError):
    """Raised when the provider fails to generate the key pair."""

    kind = ErrorKind.KEY_GENERATION_FAILED


class EncodingFailedError(RequestError):
    """Raised when the provider fails to encode or sign the request."""

    kind = ErrorKind.ENCODING_FAILED


@dataclass
class ErrorInfo:
    """Structured error information for actionable error reporting.

    Attributes:
        kind: ErrorKind for request errors, None for other errors
        error_type: Exception class name (e.g., "InvalidKeyLengthError")
        message: User-friendly error message
        remediation: Actionable guidance for resolving the error
        technical_details: Optional technical details for debugging

    Example:
        >>> error_info = create_error_info(MissingCommonNameError("CN required"))
        >>> error_info.kind
        <ErrorKind.MISSING_COMMON_NAME: 'MissingCommonName'>
    """

    kind: Optional[ErrorKind]
    error_type: str
    message: str
    remediation: str
    technical_details: Optional[str] = None


_REMEDIATION = {
    ErrorKind.INVALID_KEY_LENGTH: (
        "Choose a supported key length: RSA 2048, 4096, 8192 or 16384; "
        "ECC 256, 384 or 521. Omit --key-length to use the algorithm default."
    ),
    ErrorKind.MISSING_COMMON_NAME: (
        "Provide --common-name, or pass a complete distinguished name with --subject."
    ),
    ErrorKind.MISSING_EMAIL_ADDRESS: (
        "S/MIME requests need the mailbox address. Provide --email."
    ),
    ErrorKind.INVALID_COUNTRY_CODE: (
        "Use a two-letter ISO 3166 country code, e.g. US, DE, GB."
    ),
    ErrorKind.SAN_NOT_SUPPORTED_FOR_PROFILE: (
        "Subject Alternative Names are only valid for server certificates. "
        "Drop --san or use --type server."
    ),
    ErrorKind.INVALID_STORAGE_CONTEXT: (
        "Storage context must be 'machine' or 'user'."
    ),
    ErrorKind.KEY_GENERATION_FAILED: (
        "The key provider could not create the key pair. Check the provider "
        "diagnostic above and the key store permissions."
    ),
    ErrorKind.ENCODING_FAILED: (
        "The key provider could not encode the request. Check the subject string "
        "and extension values; the generated key has been discarded."
    ),
}


def create_error_info(exception: Exception) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with remediation guidance

    Example:
        >>> info = create_error_info(InvalidCountryCodeError("'USA' is not 2 characters"))
        >>> print(info.remediation)
        Use a two-letter ISO 3166 country code, e.g. US, DE, GB.
    """
    kind = exception.kind if isinstance(exception, RequestError) else None

    technical_details = None
    if exception.__cause__ is not None:
        cause = exception.__cause__
        technical_details = f"Caused by: {type(cause).__name__}: {cause}"

    return ErrorInfo(
        kind=kind,
        error_type=type(exception).__name__,
        message=str(exception),
        remediation=_generate_remediation(exception),
        technical_details=technical_details,
    )


def _generate_remediation(exception: Exception) -> str:
    """Generate actionable remediation message for an error.

    Args:
        exception: Exception that occurred

    Returns:
        Actionable remediation message
    """
    if isinstance(exception, RequestError):
        return _REMEDIATION[exception.kind]

    if isinstance(exception, ConfigurationError):
        return (
            "Configuration error. Check config.json for missing or invalid values. "
            "Use examples/config.example.json as template."
        )

    if isinstance(exception, ValidationError):
        return (
            "Input could not be parsed. Check that the file is a PEM or DER "
            "PKCS#10 request and that distinguished names use KEY=value pairs."
        )

    return "Review error message and check the log file for complete details."
