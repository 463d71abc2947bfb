"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _validate_level(v: str) -> str:
    v_upper = v.upper()
    if v_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )
    return v_upper


class RequestDefaultsConfig(BaseModel):
    """Default values applied to requests when the CLI leaves them unset.

    Attributes:
        certificate_type: Default certificate profile
        key_algorithm: Default key algorithm
        key_length: Default key length, None for the algorithm default
        organization: Default O attribute
        organizational_unit: Default OU attribute
        locality: Default L attribute
        state: Default S attribute
        country: Default C attribute (two characters)
    """

    certificate_type: str = Field(
        default="server",
        description="Certificate profile: server, client, smime, code-signing"
    )
    key_algorithm: str = Field(
        default="rsa",
        description="Key algorithm: rsa or ecc"
    )
    key_length: Optional[int] = Field(
        default=None,
        ge=1,
        description="Key length in bits; unset uses the algorithm default"
    )
    organization: Optional[str] = None
    organizational_unit: Optional[str] = None
    locality: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    @field_validator("certificate_type")
    @classmethod
    def validate_certificate_type(cls, v: str) -> str:
        """Validate certificate profile name.

        Raises:
            ValueError: If the profile is not recognized
        """
        valid_types = ["server", "client", "smime", "code-signing"]
        v_lower = v.lower()
        if v_lower not in valid_types:
            raise ValueError(
                f"Invalid certificate_type: {v}. Must be one of: {', '.join(valid_types)}"
            )
        return v_lower

    @field_validator("key_algorithm")
    @classmethod
    def validate_key_algorithm(cls, v: str) -> str:
        """Validate key algorithm name.

        Raises:
            ValueError: If the algorithm is not rsa or ecc
        """
        v_lower = v.lower()
        if v_lower not in ("rsa", "ecc"):
            raise ValueError(f"Invalid key_algorithm: {v}. Must be one of: rsa, ecc")
        return v_lower

    @field_validator("country")
    @classmethod
    def validate_country(cls, v: Optional[str]) -> Optional[str]:
        """Validate default country code is two characters."""
        if v is not None and len(v) != 2:
            raise ValueError(f"Invalid country: {v}. Must be exactly 2 characters")
        return v


class ProviderConfig(BaseModel):
    """Configuration for the cryptography key provider.

    Attributes:
        signature_hash: Hash algorithm used to sign requests
        key_store_dir: Directory receiving generated private keys, unset to keep
            keys in memory only
        public_exponent: RSA public exponent
    """

    signature_hash: str = Field(
        default="sha256",
        description="Signature hash: sha256, sha384, sha512"
    )
    key_store_dir: Optional[Path] = Field(
        default=None,
        description="Directory for generated private keys"
    )
    public_exponent: int = Field(
        default=65537,
        description="RSA public exponent: 3 or 65537"
    )

    @field_validator("signature_hash")
    @classmethod
    def validate_signature_hash(cls, v: str) -> str:
        """Validate signature hash name.

        Raises:
            ValueError: If the hash is not supported
        """
        valid_hashes = ["sha256", "sha384", "sha512"]
        v_lower = v.lower()
        if v_lower not in valid_hashes:
            raise ValueError(
                f"Invalid signature_hash: {v}. Must be one of: {', '.join(valid_hashes)}"
            )
        return v_lower

    @field_validator("public_exponent")
    @classmethod
    def validate_public_exponent(cls, v: int) -> int:
        """Validate RSA public exponent."""
        if v not in (3, 65537):
            raise ValueError(f"Invalid public_exponent: {v}. Must be 3 or 65537")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact subject names and emails from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/csr-builder.log"),
        description="Log file path"
    )
    redact_pii: bool = Field(
        default=False,
        description="Redact subject names and emails from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        return _validate_level(v)


class OperationLoggingConfig(BaseModel):
    """Per-stage log levels for the request pipeline.

    Attributes:
        resolver_log_level: Log level for profile resolution
        assembler_log_level: Log level for subject and extension assembly
        orchestrator_log_level: Log level for request orchestration
        provider_log_level: Log level for key provider operations
    """

    resolver_log_level: str = Field(default="INFO")
    assembler_log_level: str = Field(default="INFO")
    orchestrator_log_level: str = Field(default="INFO")
    provider_log_level: str = Field(default="WARNING")

    @field_validator(
        "resolver_log_level",
        "assembler_log_level",
        "orchestrator_log_level",
        "provider_log_level",
    )
    @classmethod
    def validate_operation_log_level(cls, v: str) -> str:
        """Validate and normalize a stage log level."""
        return _validate_level(v)


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        defaults: Request defaults
        provider: Key provider settings
        logging: Logging configuration
        operation_logging: Per-stage logging configuration

    Example:
        >>> config = Config(defaults=RequestDefaultsConfig(key_algorithm="ecc"))
        >>> config.defaults.key_algorithm
        'ecc'
        >>> config.provider.signature_hash
        'sha256'
    """

    defaults: RequestDefaultsConfig = RequestDefaultsConfig()
    provider: ProviderConfig = ProviderConfig()
    logging: LoggingConfig = LoggingConfig()
    operation_logging: OperationLoggingConfig = OperationLoggingConfig()
