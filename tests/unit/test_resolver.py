"""Unit tests for certificate profile resolution."""

import pytest

from csr_builder.enrollment.resolver import (
    CLIENT_AUTH_OID,
    CODE_SIGNING_OID,
    DEFAULT_KEY_LENGTHS,
    EMAIL_PROTECTION_OID,
    KEY_LENGTHS,
    SERVER_AUTH_OID,
    algorithm_name_for,
    default_storage_context,
    parse_storage_context,
    provider_name_for,
    resolve_profile,
)
from csr_builder.models.request import (
    CertificateType,
    KeyAlgorithm,
    KeyUsageFlag,
    StorageContext,
)
from csr_builder.utils.exceptions import (
    ErrorKind,
    InvalidKeyLengthError,
    InvalidStorageContextError,
)


class TestKeyUsageTable:
    """Test Key Usage and Extended Key Usage per certificate type."""

    @pytest.mark.parametrize(
        "certificate_type,flags,critical",
        [
            (CertificateType.SERVER, 0xF0, True),
            (CertificateType.CLIENT, 0xB0, False),
            (CertificateType.SMIME, 0xB0, False),
            (CertificateType.CODE_SIGNING, 0x80, False),
        ],
    )
    def test_key_usage_flags(self, certificate_type, flags, critical):
        """Test each certificate type resolves to its exact Key Usage."""
        # Act
        profile = resolve_profile(certificate_type, KeyAlgorithm.RSA)

        # Assert
        assert profile.key_usage_flags == flags
        assert profile.key_usage.critical is critical

    @pytest.mark.parametrize(
        "certificate_type,oids",
        [
            (CertificateType.SERVER, (SERVER_AUTH_OID,)),
            (CertificateType.CLIENT, (CLIENT_AUTH_OID,)),
            (CertificateType.SMIME, (CLIENT_AUTH_OID, EMAIL_PROTECTION_OID)),
            (CertificateType.CODE_SIGNING, (CODE_SIGNING_OID,)),
        ],
    )
    def test_extended_key_usage_oids(self, certificate_type, oids):
        """Test each certificate type resolves to its ordered EKU list."""
        # Act
        profile = resolve_profile(certificate_type, KeyAlgorithm.ECC)

        # Assert
        assert profile.extended_key_usage_oids == oids

    def test_oid_values(self):
        """Test PKIX purpose OIDs."""
        assert SERVER_AUTH_OID == "1.3.6.1.5.5.7.3.1"
        assert CLIENT_AUTH_OID == "1.3.6.1.5.5.7.3.2"
        assert CODE_SIGNING_OID == "1.3.6.1.5.5.7.3.3"
        assert EMAIL_PROTECTION_OID == "1.3.6.1.5.5.7.3.4"

    def test_smime_lists_client_auth_first(self):
        """Test S/MIME EKU keeps clientAuth before emailProtection."""
        # Act
        profile = resolve_profile(CertificateType.SMIME, KeyAlgorithm.RSA)

        # Assert
        assert profile.extended_key_usage_oids[0] == CLIENT_AUTH_OID
        assert profile.extended_key_usage_oids[1] == EMAIL_PROTECTION_OID

    def test_server_flags_by_name(self):
        """Test server Key Usage is the four expected bits."""
        # Act
        profile = resolve_profile(CertificateType.SERVER, KeyAlgorithm.RSA)

        # Assert
        assert profile.key_usage.flags == (
            KeyUsageFlag.DIGITAL_SIGNATURE
            | KeyUsageFlag.NON_REPUDIATION
            | KeyUsageFlag.KEY_ENCIPHERMENT
            | KeyUsageFlag.DATA_ENCIPHERMENT
        )

    @pytest.mark.parametrize("certificate_type", list(CertificateType))
    def test_only_server_allows_alternate_names(self, certificate_type):
        """Test SAN permission is granted to the server profile only."""
        # Act
        profile = resolve_profile(certificate_type, KeyAlgorithm.RSA)

        # Assert
        expected = certificate_type is CertificateType.SERVER
        assert profile.allows_subject_alternate_names is expected


class TestKeyLengthResolution:
    """Test key length defaults and validation."""

    @pytest.mark.parametrize(
        "key_algorithm,key_length",
        [(KeyAlgorithm.RSA, length) for length in (2048, 4096, 8192, 16384)]
        + [(KeyAlgorithm.ECC, length) for length in (256, 384, 521)],
    )
    def test_allowed_lengths_accepted(self, key_algorithm, key_length):
        """Test every allowed length resolves unchanged."""
        # Act
        profile = resolve_profile(CertificateType.CLIENT, key_algorithm, key_length)

        # Assert
        assert profile.key_length == key_length

    @pytest.mark.parametrize(
        "key_algorithm,key_length",
        [
            (KeyAlgorithm.RSA, 1024),
            (KeyAlgorithm.RSA, 3072),
            (KeyAlgorithm.RSA, 256),
            (KeyAlgorithm.RSA, 0),
            (KeyAlgorithm.ECC, 2048),
            (KeyAlgorithm.ECC, 224),
            (KeyAlgorithm.ECC, 512),
            (KeyAlgorithm.ECC, -1),
        ],
    )
    def test_disallowed_lengths_rejected(self, key_algorithm, key_length):
        """Test lengths outside the algorithm's set raise InvalidKeyLength."""
        # Act & Assert
        with pytest.raises(InvalidKeyLengthError) as exc_info:
            resolve_profile(CertificateType.SERVER, key_algorithm, key_length)

        assert exc_info.value.kind is ErrorKind.INVALID_KEY_LENGTH
        assert str(key_length) in exc_info.value.detail

    def test_default_rsa_length(self):
        """Test RSA defaults to 2048 bits."""
        # Act
        profile = resolve_profile(CertificateType.SERVER, KeyAlgorithm.RSA, None)

        # Assert
        assert profile.key_length == 2048

    def test_default_ecc_length(self):
        """Test ECC defaults to 256 bits."""
        # Act
        profile = resolve_profile(CertificateType.SMIME, KeyAlgorithm.ECC)

        # Assert
        assert profile.key_length == 256

    def test_defaults_are_allowed(self):
        """Test each default length is itself an allowed length."""
        for key_algorithm, default in DEFAULT_KEY_LENGTHS.items():
            assert default in KEY_LENGTHS[key_algorithm]

    def test_error_message_lists_allowed_values(self):
        """Test the error detail names the allowed lengths."""
        # Act & Assert
        with pytest.raises(InvalidKeyLengthError) as exc_info:
            resolve_profile(CertificateType.SERVER, KeyAlgorithm.ECC, 1024)

        assert "256, 384, 521" in str(exc_info.value)
        assert str(exc_info.value).startswith("InvalidKeyLength: ")


class TestProfileResolution:
    """Test complete profile resolution."""

    def test_server_rsa_default_profile(self):
        """Test Server/RSA/unset resolves to 2048-bit, 0xF0 critical, serverAuth."""
        # Act
        profile = resolve_profile(CertificateType.SERVER, KeyAlgorithm.RSA, None)

        # Assert
        assert profile.certificate_type is CertificateType.SERVER
        assert profile.key_algorithm is KeyAlgorithm.RSA
        assert profile.key_length == 2048
        assert profile.key_usage_flags == 0xF0
        assert profile.key_usage.critical is True
        assert profile.extended_key_usage_oids == ("1.3.6.1.5.5.7.3.1",)
        assert profile.allows_subject_alternate_names is True
        assert profile.storage_context is StorageContext.MACHINE

    @pytest.mark.parametrize("certificate_type", list(CertificateType))
    @pytest.mark.parametrize("key_algorithm", list(KeyAlgorithm))
    def test_resolution_is_idempotent(self, certificate_type, key_algorithm):
        """Test resolving equal inputs twice yields equal profiles."""
        # Act
        first = resolve_profile(certificate_type, key_algorithm)
        second = resolve_profile(certificate_type, key_algorithm)

        # Assert
        assert first == second

    def test_profile_is_immutable(self):
        """Test resolved profiles cannot be modified."""
        # Arrange
        profile = resolve_profile(CertificateType.CLIENT, KeyAlgorithm.RSA)

        # Act & Assert
        with pytest.raises(AttributeError):
            profile.key_length = 4096


class TestStorageContext:
    """Test key storage context selection."""

    @pytest.mark.parametrize(
        "certificate_type,expected",
        [
            (CertificateType.SERVER, StorageContext.MACHINE),
            (CertificateType.CLIENT, StorageContext.USER),
            (CertificateType.SMIME, StorageContext.USER),
            (CertificateType.CODE_SIGNING, StorageContext.USER),
        ],
    )
    def test_default_context_by_type(self, certificate_type, expected):
        """Test server keys are machine-wide and all others per-user."""
        assert default_storage_context(certificate_type) is expected
        assert resolve_profile(certificate_type, KeyAlgorithm.RSA).storage_context is expected

    def test_explicit_context_overrides_default(self):
        """Test an explicit storage context wins over the type default."""
        # Act
        profile = resolve_profile(
            CertificateType.SERVER, KeyAlgorithm.RSA, None, StorageContext.USER
        )

        # Assert
        assert profile.storage_context is StorageContext.USER

    @pytest.mark.parametrize("value", ["machine", "MACHINE", " Machine "])
    def test_parse_machine_case_insensitive(self, value):
        """Test storage context strings are matched case-insensitively."""
        assert parse_storage_context(value) is StorageContext.MACHINE

    def test_parse_user(self):
        """Test 'user' parses to USER."""
        assert parse_storage_context("user") is StorageContext.USER

    @pytest.mark.parametrize("value", ["", "system", "localmachine", "users"])
    def test_unrecognized_context_rejected(self, value):
        """Test unrecognized storage contexts raise InvalidStorageContext."""
        # Act & Assert
        with pytest.raises(InvalidStorageContextError) as exc_info:
            resolve_profile(CertificateType.CLIENT, KeyAlgorithm.RSA, None, value)

        assert exc_info.value.kind is ErrorKind.INVALID_STORAGE_CONTEXT


class TestProviderNames:
    """Test provider and algorithm name lookups."""

    def test_provider_name_for_rsa(self):
        """Test RSA keys use the SChannel provider."""
        assert provider_name_for(KeyAlgorithm.RSA) == (
            "Microsoft RSA SChannel Cryptographic Provider"
        )

    def test_provider_name_for_ecc(self):
        """Test ECC keys use the software key storage provider."""
        assert provider_name_for(KeyAlgorithm.ECC) == (
            "Microsoft Software Key Storage Provider"
        )

    @pytest.mark.parametrize(
        "key_length,expected",
        [(256, "ECDSA_P256"), (384, "ECDSA_P384"), (521, "ECDSA_P521")],
    )
    def test_ecc_algorithm_names(self, key_length, expected):
        """Test ECC algorithm names follow the curve size."""
        # Arrange
        profile = resolve_profile(CertificateType.SMIME, KeyAlgorithm.ECC, key_length)

        # Act & Assert
        assert algorithm_name_for(profile) == expected

    def test_rsa_algorithm_name(self):
        """Test RSA algorithm name."""
        profile = resolve_profile(CertificateType.SERVER, KeyAlgorithm.RSA, 4096)
        assert algorithm_name_for(profile) == "RSA"
