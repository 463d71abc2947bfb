"""Unit tests for distinguished name parsing and formatting."""

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from csr_builder.provider.names import format_name, parse_distinguished_name
from csr_builder.utils.exceptions import ValidationError


class TestParseDistinguishedName:
    """Test DN parsing into cryptography Names."""

    def test_written_order_preserved(self):
        """Test RDNs keep the order they were written in."""
        # Act
        name = parse_distinguished_name("E=joe@example.com,CN=Joe User,O=Example,C=US")

        # Assert
        assert [attribute.oid for attribute in name] == [
            NameOID.EMAIL_ADDRESS,
            NameOID.COMMON_NAME,
            NameOID.ORGANIZATION_NAME,
            NameOID.COUNTRY_NAME,
        ]
        assert [attribute.value for attribute in name] == [
            "joe@example.com",
            "Joe User",
            "Example",
            "US",
        ]

    @pytest.mark.parametrize(
        "key,oid",
        [
            ("S", NameOID.STATE_OR_PROVINCE_NAME),
            ("ST", NameOID.STATE_OR_PROVINCE_NAME),
            ("EMAIL", NameOID.EMAIL_ADDRESS),
            ("DC", NameOID.DOMAIN_COMPONENT),
            ("SERIALNUMBER", NameOID.SERIAL_NUMBER),
        ],
    )
    def test_key_aliases(self, key, oid):
        """Test legacy key aliases map to their OIDs."""
        name = parse_distinguished_name(f"CN=x,{key}=value")
        assert list(name)[1].oid == oid

    def test_lower_case_keys(self):
        """Test keys written in lower case are accepted."""
        name = parse_distinguished_name("cn=host,ou=IT,s=IL")
        assert [attribute.oid for attribute in name] == [
            NameOID.COMMON_NAME,
            NameOID.ORGANIZATIONAL_UNIT_NAME,
            NameOID.STATE_OR_PROVINCE_NAME,
        ]

    def test_dotted_oid_keys(self):
        """Test dotted OIDs are accepted as keys."""
        # Act
        name = parse_distinguished_name("2.5.4.3=host,1.2.3.4=custom")

        # Assert
        attributes = list(name)
        assert attributes[0].oid == NameOID.COMMON_NAME
        assert attributes[1].oid == ObjectIdentifier("1.2.3.4")
        assert attributes[1].value == "custom"

    def test_escaped_separator(self):
        """Test a backslash-escaped comma stays in the value."""
        name = parse_distinguished_name(r"CN=Smith\, John,C=US")
        assert [attribute.value for attribute in name] == ["Smith, John", "US"]

    def test_escaped_special_characters(self):
        """Test RFC 4514 escapes for quotes, plus, semicolon and angle brackets."""
        name = parse_distinguished_name(r'O=\"A\" \+ B\; \<C\>')
        assert list(name)[0].value == '"A" + B; <C>'

    def test_multi_valued_rdn(self):
        """Test + joins two attributes into one RDN."""
        # Act
        name = parse_distinguished_name("CN=a+OU=b")

        # Assert
        assert len(name.rdns) == 1
        assert len(name) == 2
        assert {(a.oid, a.value) for a in name.rdns[0]} == {
            (NameOID.COMMON_NAME, "a"),
            (NameOID.ORGANIZATIONAL_UNIT_NAME, "b"),
        }

    def test_multi_valued_rdn_keeps_rdn_order(self):
        """Test a multi-valued RDN sits in its written position."""
        # Act
        name = parse_distinguished_name("E=a@b.com,CN=a+OU=b,C=US")

        # Assert
        assert [len(rdn) for rdn in name.rdns] == [1, 2, 1]
        assert list(name.rdns[0])[0].oid == NameOID.EMAIL_ADDRESS
        assert list(name.rdns[2])[0].oid == NameOID.COUNTRY_NAME

    @pytest.mark.parametrize(
        "dn",
        ["", "   ", "CN", "CN=host,", "=host", "CN=", "O=", 'CN="quoted"',
         "CN=host\\", "no equals sign"],
    )
    def test_malformed(self, dn):
        """Test malformed DN strings raise ValidationError."""
        with pytest.raises(ValidationError):
            parse_distinguished_name(dn)

    def test_unknown_key(self):
        """Test unknown attribute keys are rejected with the supported list."""
        with pytest.raises(ValidationError, match="Malformed distinguished name") as exc_info:
            parse_distinguished_name("CN=host,XYZ=1")

        assert "SERIALNUMBER" in str(exc_info.value)

    def test_invalid_country_value(self):
        """Test cryptography's country length check surfaces as ValidationError."""
        with pytest.raises(ValidationError, match="Malformed distinguished name"):
            parse_distinguished_name("CN=host,C=USA")

    def test_empty_value_named(self):
        """Test an empty value names the offending key."""
        with pytest.raises(ValidationError, match="Empty value for O"):
            parse_distinguished_name("CN=host,O=")


class TestFormatName:
    """Test Name formatting."""

    def test_short_keys_and_order(self):
        """Test formatting uses short keys in encoded order."""
        # Arrange
        name = x509.Name(
            [
                x509.NameAttribute(NameOID.EMAIL_ADDRESS, "joe@example.com"),
                x509.NameAttribute(NameOID.COMMON_NAME, "Joe User"),
                x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, "IL"),
            ]
        )

        # Act & Assert
        assert format_name(name) == "E=joe@example.com,CN=Joe User,S=IL"

    def test_special_characters_escaped(self):
        """Test values with separators are backslash-escaped."""
        name = x509.Name([x509.NameAttribute(NameOID.ORGANIZATION_NAME, 'A, "B"')])
        assert format_name(name) == r'O=A\, \"B\"'

    @pytest.mark.parametrize(
        "dn",
        [
            r"E=a@b.com,CN=host,O=Example\, Inc.,C=US",
            r"CN=The \"Best\" Host,OU=R\+D",
            "CN=a+OU=b,C=US",
        ],
    )
    def test_parse_format_agree(self, dn):
        """Test a formatted name parses back to the same string."""
        assert format_name(parse_distinguished_name(dn)) == dn

    def test_unknown_oid_dotted(self):
        """Test attributes without a short key use the dotted OID."""
        name = x509.Name([x509.NameAttribute(ObjectIdentifier("1.2.3.4"), "x")])
        assert format_name(name) == "1.2.3.4=x"
