"""Distinguished name string parsing and formatting.

DN strings use RFC 4514 syntax with the legacy short keys
(E=...,CN=...,OU=...,O=...,L=...,S=...,C=...) and are read in written order:
the first component written is the first RDN encoded. Special characters in
values are backslash-escaped; ``+`` joins attributes of a multi-valued RDN.
"""

from typing import Dict

from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from ..utils.exceptions import ValidationError

NAME_ATTRIBUTE_OIDS: Dict[str, ObjectIdentifier] = {
    "CN": NameOID.COMMON_NAME,
    "E": NameOID.EMAIL_ADDRESS,
    "EMAIL": NameOID.EMAIL_ADDRESS,
    "EMAILADDRESS": NameOID.EMAIL_ADDRESS,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "L": NameOID.LOCALITY_NAME,
    "S": NameOID.STATE_OR_PROVINCE_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "C": NameOID.COUNTRY_NAME,
    "DC": NameOID.DOMAIN_COMPONENT,
    "STREET": NameOID.STREET_ADDRESS,
    "T": NameOID.TITLE,
    "TITLE": NameOID.TITLE,
    "G": NameOID.GIVEN_NAME,
    "GN": NameOID.GIVEN_NAME,
    "GIVENNAME": NameOID.GIVEN_NAME,
    "SN": NameOID.SURNAME,
    "SERIALNUMBER": NameOID.SERIAL_NUMBER,
    "UID": NameOID.USER_ID,
}

# Keys are matched as written or in lower case
_PARSE_OVERRIDES: Dict[str, ObjectIdentifier] = {
    alias: oid
    for key, oid in NAME_ATTRIBUTE_OIDS.items()
    for alias in (key, key.lower())
}

# Preferred short key per OID when formatting
NAME_ATTRIBUTE_KEYS: Dict[ObjectIdentifier, str] = {
    NameOID.EMAIL_ADDRESS: "E",
    NameOID.COMMON_NAME: "CN",
    NameOID.ORGANIZATIONAL_UNIT_NAME: "OU",
    NameOID.ORGANIZATION_NAME: "O",
    NameOID.LOCALITY_NAME: "L",
    NameOID.STATE_OR_PROVINCE_NAME: "S",
    NameOID.COUNTRY_NAME: "C",
    NameOID.DOMAIN_COMPONENT: "DC",
    NameOID.STREET_ADDRESS: "STREET",
    NameOID.TITLE: "T",
    NameOID.GIVEN_NAME: "G",
    NameOID.SURNAME: "SN",
    NameOID.SERIAL_NUMBER: "SERIALNUMBER",
    NameOID.USER_ID: "UID",
}


def parse_distinguished_name(dn: str) -> x509.Name:
    """Parse a DN string into a cryptography Name, RDNs in written order.

    Args:
        dn: RFC 4514 distinguished name string (short keys or dotted OIDs)

    Returns:
        x509.Name whose first RDN is the first component written

    Raises:
        ValidationError: If the string is empty, malformed, uses an unknown
            key, or carries an empty or out-of-range value
    """
    if not dn or not dn.strip():
        raise ValidationError("Distinguished name is empty")

    try:
        parsed = x509.Name.from_rfc4514_string(
            dn, attr_name_overrides=_PARSE_OVERRIDES
        )
    except ValueError as e:
        reason = f": {e}" if str(e) else ""
        raise ValidationError(
            f"Malformed distinguished name {dn!r}{reason}. Expected "
            f"comma-separated KEY=value pairs with special characters "
            f"backslash-escaped, using {', '.join(sorted(NAME_ATTRIBUTE_OIDS))} "
            f"or dotted OIDs as keys"
        ) from e

    for attribute in parsed:
        if not attribute.value:
            key = NAME_ATTRIBUTE_KEYS.get(attribute.oid, attribute.oid.dotted_string)
            raise ValidationError(f"Empty value for {key} in {dn!r}")

    # from_rfc4514_string reverses RDNs into encoded order; undo that
    return x509.Name(parsed.rdns[::-1])


def format_name(name: x509.Name) -> str:
    """Format a Name as a DN string in encoded order using short keys."""
    return x509.Name(name.rdns[::-1]).rfc4514_string(NAME_ATTRIBUTE_KEYS)
