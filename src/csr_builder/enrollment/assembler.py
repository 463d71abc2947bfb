"""Subject and extension assembly for certificate requests.

Builds the subject distinguished name from user-supplied fields in the fixed
legacy order E, CN, OU, O, L, S, C and carries the profile's extensions,
Subject Alternative Names, friendly name and description into an
AssembledRequest.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..models.request import (
    AssembledRequest,
    CertificateType,
    RequestProfile,
    SubjectAttributes,
)
from ..utils.exceptions import (
    InvalidCountryCodeError,
    MissingCommonNameError,
    MissingEmailAddressError,
    SanNotSupportedForProfileError,
)

logger = logging.getLogger(__name__)

# Characters backslash-escaped in DN values (RFC 4514 section 2.4)
DN_ESCAPED_CHARACTERS = frozenset('\\"+,;<>')


def assemble_request(
    profile: RequestProfile,
    subject: SubjectAttributes,
    subject_alternate_names: Iterable[str] = (),
    friendly_name: Optional[str] = None,
    description: Optional[str] = None,
) -> AssembledRequest:
    """Assemble the subject and extensions of a certificate request.

    Args:
        profile: Resolved request profile
        subject: Subject fields or a complete subject override
        subject_alternate_names: DNS names, kept in the given order
        friendly_name: Optional friendly name, empty means unset
        description: Optional description, empty means unset

    Returns:
        Immutable AssembledRequest

    Raises:
        SanNotSupportedForProfileError: If SANs are given for a non-server
            profile, checked before any subject field
        MissingCommonNameError: If there is no override and no common name
        MissingEmailAddressError: If an S/MIME request has no email address
        InvalidCountryCodeError: If the country is not exactly two characters

    Example:
        >>> profile = resolve_profile(CertificateType.SMIME, KeyAlgorithm.ECC, 256)
        >>> subject = SubjectAttributes(common_name="Joe User",
        ...                             email_address="joe@example.com")
        >>> assemble_request(profile, subject).distinguished_name
        'E=joe@example.com,CN=Joe User'
    """
    alternate_names = tuple(subject_alternate_names)
    if alternate_names and not profile.allows_subject_alternate_names:
        raise SanNotSupportedForProfileError(
            f"Subject Alternative Names are not supported for "
            f"{profile.certificate_type.value} certificates "
            f"({len(alternate_names)} given)"
        )

    override = _clean(subject.subject_name_override)
    if override:
        distinguished_name = subject.subject_name_override
        logger.debug("Using subject name override verbatim")
    else:
        distinguished_name = build_distinguished_name(
            subject, require_email=profile.certificate_type is CertificateType.SMIME
        )

    assembled = AssembledRequest(
        distinguished_name=distinguished_name,
        key_usage=profile.key_usage,
        extended_key_usage=profile.extended_key_usage_oids,
        alternate_names=alternate_names,
        friendly_name=friendly_name or None,
        description=description or None,
    )

    logger.debug(
        f"Assembled request: dn={distinguished_name}, "
        f"san_count={len(alternate_names)}"
    )
    return assembled


def build_distinguished_name(
    subject: SubjectAttributes, require_email: bool = False
) -> str:
    """Build a DN string from subject component fields.

    Present attributes are emitted in the order E, CN, OU, O, L, S, C and
    comma-joined without whitespace. DN special characters in values are
    backslash-escaped.

    Args:
        subject: Subject component fields
        require_email: Whether an email address is mandatory

    Returns:
        Distinguished name string

    Raises:
        MissingCommonNameError: If the common name is empty
        MissingEmailAddressError: If require_email is set and email is empty
        InvalidCountryCodeError: If the country is not exactly two characters
    """
    common_name = _clean(subject.common_name)
    if not common_name:
        raise MissingCommonNameError(
            "A common name is required when no subject name override is given"
        )

    email_address = _clean(subject.email_address)
    if require_email and not email_address:
        raise MissingEmailAddressError(
            "An email address is required for S/MIME certificates"
        )

    country = _clean(subject.country)
    if country and len(country) != 2:
        raise InvalidCountryCodeError(
            f"Country code must be exactly 2 characters, got {country!r}"
        )

    components: List[Tuple[str, Optional[str]]] = [
        ("E", email_address),
        ("CN", common_name),
        ("OU", _clean(subject.organizational_unit)),
        ("O", _clean(subject.organization)),
        ("L", _clean(subject.locality)),
        ("S", _clean(subject.state)),
        ("C", country),
    ]

    return ",".join(
        f"{key}={_escape_value(value)}" for key, value in components if value
    )


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace; blank values become None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _escape_value(value: str) -> str:
    escaped = "".join(
        "\\" + char if char in DN_ESCAPED_CHARACTERS else char for char in value
    )
    if escaped.startswith("#"):
        escaped = "\\" + escaped
    return escaped
