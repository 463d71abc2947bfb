"""PEM framing for PKCS#10 certificate requests.

Requests are emitted with the legacy NEW CERTIFICATE REQUEST label expected by
CA intake tooling. Both that label and the RFC 7468 CERTIFICATE REQUEST label
are accepted on input.
"""

import base64
import binascii
import re

from ..utils.exceptions import ValidationError

REQUEST_PEM_HEADER = "-----BEGIN NEW CERTIFICATE REQUEST-----"
REQUEST_PEM_FOOTER = "-----END NEW CERTIFICATE REQUEST-----"
PEM_LINE_LENGTH = 64

_PEM_BLOCK = re.compile(
    r"-----BEGIN (NEW )?CERTIFICATE REQUEST-----\s*"
    r"(?P<body>[A-Za-z0-9+/=\s]*?)"
    r"\s*-----END (NEW )?CERTIFICATE REQUEST-----"
)


def der_to_request_pem(der: bytes) -> str:
    """Wrap PKCS#10 DER bytes in NEW CERTIFICATE REQUEST PEM framing.

    Args:
        der: DER-encoded CertificationRequest

    Returns:
        PEM text with 64-column Base64 body and a trailing newline
    """
    body = base64.b64encode(der).decode("ascii")
    lines = [
        body[i : i + PEM_LINE_LENGTH] for i in range(0, len(body), PEM_LINE_LENGTH)
    ]
    return "\n".join([REQUEST_PEM_HEADER, *lines, REQUEST_PEM_FOOTER]) + "\n"


def request_pem_to_der(text: str) -> bytes:
    """Extract PKCS#10 DER bytes from PEM request text.

    Args:
        text: PEM text using either request label

    Returns:
        DER bytes of the first request block

    Raises:
        ValidationError: If no request block is found or the body is not Base64
    """
    match = _PEM_BLOCK.search(text)
    if match is None:
        raise ValidationError(
            "No certificate request PEM block found. Expected "
            f"'{REQUEST_PEM_HEADER}' or '-----BEGIN CERTIFICATE REQUEST-----'"
        )

    body = "".join(match.group("body").split())
    if not body:
        raise ValidationError("Certificate request PEM block is empty")
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Certificate request body is not valid Base64: {e}") from e
