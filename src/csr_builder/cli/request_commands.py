"""Certificate request CLI commands.

This module provides CLI commands for building and examining requests:
- request: Generate a key pair and a PKCS#10 request
- profile: Show the resolved profile without generating a key
- inspect: Decode an existing request
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional, Tuple

import click

from csr_builder.config import Config, get_provider_config, get_request_defaults
from csr_builder.enrollment import (
    CsrOrchestrator,
    algorithm_name_for,
    get_request_info,
    load_request,
    provider_name_for,
    resolve_profile,
)
from csr_builder.enrollment.resolver import (
    CLIENT_AUTH_OID,
    CODE_SIGNING_OID,
    EMAIL_PROTECTION_OID,
    SERVER_AUTH_OID,
)
from csr_builder.models.request import (
    CertificateType,
    KeyAlgorithm,
    KeyUsageFlag,
    SubjectAttributes,
)
from csr_builder.provider import CryptographyKeyProvider
from csr_builder.utils.exceptions import CsrBuilderError, create_error_info

logger = logging.getLogger(__name__)

EKU_NAMES = {
    SERVER_AUTH_OID: "serverAuth",
    CLIENT_AUTH_OID: "clientAuth",
    CODE_SIGNING_OID: "codeSigning",
    EMAIL_PROTECTION_OID: "emailProtection",
}

# RFC 5280 bit order
KEY_USAGE_NAMES = [
    (KeyUsageFlag.DIGITAL_SIGNATURE, "digitalSignature"),
    (KeyUsageFlag.NON_REPUDIATION, "nonRepudiation"),
    (KeyUsageFlag.KEY_ENCIPHERMENT, "keyEncipherment"),
    (KeyUsageFlag.DATA_ENCIPHERMENT, "dataEncipherment"),
    (KeyUsageFlag.KEY_AGREEMENT, "keyAgreement"),
    (KeyUsageFlag.KEY_CERT_SIGN, "keyCertSign"),
    (KeyUsageFlag.CRL_SIGN, "cRLSign"),
    (KeyUsageFlag.ENCIPHER_ONLY, "encipherOnly"),
    (KeyUsageFlag.DECIPHER_ONLY, "decipherOnly"),
]

CERTIFICATE_TYPE_CHOICE = click.Choice(
    [certificate_type.value for certificate_type in CertificateType],
    case_sensitive=False,
)
KEY_ALGORITHM_CHOICE = click.Choice(
    [algorithm.value for algorithm in KeyAlgorithm], case_sensitive=False
)


def _get_config(ctx: click.Context) -> Config:
    if ctx.obj and "config" in ctx.obj:
        return ctx.obj["config"]
    return Config()


def _fail(error: CsrBuilderError) -> None:
    """Print an error with remediation and exit with status 1."""
    info = create_error_info(error)
    click.echo(click.style("✗", fg="red", bold=True) + f" {info.message}", err=True)
    if info.technical_details:
        click.echo(f"  {info.technical_details}", err=True)
    click.echo(f"\nFix: {info.remediation}", err=True)
    raise click.exceptions.Exit(1)


def _describe_key_usage(flags: int) -> str:
    names = [name for flag, name in KEY_USAGE_NAMES if flags & flag]
    return f"0x{flags:02X} ({', '.join(names) or 'none'})"


@click.command(name="request")
@click.option("--type", "certificate_type", type=CERTIFICATE_TYPE_CHOICE, default=None,
              help="Certificate profile (default from config: server)")
@click.option("--algorithm", "key_algorithm", type=KEY_ALGORITHM_CHOICE, default=None,
              help="Key algorithm (default from config: rsa)")
@click.option("--key-length", type=int, default=None,
              help="Key length in bits (RSA 2048-16384, ECC 256/384/521)")
@click.option("--common-name", "--cn", "common_name", type=str, help="Subject CN")
@click.option("--email", "email_address", type=str,
              help="Subject E (required for smime)")
@click.option("--ou", "organizational_unit", type=str, help="Subject OU")
@click.option("--org", "organization", type=str, help="Subject O")
@click.option("--locality", type=str, help="Subject L")
@click.option("--state", type=str, help="Subject S")
@click.option("--country", type=str, help="Subject C (two letters)")
@click.option("--subject", "subject_name_override", type=str,
              help="Complete subject DN; overrides the individual subject options")
@click.option("--san", "subject_alternate_names", multiple=True,
              help="DNS Subject Alternative Name (repeatable, server only)")
@click.option("--friendly-name", type=str, help="Friendly name attribute")
@click.option("--description", type=str, help="Description attribute")
@click.option("--storage-context", type=str, default=None,
              help="Key storage context: machine or user (default by type)")
@click.option("--key-store-dir", type=click.Path(file_okay=False, path_type=Path),
              default=None, help="Directory to write the generated private key")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Write the request to a file instead of stdout")
@click.pass_context
def request(
    ctx: click.Context,
    certificate_type: Optional[str],
    key_algorithm: Optional[str],
    key_length: Optional[int],
    common_name: Optional[str],
    email_address: Optional[str],
    organizational_unit: Optional[str],
    organization: Optional[str],
    locality: Optional[str],
    state: Optional[str],
    country: Optional[str],
    subject_name_override: Optional[str],
    subject_alternate_names: Tuple[str, ...],
    friendly_name: Optional[str],
    description: Optional[str],
    storage_context: Optional[str],
    key_store_dir: Optional[Path],
    output: Optional[Path],
) -> None:
    """Generate a key pair and a PKCS#10 certificate request.

    The request is printed as NEW CERTIFICATE REQUEST PEM text.

    Examples:

        # Server certificate with two DNS names
        csr-builder request --type server --cn www.example.com \\
            --san www.example.com --san example.com --org "Example Corp" --country US

        # S/MIME certificate with a P-384 key
        csr-builder request --type smime --algorithm ecc --key-length 384 \\
            --cn "Joe User" --email joe@example.com --output joe.req
    """
    config = _get_config(ctx)
    defaults = get_request_defaults(config)
    provider_config = get_provider_config(config)

    cert_type = CertificateType(
        (certificate_type or defaults.certificate_type).lower()
    )
    algorithm = KeyAlgorithm((key_algorithm or defaults.key_algorithm).lower())
    if key_length is None and key_algorithm is None:
        key_length = defaults.key_length

    subject = SubjectAttributes(
        subject_name_override=subject_name_override,
        common_name=common_name,
        email_address=email_address,
        organizational_unit=organizational_unit or defaults.organizational_unit,
        organization=organization or defaults.organization,
        locality=locality or defaults.locality,
        state=state or defaults.state,
        country=country or defaults.country,
    )

    provider = CryptographyKeyProvider(
        signature_hash=provider_config.signature_hash,
        key_store_dir=key_store_dir or provider_config.key_store_dir,
        public_exponent=provider_config.public_exponent,
    )

    logger.info(
        f"Building {cert_type.value} request with {algorithm.name} key"
    )

    try:
        pem = CsrOrchestrator(provider).build_request(
            cert_type,
            algorithm,
            key_length,
            subject,
            subject_alternate_names,
            friendly_name=friendly_name,
            description=description,
            storage_context=storage_context,
        )
    except CsrBuilderError as e:
        _fail(e)
        return

    if output:
        try:
            output.write_text(pem, encoding="ascii")
        except OSError as e:
            click.echo(f"Failed to write {output}: {e}", err=True)
            raise click.exceptions.Exit(1)
        click.echo(
            click.style("✓", fg="green", bold=True)
            + f" Certificate request written to {output}"
        )
    else:
        click.echo(pem, nl=False)


@click.command(name="profile")
@click.option("--type", "certificate_type", type=CERTIFICATE_TYPE_CHOICE,
              default="server", show_default=True, help="Certificate profile")
@click.option("--algorithm", "key_algorithm", type=KEY_ALGORITHM_CHOICE,
              default="rsa", show_default=True, help="Key algorithm")
@click.option("--key-length", type=int, default=None, help="Key length in bits")
@click.option("--storage-context", type=str, default=None,
              help="Key storage context: machine or user")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default="text", show_default=True, help="Output format")
def profile(
    certificate_type: str,
    key_algorithm: str,
    key_length: Optional[int],
    storage_context: Optional[str],
    output_format: str,
) -> None:
    """Show the resolved request profile without generating a key.

    Example:

        csr-builder profile --type smime --algorithm ecc
    """
    try:
        resolved = resolve_profile(
            CertificateType(certificate_type.lower()),
            KeyAlgorithm(key_algorithm.lower()),
            key_length,
            storage_context,
        )
    except CsrBuilderError as e:
        _fail(e)
        return

    if output_format == "json":
        click.echo(json.dumps({
            "certificate_type": resolved.certificate_type.value,
            "key_algorithm": resolved.key_algorithm.value,
            "key_length": resolved.key_length,
            "key_usage": resolved.key_usage_flags,
            "key_usage_critical": resolved.key_usage.critical,
            "extended_key_usage": list(resolved.extended_key_usage_oids),
            "allows_subject_alternate_names": resolved.allows_subject_alternate_names,
            "storage_context": resolved.storage_context.value,
            "provider_name": provider_name_for(resolved.key_algorithm),
            "algorithm_name": algorithm_name_for(resolved),
        }, indent=2))
        return

    click.echo(f"Certificate type: {resolved.certificate_type.value}")
    click.echo(f"Key:              {algorithm_name_for(resolved)} {resolved.key_length} bits")
    click.echo(f"Provider:         {provider_name_for(resolved.key_algorithm)}")
    click.echo(f"Storage context:  {resolved.storage_context.value}")
    critical = "critical" if resolved.key_usage.critical else "non-critical"
    click.echo(
        f"Key usage:        {_describe_key_usage(resolved.key_usage_flags)}, {critical}"
    )
    click.echo("Extended usage:")
    for oid in resolved.extended_key_usage_oids:
        click.echo(f"  {oid} ({EKU_NAMES.get(oid, 'unknown')})")
    allowed = "yes" if resolved.allows_subject_alternate_names else "no"
    click.echo(f"SAN allowed:      {allowed}")


@click.command(name="inspect")
@click.argument("csr_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default="text", show_default=True, help="Output format")
def inspect(csr_file: Path, output_format: str) -> None:
    """Decode a PEM or DER certificate request and display its contents.

    Example:

        csr-builder inspect server.req
    """
    try:
        info = get_request_info(load_request(csr_file))
    except CsrBuilderError as e:
        _fail(e)
        return

    if output_format == "json":
        data = asdict(info)
        data["key_algorithm"] = info.key_algorithm.value
        data["key_usage"] = (
            {"flags": int(info.key_usage.flags), "critical": info.key_usage.critical}
            if info.key_usage
            else None
        )
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Subject:          {info.subject}")
    click.echo(f"Key:              {info.key_algorithm.name} {info.key_size} bits")
    if info.key_usage:
        critical = "critical" if info.key_usage.critical else "non-critical"
        click.echo(
            f"Key usage:        {_describe_key_usage(int(info.key_usage.flags))}, {critical}"
        )
    if info.extended_key_usage:
        click.echo("Extended usage:")
        for oid in info.extended_key_usage:
            click.echo(f"  {oid} ({EKU_NAMES.get(oid, 'unknown')})")
    if info.alternate_names:
        click.echo(f"DNS names:        {', '.join(info.alternate_names)}")
    if info.friendly_name:
        click.echo(f"Friendly name:    {info.friendly_name}")
    if info.description:
        click.echo(f"Description:      {info.description}")
    signature = (
        click.style("valid", fg="green") if info.signature_valid
        else click.style("INVALID", fg="red")
    )
    click.echo(f"Signature:        {signature}")
