"""Main CLI entry point for the CSR builder.

This module provides the main Click command group for the csr-builder CLI.
"""

from pathlib import Path
from typing import Optional

import click

from csr_builder import __version__
from csr_builder.cli.request_commands import inspect, profile, request
from csr_builder.config import (
    get_logging_config,
    get_operation_logging_config,
    get_provider_config,
    get_request_defaults,
    load_config,
)
from csr_builder.logging_audit import (
    configure_logging,
    configure_operation_logging_from_config,
)
from csr_builder.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="csr-builder")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact subject names and email addresses from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """CSR Builder - PKCS#10 certificate request generator.

    Builds certificate requests for server, client, S/MIME and code signing
    certificates with the key usages each profile requires.

    Common usage:

        # Server request for a web site
        csr-builder request --type server --cn www.example.com --san www.example.com

        # Preview the profile for an S/MIME request
        csr-builder profile --type smime --algorithm ecc

        # Decode an existing request
        csr-builder inspect server.req

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose
    ctx.obj["redact_pii"] = redact_pii
    ctx.obj["log_file"] = log_file

    # Precedence: CLI flags > config file > defaults
    logging_config = get_logging_config(config_obj)
    log_level = "DEBUG" if verbose else logging_config.level
    log_file_path = log_file if log_file else logging_config.log_file
    redact_pii_setting = redact_pii if redact_pii else logging_config.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )
    if not verbose:
        configure_operation_logging_from_config(
            get_operation_logging_config(config_obj)
        )


cli.add_command(request)
cli.add_command(profile)
cli.add_command(inspect)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        csr-builder config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    defaults = get_request_defaults(config_obj)
    provider_config = get_provider_config(config_obj)
    logging_config = get_logging_config(config_obj)
    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")

    click.echo("\nRequest defaults:")
    click.echo(f"  Type:        {defaults.certificate_type}")
    click.echo(f"  Algorithm:   {defaults.key_algorithm}")
    click.echo(f"  Key length:  {defaults.key_length or 'algorithm default'}")
    click.echo(f"  Organization: {defaults.organization or 'Not configured'}")
    click.echo(f"  Country:     {defaults.country or 'Not configured'}")

    click.echo("\nProvider:")
    click.echo(f"  Signature hash: {provider_config.signature_hash}")
    click.echo(f"  Key store:      {provider_config.key_store_dir or 'In memory only'}")
    click.echo(f"  RSA exponent:   {provider_config.public_exponent}")

    click.echo("\nLogging:")
    click.echo(f"  Level:       {logging_config.level}")
    click.echo(f"  Log file:    {logging_config.log_file}")
    click.echo(f"  Redact PII:  {logging_config.redact_pii}")


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"csr-builder version {__version__}")


if __name__ == "__main__":
    cli()
