"""Allow running the CLI with ``python -m csr_builder``."""

from csr_builder.cli.main import cli

if __name__ == "__main__":
    cli()
