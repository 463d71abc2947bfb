"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

import logging
from pathlib import Path
from typing import Generator

import pytest

from csr_builder.models.request import SubjectAttributes
from csr_builder.provider import CryptographyKeyProvider


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def server_subject() -> SubjectAttributes:
    """Subject for a public web server request."""
    return SubjectAttributes(
        common_name="www.example.com",
        organization="Example Corp",
        country="US",
    )


@pytest.fixture
def smime_subject() -> SubjectAttributes:
    """Subject for an S/MIME mailbox request."""
    return SubjectAttributes(
        common_name="Joe User",
        email_address="joe@example.com",
    )


@pytest.fixture
def provider() -> CryptographyKeyProvider:
    """In-memory cryptography provider."""
    return CryptographyKeyProvider()


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Create a temporary configuration file for testing.

    Args:
        tmp_path: Pytest's temporary directory fixture.

    Yields:
        Path: Path to the temporary configuration file.
    """
    config_file = tmp_path / "test_config.json"
    config_file.write_text(
        '{"defaults": {"certificate_type": "client", "key_algorithm": "ecc"}}'
    )
    yield config_file


@pytest.fixture(autouse=True)
def reset_root_logging() -> Generator[None, None, None]:
    """Close handlers added by configure_logging so log files are released."""
    root_logger = logging.getLogger()
    handlers_before = list(root_logger.handlers)
    level_before = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers_before:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level_before)


