"""Unit tests for logging_audit module."""

import logging

import pytest

from csr_builder.config import OperationLoggingConfig
from csr_builder.logging_audit import (
    PIIRedactingFormatter,
    configure_logging,
    configure_operation_logging,
    configure_operation_logging_from_config,
    get_logger,
    get_operation_logger,
    log_audit_event,
)
from csr_builder.logging_audit.logger import OPERATION_LOGGERS


@pytest.fixture
def restore_operation_levels():
    """Restore stage logger levels changed by a test."""
    levels = {name: logging.getLogger(name).level for name in OPERATION_LOGGERS.values()}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)


class TestConfigureLogging:
    """Test logging configuration."""

    def test_configure_logging_creates_file(self, tmp_path):
        """Test logging configuration creates log file."""
        # Arrange
        log_file = tmp_path / "test.log"

        # Act
        configure_logging(level="INFO", log_file=log_file, redact_pii=False)
        get_logger(__name__).info("Test message")

        # Assert
        assert log_file.exists()
        assert "Test message" in log_file.read_text()

    def test_configure_logging_sets_console_level(self, tmp_path):
        """Test console handler uses specified log level."""
        # Act
        configure_logging(level="WARNING", log_file=tmp_path / "test.log")

        # Assert
        root_logger = logging.getLogger()
        console_handlers = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler) and not hasattr(h, "baseFilename")
        ]
        assert console_handlers[-1].level == logging.WARNING

    def test_configure_logging_file_level_debug(self, tmp_path):
        """Test file handler always uses DEBUG level."""
        # Arrange
        log_file = tmp_path / "test.log"

        # Act
        configure_logging(level="ERROR", log_file=log_file)
        get_logger(__name__).debug("Debug message")

        # Assert
        assert "Debug message" in log_file.read_text()

    def test_configure_logging_creates_directory(self, tmp_path):
        """Test logging creates parent directories if needed."""
        # Arrange
        log_file = tmp_path / "nested" / "dir" / "test.log"

        # Act
        configure_logging(level="INFO", log_file=log_file)
        get_logger(__name__).info("Test message")

        # Assert
        assert log_file.exists()

    def test_configure_logging_invalid_level_raises_error(self, tmp_path):
        """Test invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", log_file=tmp_path / "test.log")

    def test_configure_logging_environment_variable(self, tmp_path, monkeypatch):
        """Test CSR_BUILDER_LOG_FILE environment variable overrides default."""
        # Arrange
        env_log_file = tmp_path / "env.log"
        monkeypatch.setenv("CSR_BUILDER_LOG_FILE", str(env_log_file))

        # Act
        configure_logging(level="INFO")
        get_logger(__name__).info("From env")

        # Assert
        assert "From env" in env_log_file.read_text()

    def test_reconfigure_does_not_duplicate_handlers(self, tmp_path):
        """Test repeated configuration replaces handlers."""
        # Act
        configure_logging(level="INFO", log_file=tmp_path / "a.log")
        count = len(logging.getLogger().handlers)
        configure_logging(level="INFO", log_file=tmp_path / "b.log")

        # Assert
        assert len(logging.getLogger().handlers) == count


class TestPIIRedaction:
    """Test subject redaction."""

    def test_redacts_distinguished_name_values(self):
        """Test E= and CN= values are redacted."""
        # Arrange
        formatter = PIIRedactingFormatter(fmt="%(message)s", redact_pii=True)

        # Act
        output = formatter.format(_record("dn=E=joe@example.com,CN=Joe User,O=Example"))

        # Assert
        assert "joe@example.com" not in output
        assert "Joe User" not in output
        assert "CN=[REDACTED]" in output
        assert "O=Example" in output

    def test_redacts_quoted_common_name(self):
        """Test quoted CN values are redacted whole."""
        formatter = PIIRedactingFormatter(fmt="%(message)s", redact_pii=True)

        output = formatter.format(_record('subject=CN="Smith, John",C=US'))

        assert output == "subject=CN=[REDACTED],C=US"

    def test_redacts_bare_email(self):
        """Test email addresses outside a DN are redacted."""
        formatter = PIIRedactingFormatter(fmt="%(message)s", redact_pii=True)

        output = formatter.format(_record("mailbox jane.doe@example.org requested"))

        assert output == "mailbox [EMAIL-REDACTED] requested"

    def test_no_redaction_when_disabled(self):
        """Test messages pass through unchanged by default."""
        formatter = PIIRedactingFormatter(fmt="%(message)s")

        output = formatter.format(_record("CN=Joe User"))

        assert output == "CN=Joe User"


class TestOperationLogging:
    """Test per-stage logger configuration."""

    def test_get_operation_logger(self):
        """Test stage names map to module loggers."""
        assert get_operation_logger("resolver").name == "csr_builder.enrollment.resolver"
        assert get_operation_logger("provider").name == "csr_builder.provider"

    def test_unknown_operation(self):
        """Test unknown stage names are rejected."""
        with pytest.raises(ValueError, match="Unknown operation"):
            get_operation_logger("transport")

    def test_configure_levels(self, restore_operation_levels):
        """Test stage levels are applied."""
        # Act
        configure_operation_logging(
            resolver_log_level="DEBUG", provider_log_level="ERROR"
        )

        # Assert
        assert get_operation_logger("resolver").level == logging.DEBUG
        assert get_operation_logger("assembler").level == logging.INFO
        assert get_operation_logger("provider").level == logging.ERROR

    def test_invalid_stage_level(self, restore_operation_levels):
        """Test invalid stage levels raise ValueError."""
        with pytest.raises(ValueError, match="Invalid log level for orchestrator"):
            configure_operation_logging(orchestrator_log_level="LOUD")

    def test_configure_from_config(self, restore_operation_levels):
        """Test levels come from an OperationLoggingConfig."""
        # Arrange
        config = OperationLoggingConfig(orchestrator_log_level="WARNING")

        # Act
        configure_operation_logging_from_config(config)

        # Assert
        assert get_operation_logger("orchestrator").level == logging.WARNING


class TestAuditEvents:
    """Test audit trail events."""

    def test_success_event_format(self, caplog):
        """Test audit fields are ordered and the level is INFO."""
        # Arrange
        caplog.set_level(logging.INFO)

        # Act
        log_audit_event(
            "CSR_GENERATED",
            {
                "key_length": 2048,
                "status": "success",
                "certificate_type": "server",
                "duration": 0.1234,
                "correlation_id": "abc",
                "san_count": 2,
            },
        )

        # Assert
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == (
            "AUDIT [CSR_GENERATED] | status=success | certificate_type=server | "
            "key_length=2048 | duration=0.12s | correlation_id=abc | san_count=2"
        )

    def test_failure_event_logged_as_error(self, caplog):
        """Test failure events use ERROR level."""
        caplog.set_level(logging.INFO)

        log_audit_event("CSR_FAILED", {"status": "failure", "error_kind": "MissingCommonName"})

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert "error_kind=MissingCommonName" in record.getMessage()
        assert "correlation_id=" in record.getMessage()

    def test_details_not_mutated(self, caplog):
        """Test the caller's dict is left unchanged."""
        details = {"status": "success"}

        log_audit_event("CSR_GENERATED", details)

        assert details == {"status": "success"}
