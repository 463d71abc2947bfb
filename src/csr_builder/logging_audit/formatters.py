"""Custom log formatters for the CSR builder.

This module provides specialized formatters for logging, including redaction
of personal data that appears in certificate subjects.
"""

import logging
import re
from typing import List, Tuple


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts personal data from log messages.

    S/MIME and client requests carry mailbox addresses and personal names in
    their subject. When enabled, email addresses and the values of the E= and
    CN= distinguished name attributes are replaced before output.

    Attributes:
        redact_pii: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = PIIRedactingFormatter(redact_pii=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # E=joe@example.com, CN=Joe User (quoted or unquoted values)
            (
                re.compile(r'\b(E|CN)=(?:"(?:[^"]|"")*"|[^,|\n]*[^,|\s])'),
                r"\1=[REDACTED]",
            ),
            # Bare email addresses anywhere in the message
            (
                re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
                "[EMAIL-REDACTED]",
            ),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with personal data redacted if enabled
        """
        original = super().format(record)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
