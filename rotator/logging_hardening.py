"""Logging Setup and Redaction.

This module provides filters that keep admin credentials and SEMP request
bodies out of application logs. The manual-recovery record written when a
rotated password could not be stored is deliberately left intact: it is the
only place an operator can learn what the device now holds.
"""
import logging
import re

SECRET_PATTERNS = [
    (re.compile(r'(<password>).*?(</password>)', re.DOTALL), r'\1[REDACTED]\2'),
    (re.compile(r'("admin_password":\s*")[^"]*(")'), r'\1[REDACTED]\2'),
    (re.compile(r'("password":\s*")[^"]*(")'), r'\1[REDACTED]\2'),
    (re.compile(r'(Authorization:\s*Basic\s+)[A-Za-z0-9+/=]+', re.IGNORECASE), r'\1[REDACTED]'),
]


def redact(text: str) -> str:
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Filter that redacts secret-like patterns from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)

        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger and attach the redaction filter."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root_logger.setLevel(level.upper())

    redact_filter = SecretRedactionFilter()

    # Remove existing filters if any (to avoid duplicates)
    for f in root_logger.filters[:]:
        if isinstance(f, SecretRedactionFilter):
            root_logger.removeFilter(f)
    root_logger.addFilter(redact_filter)

    # Records propagated from child loggers skip the root logger's filters
    # but still pass through its handlers.
    for handler in root_logger.handlers:
        for f in handler.filters[:]:
            if isinstance(f, SecretRedactionFilter):
                handler.removeFilter(f)
        handler.addFilter(redact_filter)

    logging.info("Logging redaction filters active.")
