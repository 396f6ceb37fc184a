# grocery/utils/logging.py
import logging
import re

from grocery.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class RedactingFilter(logging.Filter):
    """Masks bearer tokens, passwords and phone numbers before a record is emitted."""

    PATTERNS = [
        (re.compile(r"(Bearer\s+)[A-Za-z0-9_\-.]+", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"(password[\"']?\s*[:=]\s*[\"']?)[^\s\"',]+", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"\+?\d[\d\s\-]{8,}\d"), "[REDACTED_PHONE]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for pattern, replacement in self.PATTERNS:
            message = pattern.sub(replacement, message)
        record.msg = message
        record.args = None
        return True


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel((level or LOG_LEVEL).upper())

    if any(getattr(h, "_grocery_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.addFilter(RedactingFilter())
    handler._grocery_handler = True
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
