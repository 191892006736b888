"""
Logging setup for the MockMate API.

Console output always; a rotating file under LOG_DIR when one is configured.
Bearer tokens and Razorpay signatures are masked before any record is
written, so route code can log checkout callbacks and webhook bodies as-is.
"""
import logging
import re
import sys
from pathlib import Path
from typing import Any, Optional
from logging.handlers import RotatingFileHandler

REDACTED = "***REDACTED***"

LOG_FILE_NAME = "mockmate.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Matched as substrings of lower-cased dict keys
SENSITIVE_KEYS = (
    "password",
    "token",
    "secret",
    "signature",
    "api_key",
    "authorization",
    "database_url",
)

NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "razorpay", "httpx", "google_genai")

_MESSAGE_PATTERNS = (
    (re.compile(r"(Bearer\s+)[A-Za-z0-9\-_\.=]+"), r"\1" + REDACTED),
    (re.compile(r"(signature['\"]?\s*[:=]\s*['\"]?)[0-9a-fA-F]{32,}"), r"\1" + REDACTED),
)


class SecretMaskingFilter(logging.Filter):
    """Masks bearer tokens and signature hex digests in formatted messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = message
        for pattern, replacement in _MESSAGE_PATTERNS:
            masked = pattern.sub(replacement, masked)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs"):
    """
    Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown values mean INFO)
        log_dir: Directory for the rotating log file; empty or None logs to stdout only
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    masking = SecretMaskingFilter()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    console_handler.addFilter(masking)
    root.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.addFilter(masking)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _is_sensitive(key: Any) -> bool:
    return isinstance(key, str) and any(word in key.lower() for word in SENSITIVE_KEYS)


def sanitize_log_data(data: Any) -> Any:
    """
    Copy of a payload with sensitive values redacted.

    Walks nested dicts and lists (Razorpay notes, webhook entities); the
    input is not modified.
    """
    if isinstance(data, dict):
        return {
            key: REDACTED if _is_sensitive(key) and value is not None else sanitize_log_data(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [sanitize_log_data(item) for item in data]
    return data
