"""
Logging utilities with automatic credential redaction.
Ensures session tokens, admin tokens and database credentials never reach the logs.
"""

import logging
import re
from typing import Any

# Patterns to detect and redact sensitive information
SENSITIVE_PATTERNS = [
    # Tokens and passwords in JSON payloads
    (re.compile(r'"token":\s*"[^"]+'), '"token": "[REDACTED]'),
    (re.compile(r'"password":\s*"[^"]+'), '"password": "[REDACTED]'),
    (re.compile(r'"secret":\s*"[^"]+'), '"secret": "[REDACTED]'),
    # Authorization headers
    (re.compile(r'Authorization:\s*Bearer\s+\S+', re.IGNORECASE), 'Authorization: Bearer [REDACTED]'),
    (re.compile(r'Authorization:\s*\S+', re.IGNORECASE), 'Authorization: [REDACTED]'),
    (re.compile(r'\bBearer\s+[A-Za-z0-9._~+/=-]{8,}'), 'Bearer [REDACTED]'),
    # Session and admin cookies
    (re.compile(r'(auth_token|admin_auth_token)=[^;\s]+'), r'\1=[REDACTED]'),
    # Bare JWTs (header.payload.signature)
    (re.compile(r'eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+'), '[REDACTED_JWT]'),
    # Password query/form parameters
    (re.compile(r'password=\S+', re.IGNORECASE), 'password=[REDACTED]'),
    # Database connection strings with credentials
    (re.compile(r'postgres(ql)?(\+\w+)?://[^:/@\s]+:[^@\s]+@'), 'postgresql://[REDACTED]:[REDACTED]@'),
]


def redact_sensitive_data(message: str) -> str:
    """
    Redact sensitive information from log messages.

    Args:
        message: Log message that may contain sensitive data

    Returns:
        Message with sensitive data replaced with [REDACTED]
    """
    redacted = message
    for pattern, replacement in SENSITIVE_PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFormatter(logging.Formatter):
    """Custom logging formatter that redacts sensitive information."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with sensitive data redacted."""
        formatted = super().format(record)
        return redact_sensitive_data(formatted)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with redacting formatter.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if no handlers exist
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = RedactingFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


def safe_repr(obj: Any, redact_keys: list[str] | None = None) -> str:
    """
    Create a safe string representation of an object with sensitive keys redacted.

    Args:
        obj: Object to represent
        redact_keys: Additional keys to redact (e.g., ['phone_e164'])

    Returns:
        String representation with sensitive data redacted
    """
    if redact_keys is None:
        redact_keys = []

    default_redact_keys = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]
    all_redact_keys = set(default_redact_keys + [k.lower() for k in redact_keys])

    if isinstance(obj, dict):
        safe_dict = {}
        for key, value in obj.items():
            if any(k in str(key).lower() for k in all_redact_keys):
                safe_dict[key] = "[REDACTED]"
            else:
                safe_dict[key] = safe_repr(value, redact_keys)
        return str(safe_dict)
    elif isinstance(obj, (list, tuple)):
        return str([safe_repr(item, redact_keys) for item in obj])
    else:
        return str(obj)
