"""
Short random identifiers for rows created by these services.
"""

import secrets

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def generate_id(size: int = 10) -> str:
    """Generate an alphanumeric id; size is clamped to 4..64."""
    length = max(4, min(64, int(size or 10)))
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
