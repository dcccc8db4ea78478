"""
Core Utilities.

Shared utility functions used across the backend.
"""

import re
import secrets
import string
from datetime import datetime, timezone

NOTE_ID_ALPHABET = string.ascii_lowercase + string.digits
NOTE_ID_LENGTH = 26

SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 50


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application are timezone-naive and
    assumed to be UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_note_id() -> str:
    """Random lowercase alphanumeric slug for notes saved without a key or url."""
    return "".join(secrets.choice(NOTE_ID_ALPHABET) for _ in range(NOTE_ID_LENGTH))


def clean_slug(value: str) -> str:
    """Drop leading slashes and every character that is not a letter, digit, '-' or '_'."""
    return re.sub(r"[^A-Za-z0-9_-]", "", value.strip().lstrip("/"))
