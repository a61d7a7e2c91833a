"""Field-level rules shared by the user and task handlers."""

import re
from uuid import UUID

from .exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def parse_resource_id(value: str, label: str) -> str:
    """Return the canonical form of a resource id or fail with a 400.

    Runs before any lookup, so a malformed id never becomes a 404.
    """
    try:
        return str(UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(f"Invalid {label} ID")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def clean_name(name: str) -> str:
    if not name.strip():
        raise ValidationError("Name must be at least 1 character")
    return name.strip()


def clean_email(email: str) -> str:
    if not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email format")
    return normalize_email(email)


def check_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password
