"""Shared account identity normalization helpers."""

from __future__ import annotations

import re
from typing import Any

from services.errors import ValidationError


_USERNAME_PATTERN = re.compile(r"^[a-z0-9._-]{3,30}$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_username(value: Any) -> str:
    """Lowercase and strip a username, dropping a leading @."""
    text = str(value or "").strip().lower()
    if text.startswith("@"):
        text = text[1:]
    return text


def normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


def validate_username(value: Any) -> str:
    username = normalize_username(value)
    if not _USERNAME_PATTERN.match(username):
        raise ValidationError(
            "username must be 3-30 characters of letters, digits, '.', '_' or '-'"
        )
    return username


def validate_email(value: Any) -> str:
    email = normalize_email(value)
    if not _EMAIL_PATTERN.match(email):
        raise ValidationError("email is not valid")
    return email
