from __future__ import annotations

import re
import uuid
from typing import Optional, Type, TypeVar
from enum import Enum

from ..core.constants import MAX_FULL_NAME_LENGTH, MIN_FULL_NAME_LENGTH, MIN_PASSWORD_LENGTH
from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def text_field(value, field_name: str) -> str:
    """JSON fields may arrive as numbers or objects; only strings are accepted."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    value = text_field(value, field_name)
    if len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def normalize_email(value: Optional[str]) -> str:
    email = text_field(value, "Email").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email address")
    return email


def require_strong_password(value: Optional[str]) -> str:
    password = require_min_length(value, "Password", MIN_PASSWORD_LENGTH)
    if not re.search(r"[a-z]", password) or not re.search(r"[A-Z]", password) or not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one uppercase letter, one lowercase letter, and one number")
    return password


def optional_full_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    name = str(value).strip()
    if not (MIN_FULL_NAME_LENGTH <= len(name) <= MAX_FULL_NAME_LENGTH):
        raise ValidationError(
            f"Full name must be between {MIN_FULL_NAME_LENGTH} and {MAX_FULL_NAME_LENGTH} characters"
        )
    return name


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}. Allowed: {allowed}")


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True
