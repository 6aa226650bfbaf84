"""Small Flask helpers shared by the JSON controllers."""

from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import g, request

from ..core.exceptions import ValidationError


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def make_token_required(auth_service):
    """Build a decorator that authenticates the bearer token and stores the user on ``g``."""

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = auth_service.authenticate_token(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    return token_required


def current_user():
    return g.current_user


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def json_payload() -> Any:
    return request.get_json(silent=True)


def int_arg(name: str, default: int, *, minimum: int = 1, maximum: Optional[int] = None) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value
