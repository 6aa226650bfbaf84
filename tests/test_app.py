from __future__ import annotations

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from config import get_settings_module


@pytest.mark.parametrize(
    "env, module",
    [
        (None, "config.development"),
        ("prod", "config.production"),
        ("Production", "config.production"),
        ("test", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, module):
    if env is None:
        monkeypatch.delenv("APP_ENV", raising=False)
    else:
        monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == module


def test_error_handlers(app):
    def duplicate():
        raise IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    def bad_reference():
        raise IntegrityError(msg="FK failed", errno=errorcode.ER_NO_REFERENCED_ROW_2)

    def crash():
        raise RuntimeError("boom")

    app.add_url_rule("/_duplicate", "duplicate", duplicate)
    app.add_url_rule("/_bad_reference", "bad_reference", bad_reference)
    app.add_url_rule("/_crash", "crash", crash)
    client = app.test_client()

    assert client.get("/_duplicate").status_code == 409
    assert client.get("/_duplicate").get_json() == {"error": "Resource already exists"}
    assert client.get("/_bad_reference").get_json() == {"error": "Invalid reference"}

    crashed = client.get("/_crash")
    assert crashed.status_code == 500
    assert crashed.get_json() == {"error": "Internal server error"}


def test_method_not_allowed_is_json(client):
    resp = client.delete("/auth/signin")

    assert resp.status_code == 405
    assert "error" in resp.get_json()
