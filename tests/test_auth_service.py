from __future__ import annotations

from datetime import timedelta

import pytest

from src.timeharbor.timeharbor.core.enums import DevicePlatform, UserStatus
from src.timeharbor.timeharbor.core.exceptions import AuthenticationError, ValidationError
from src.timeharbor.timeharbor.users.service import DUPLICATE_EMAIL_MESSAGE, INVALID_CREDENTIALS_MESSAGE
from src.timeharbor.timeharbor.users.tokens import AccessTokenSigner

from tests.conftest import PASSWORD


def test_signup_normalizes_email_and_marks_online(container):
    result = container.auth_service.signup(email="  Bob@Example.COM ", password=PASSWORD, full_name="Bob")

    assert result.user.email == "bob@example.com"
    assert result.user.status == UserStatus.ONLINE
    assert result.session.expires_in == 3600
    assert container.auth_service.authenticate_token(result.session.access_token).id == result.user.id


def test_signup_rejects_duplicate_email(container, signup):
    signup("bob@example.com")

    with pytest.raises(ValidationError) as exc:
        container.auth_service.signup(email="bob@example.com", password=PASSWORD)
    assert str(exc.value) == DUPLICATE_EMAIL_MESSAGE


@pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
def test_signup_rejects_weak_passwords(container, password):
    with pytest.raises(ValidationError):
        container.auth_service.signup(email="weak@example.com", password=password)


def test_signin_with_wrong_password_is_rejected(container, signup):
    signup("bob@example.com")

    with pytest.raises(ValidationError) as exc:
        container.auth_service.signin(email="bob@example.com", password="Wrong1234")
    assert str(exc.value) == INVALID_CREDENTIALS_MESSAGE


def test_signin_requires_both_fields(container):
    with pytest.raises(ValidationError, match="Email and password are required"):
        container.auth_service.signin(email="", password="")


def test_refresh_rotates_the_token(container, signup):
    signup("bob@example.com")
    first = container.auth_service.signin(email="bob@example.com", password=PASSWORD)

    second = container.auth_service.refresh(refresh_token=first.session.refresh_token)
    assert second.session.refresh_token != first.session.refresh_token

    # The old token was consumed by the rotation.
    with pytest.raises(AuthenticationError, match="Invalid or expired refresh token"):
        container.auth_service.refresh(refresh_token=first.session.refresh_token)


def test_refresh_rejects_revoked_token(container, signup, fixed_now):
    signup("bob@example.com")
    session = container.auth_service.signin(email="bob@example.com", password=PASSWORD).session

    stored = container.refresh_tokens_repo.get_by_token(session.refresh_token)
    assert stored.expires_at == fixed_now + timedelta(days=7)

    container.refresh_tokens_repo.revoke(session.refresh_token)
    with pytest.raises(AuthenticationError):
        container.auth_service.refresh(refresh_token=session.refresh_token)


def test_signout_revokes_refresh_token_and_sets_offline(container, signup):
    user, _ = signup("bob@example.com")
    session = container.auth_service.signin(email="bob@example.com", password=PASSWORD).session

    container.auth_service.signout(user_id=user.id, refresh_token=session.refresh_token)

    assert container.refresh_tokens_repo.get_by_token(session.refresh_token).revoked
    assert container.users_repo.get_by_id(user.id).status == UserStatus.OFFLINE


def test_authenticate_token_errors():
    signer = AccessTokenSigner("secret", ttl_seconds=-1)
    token = signer.issue(user_id="u1", email="u1@example.com")

    with pytest.raises(AuthenticationError, match="Token expired"):
        signer.verify(token)
    with pytest.raises(AuthenticationError, match="Invalid token"):
        AccessTokenSigner("other-secret", ttl_seconds=60).verify(token)


def test_authenticate_token_requires_a_token(container):
    with pytest.raises(AuthenticationError, match="Access token required"):
        container.auth_service.authenticate_token(None)


def test_password_reset_flow(container, signup):
    user, _ = signup("bob@example.com")
    session = container.auth_service.signin(email="bob@example.com", password=PASSWORD).session

    token = container.auth_service.forgot_password(email="BOB@example.com")
    assert token

    container.auth_service.reset_password(token=token, password="NewSecret456")

    # All sessions are revoked and the token is single use.
    assert container.refresh_tokens_repo.get_by_token(session.refresh_token).revoked
    assert container.users_repo.get_by_id(user.id).reset_token is None
    with pytest.raises(ValidationError, match="Invalid or expired reset token"):
        container.auth_service.reset_password(token=token, password="NewSecret456")

    assert container.auth_service.signin(email="bob@example.com", password="NewSecret456").user.id == user.id


def test_forgot_password_for_unknown_email_returns_none(container):
    assert container.auth_service.forgot_password(email="nobody@example.com") is None


def test_update_profile_requires_a_change(container, signup):
    user, _ = signup("bob@example.com")

    with pytest.raises(ValidationError, match="Nothing to update"):
        container.auth_service.update_profile(user.id)

    updated = container.auth_service.update_profile(user.id, full_name="Robert")
    assert updated.full_name == "Robert"


def test_register_device_lowercases_platform(container, signup, fixed_now):
    user, _ = signup("bob@example.com")

    container.auth_service.register_device(user.id, fcm_token="device-1", platform="IOS")

    stored = container.users_repo.get_by_id(user.id)
    assert stored.fcm_token == "device-1"
    assert stored.fcm_platform == DevicePlatform.IOS
    assert stored.fcm_updated_at == fixed_now

    with pytest.raises(ValidationError, match="Invalid platform"):
        container.auth_service.register_device(user.id, fcm_token="device-1", platform="windows")


def test_cleanup_expired_tokens(container, signup, fixed_now):
    signup("bob@example.com")
    session = container.auth_service.signin(email="bob@example.com", password=PASSWORD).session
    container.refresh_tokens_repo.revoke(session.refresh_token)

    deleted = container.auth_service.cleanup_expired_tokens(now=fixed_now + timedelta(days=8))

    assert deleted == 2
    assert container.refresh_tokens_repo.all() == []
