from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, json_body, make_token_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    auth = container.auth_service

    @app.route("/auth/signup", methods=["POST"], endpoint="auth_signup")
    def signup():
        data = json_body()
        result = auth.signup(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name"),
        )
        return jsonify(result.to_dict()), 201

    @app.route("/auth/signin", methods=["POST"], endpoint="auth_signin")
    def signin():
        data = json_body()
        result = auth.signin(email=data.get("email", ""), password=data.get("password", ""))
        return jsonify(result.to_dict())

    @app.route("/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    def refresh():
        data = json_body()
        result = auth.refresh(refresh_token=data.get("refresh_token", ""))
        return jsonify(result.to_dict())

    @app.route("/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def forgot_password():
        data = json_body()
        token = auth.forgot_password(email=data.get("email", ""))
        body = {"message": "If an account exists for this email, a reset link has been sent."}
        if token and app.config.get("DEBUG", False):
            body["reset_token"] = token
        return jsonify(body)

    @app.route("/auth/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def reset_password():
        data = json_body()
        auth.reset_password(token=data.get("token", ""), password=data.get("password", ""))
        return jsonify({"message": "Password has been reset successfully"})

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @token_required
    def me():
        return jsonify({"user": current_user().to_public_dict()})

    @app.route("/auth/me", methods=["PUT"], endpoint="auth_update_me")
    @token_required
    def update_me():
        data = json_body()
        user = auth.update_profile(
            current_user().id,
            full_name=data.get("full_name"),
            password=data.get("password"),
        )
        return jsonify({"user": user.to_public_dict()})

    @app.route("/auth/signout", methods=["POST"], endpoint="auth_signout")
    @token_required
    def signout():
        data = json_body()
        auth.signout(user_id=current_user().id, refresh_token=data.get("refresh_token"))
        return jsonify({"message": "Signed out successfully"})

    @app.route("/auth/register-device", methods=["POST"], endpoint="auth_register_device")
    @token_required
    def register_device():
        data = json_body()
        auth.register_device(
            current_user().id,
            fcm_token=data.get("fcm_token", ""),
            platform=data.get("platform", ""),
        )
        return jsonify({"message": "Device registered successfully"})
