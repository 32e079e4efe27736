"""Password reset blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from services import auth_service
from utils.request_validation import parse_json_request, string_field

password_bp = Blueprint("password", __name__)


@password_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    """Mail a time-boxed reset link to a registered user."""

    payload = parse_json_request(request, required_keys=("email",))
    auth_service.request_password_reset(string_field(payload, "email"))
    return jsonify({"message": "Password reset link sent to your email."})


@password_bp.route("/reset-password", methods=["POST"])
def reset_password():
    """Set a new password using a live reset token."""

    payload = parse_json_request(request, required_keys=("token", "password"))
    auth_service.reset_password(
        string_field(payload, "token"), string_field(payload, "password", strip=False)
    )
    return jsonify({"message": "Password reset successful!"})
