"""Authentication blueprint providing register and login endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request

from services import auth_service
from utils.auth import current_identity, token_required
from utils.request_validation import parse_json_request, string_field

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new user with a name, email, password, and optional role."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    full_name = string_field(payload, "fullName", "FullName")

    result = auth_service.register(
        full_name=full_name,
        email=string_field(payload, "email"),
        password=string_field(payload, "password", strip=False),
        role=string_field(payload, "role", default=None),
    )

    return (
        jsonify(
            {
                "message": "User registered successfully",
                "token": result.token,
                "userId": result.user_id,
                "role": result.role,
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a session token."""
    payload = parse_json_request(request, required_keys=("email", "password"))

    result = auth_service.login(
        email=string_field(payload, "email"),
        password=string_field(payload, "password", strip=False),
        role=string_field(payload, "role", default=None),
    )

    return (
        jsonify(
            {
                "message": "Login successful",
                "token": result.token,
                "userId": result.user_id,
                "role": result.role,
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/me", methods=["GET"])
@token_required
def me() -> tuple:
    """Return the identity embedded in the caller's session token."""
    identity = current_identity()
    return (
        jsonify({"userId": identity.user_id, "role": identity.role, "email": identity.email}),
        HTTPStatus.OK,
    )
