"""Admin blueprint for listing, editing and deleting users."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.user import ROLES, User
from services.auth_service import normalize_email
from utils.auth import admin_required, role_required
from utils.request_validation import parse_json_request, string_field

admin_bp = Blueprint("admin", __name__)


def _get_user_or_404(email: str) -> User:
    user = User.query.filter_by(email=normalize_email(email)).first()
    if user is None:
        raise NotFound("User not found")
    return user


@admin_bp.route("/dashboard", methods=["GET"])
@role_required("admin")
def dashboard():
    return jsonify({"message": "Welcome to the admin dashboard"})


@admin_bp.route("/users", methods=["GET"])
@admin_required
def list_users():
    """Return every user without credentials."""

    users = User.query.order_by(User.created_at.asc()).all()
    return jsonify([user.to_dict() for user in users])


@admin_bp.route("/users/<string:email>", methods=["PUT"])
@admin_required
def update_user(email: str):
    """Update a user's display name and/or role."""

    user = _get_user_or_404(email)
    payload = parse_json_request(request)

    full_name = string_field(payload, "fullName", default=None)
    role = string_field(payload, "role", default=None)

    if full_name is not None:
        if not full_name:
            raise BadRequest("fullName must not be empty.")
        user.full_name = full_name

    if role is not None:
        role = role.lower()
        if role not in ROLES:
            raise BadRequest("Role must be one of: {}.".format(", ".join(ROLES)))
        user.role = role

    db.session.commit()
    current_app.logger.info("Updated user id=%s role=%s", user.id, user.role)
    return jsonify(user.to_dict())


@admin_bp.route("/users/<string:email>", methods=["DELETE"])
@admin_required
def delete_user(email: str):
    """Delete a user by email."""

    user = _get_user_or_404(email)
    user_id = user.id
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Deleted user id=%s", user_id)
    return jsonify({"message": "User deleted successfully"})
