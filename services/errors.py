"""Domain failures raised by the auth service.

Each failure is an HTTP exception so the application's JSON error handler
renders it with the right status code and a human-readable message.
"""

from __future__ import annotations

from werkzeug.exceptions import (
    BadRequest,
    Forbidden as _Forbidden,
    InternalServerError,
    NotFound,
    Unauthorized as _Unauthorized,
)


class DuplicateEmail(BadRequest):
    description = "User already exists"


class InvalidCredentials(BadRequest):
    description = "Invalid email or password"


class UnauthorizedRole(_Forbidden):
    description = "Unauthorized login attempt"


class UserNotFound(NotFound):
    description = "User not found."


class InvalidOrExpiredToken(BadRequest):
    description = "Invalid or expired token."


class Unauthorized(_Unauthorized):
    description = "Unauthorized access"


class Forbidden(_Forbidden):
    description = "Access denied"


class ServerError(InternalServerError):
    description = "Server error, please try again."


__all__ = [
    "DuplicateEmail",
    "InvalidCredentials",
    "UnauthorizedRole",
    "UserNotFound",
    "InvalidOrExpiredToken",
    "Unauthorized",
    "Forbidden",
    "ServerError",
]
