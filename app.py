"""TaskFlow API application factory."""

import logging
import os
import uuid

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.admin import admin_bp
from routes.auth import auth_bp
from routes.password import password_bp
from services.mailer import AbstractMailer, init_mailer

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(
    config_class: type[Config] = Config, mailer: AbstractMailer | None = None
) -> Flask:
    """Create and configure the Flask application.

    ``mailer`` overrides the backend selected by ``MAIL_BACKEND``.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(getattr(logging, level_name, logging.INFO))

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    init_mailer(app, mailer)

    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )
    _init_rate_limits(app)

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(password_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    _install_request_ids(app)
    _install_error_handlers(app)

    app.logger.debug(
        "TaskFlow app created (admin auth required=%s)",
        app.config.get("ADMIN_API_REQUIRE_AUTH"),
    )
    return app


def _init_rate_limits(app: Flask) -> None:
    # Each app gets its own key prefix so test apps never share counters.
    global limiter
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=app.config.get("RATELIMIT_STORAGE_URI", "memory://"),
        headers_enabled=app.config.get("RATELIMIT_HEADERS_ENABLED", True),
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix


def _current_request_id() -> str:
    return g.get("request_id") or str(uuid.uuid4())


def _install_request_ids(app: Flask) -> None:
    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

    @app.after_request
    def _echo_request_id(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response


def _error_response(status: int, name: str, message: str, headers=None):
    request_id = _current_request_id()
    response = jsonify(
        {
            "error": name,
            "message": message,
            "detail": message,
            "request_id": request_id,
        }
    )
    response.status_code = status
    if headers:
        for key, value in headers:
            if key.lower() not in {"content-type", "content-length"}:
                response.headers[key] = value
    response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _install_error_handlers(app: Flask) -> None:
    """Render every error as ``{error, message, detail, request_id}``."""

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        if error.code and error.code >= 500:
            app.logger.error("%s: %s", error.name, error.description)
        # Keep headers such as Retry-After and WWW-Authenticate.
        return _error_response(
            error.code or 500,
            error.name,
            error.description,
            headers=error.get_response().headers.items(),
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(
            500, "Internal Server Error", "An unexpected error occurred."
        )


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
